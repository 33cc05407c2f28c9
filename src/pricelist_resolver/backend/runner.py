"""
Blocking resolver - Serves lookups to synchronous callers (the Streamlit UI).

The backend is opened once on a dedicated event loop running in a daemon
thread, so its HTTP client and session outlive individual lookups. Lookups
are submitted to that loop and waited on.
"""
import asyncio
import logging
import threading
from contextlib import AsyncExitStack
from typing import AsyncContextManager, Optional

from ..engine.models import ResolutionResult
from ..engine.resolver import ProductResolver
from .base import PricingBackend

logger = logging.getLogger(__name__)


class BlockingResolver:
    """Owns one backend and resolves barcodes from synchronous code."""

    def __init__(self, backend_context: AsyncContextManager[PricingBackend], timeout: float = 120.0):
        self.timeout = timeout
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._loop.run_forever,
            name="pricelist-resolver-loop",
            daemon=True,
        )
        self._thread.start()
        self._stack = AsyncExitStack()

        try:
            self.backend: PricingBackend = self._run(self._stack.enter_async_context(backend_context))
        except BaseException:
            self._stop_loop()
            raise

        self.resolver = ProductResolver(self.backend)
        logger.info(f"[RUNNER] Opened the {self.backend.name} backend for synchronous lookups")

    def _run(self, coro):
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result(timeout=self.timeout)

    def _stop_loop(self):
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=self.timeout)
        self._loop.close()

    @property
    def closed(self) -> bool:
        return self._loop.is_closed()

    def resolve(self, code: str) -> Optional[ResolutionResult]:
        """Resolve a barcode, blocking until the result is ready."""
        if self.closed:
            raise RuntimeError("BlockingResolver is closed")
        return self._run(self.resolver.resolve(code))

    def describe(self) -> dict:
        return self.backend.describe()

    def close(self):
        """Release the backend and stop the loop thread."""
        if self.closed:
            return
        try:
            self._run(self._stack.aclose())
        finally:
            self._stop_loop()
            logger.info("[RUNNER] Backend closed")
