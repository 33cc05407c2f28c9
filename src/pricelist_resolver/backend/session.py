"""
Session Provider - Lazily authenticates and memoizes the backend session.

One provider is created per backend and injected where it is needed; there is
no module-level session. The handle is never refreshed on its own: callers
that detect an expired session call reset() and the next ensure() logs in
again.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class SessionProvider:
    """
    Holds the authenticated session handle (the backend user id).

    Concurrent first-time callers share a single login through a lock; without
    it they would each authenticate, which is redundant but harmless.
    """

    def __init__(self, authenticate: Callable[[], Awaitable[int]]):
        self._authenticate = authenticate
        self._handle: Optional[int] = None
        self._lock = asyncio.Lock()
        self.login_count = 0

    @property
    def is_authenticated(self) -> bool:
        return self._handle is not None

    @property
    def handle(self) -> Optional[int]:
        return self._handle

    async def ensure(self) -> int:
        """Return the session handle, authenticating first if there is none."""
        if self._handle is not None:
            return self._handle

        async with self._lock:
            # Another task may have logged in while we waited
            if self._handle is None:
                logger.info("[SESSION] No session handle, authenticating")
                self._handle = await self._authenticate()
                self.login_count += 1
                logger.info(f"[SESSION] Authenticated as uid={self._handle}")
        return self._handle

    def reset(self):
        """Drop the current handle so the next ensure() logs in again."""
        if self._handle is not None:
            logger.info("[SESSION] Session handle reset")
        self._handle = None
