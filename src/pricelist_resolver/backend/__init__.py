"""Backend subpackage - remote data access for the resolver."""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

from ..config.settings import Settings, get_settings
from .base import PricingBackend
from .odoo import OdooBackend, OdooRPC
from .runner import BlockingResolver
from .session import SessionProvider
from .snapshot import SnapshotBackend

__all__ = [
    'BlockingResolver',
    'PricingBackend',
    'OdooBackend',
    'OdooRPC',
    'SessionProvider',
    'SnapshotBackend',
    'open_backend',
]


@asynccontextmanager
async def open_backend(settings: Optional[Settings] = None) -> AsyncIterator[PricingBackend]:
    """
    Build the configured backend and release its resources on exit.

    PRICELIST_BACKEND=odoo talks JSON-RPC to ODOO_URL;
    PRICELIST_BACKEND=snapshot reads SNAPSHOT_PATH.
    """
    settings = settings or get_settings()

    if settings.backend == 'snapshot':
        if settings.snapshot_path is None:
            raise RuntimeError("Missing required environment variables: SNAPSHOT_PATH")
        yield SnapshotBackend.from_file(settings.snapshot_path, active_field=settings.pricelist_active_field)
        return

    if settings.backend != 'odoo':
        raise RuntimeError(f"Unknown PRICELIST_BACKEND '{settings.backend}' (expected 'odoo' or 'snapshot')")

    async with httpx.AsyncClient(timeout=httpx.Timeout(settings.odoo_timeout)) as client:
        yield OdooBackend.from_settings(settings, client)
