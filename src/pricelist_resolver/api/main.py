from contextlib import asynccontextmanager, AsyncExitStack
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pricelist_resolver import __version__
from pricelist_resolver.backend import PricingBackend, open_backend
from pricelist_resolver.config import configure_logging, get_settings, Settings
from pricelist_resolver.engine import ProductResolver
from pricelist_resolver.api.products_api import router as products_router

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, backend: Optional[PricingBackend] = None) -> FastAPI:
    """
    Build the API application.

    When no backend is passed, the configured one is opened at startup and
    closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with AsyncExitStack() as stack:
            active = backend
            if active is None:
                app_settings = settings or get_settings()
                configure_logging(app_settings.log_level)
                active = await stack.enter_async_context(open_backend(app_settings))
            app.state.backend = active
            app.state.resolver = ProductResolver(active)
            logger.info(f"[API] Serving rule lookups from the {active.name} backend")
            yield

    app = FastAPI(
        title="Pricelist Resolver API",
        description="Resolves the price-list rules that apply to a scanned product",
        version=__version__,
        lifespan=lifespan,
    )

    # Enable CORS for scanner and frontend clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(products_router)

    @app.get("/")
    async def root():
        return {"status": "online", "message": "Pricelist Resolver API Active"}

    @app.get("/system/status")
    async def get_status():
        backend_info = app.state.backend.describe()
        return {
            "engine_active": True,
            "version": __version__,
            **backend_info,
        }

    return app


app = create_app()
