from typing import Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from auth.routes import router as auth_router
from transactions.transaction_routes import router as transaction_router
from categories.category_routes import router as category_router
from budgets.budget_routes import router as budget_router
from analytics.analytics_routes import router as analytics_router
from errors.handlers import register_exception_handlers
from storage.factory import build_storage
import logging
from settings.config import settings
from settings.logging_config import configure_logging

logger = logging.getLogger(__name__)


def get_app() -> FastAPI:
    configure_logging()
    logger.info("Starting %s", settings.APP_NAME)
    app = FastAPI(title=settings.APP_NAME)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # Storage lifecycle
    @app.on_event("startup")
    async def on_startup() -> None:
        logger.info("Initializing %s storage", settings.STORAGE_BACKEND)
        await build_storage().initialize()

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        logger.info("Closing storage")
        await build_storage().close()

    # Routers
    app.include_router(auth_router)
    app.include_router(transaction_router)
    app.include_router(category_router)
    app.include_router(budget_router)
    app.include_router(analytics_router)
    logger.info("Routers initialized successfully")

    # Health
    @app.get("/health")
    async def health_check() -> Dict[str, str]:
        return {"status": "ok"}

    return app


# ASGI app instance
app = get_app()
