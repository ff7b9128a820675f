"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from food_miniapp.api.preferences import router as preferences_router
from food_miniapp.api.suggestions import router as suggestions_router
from food_miniapp.app_logging import configure_logging
from food_miniapp.containers import AppContainer
from food_miniapp.domain.contract import EventLog


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    def log_preference_updates(logs: list[EventLog]) -> None:
        for log in logs:
            logger.info(
                "Preferences updated: fid=%s block=%s tx=%s",
                log.args.get("fid"),
                log.block_number,
                log.transaction_hash,
            )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        subscription = None
        if state_container.settings.watch_preference_events:
            subscription = state_container.preference_service.on_preferences_updated(
                log_preference_updates
            )
        yield
        if subscription is not None:
            await subscription.cancel()
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(preferences_router)
    app.include_router(suggestions_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
