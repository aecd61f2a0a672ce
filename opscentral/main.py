import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import FastAPI
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from opscentral.core.config import settings
from opscentral.core.errors import install_error_handlers
from opscentral.database import Base, SessionLocal, check_database_connection, engine
from opscentral.repositories.table_client import TableClient
from opscentral.routes.approvals import router as approvals_router
from opscentral.routes.dashboard import router as dashboard_router
from opscentral.routes.jobs import router as jobs_router
from opscentral.routes.notifications import router as notifications_router
from opscentral.routes.resources import router as resources_router
from opscentral.routes.sessions import router as sessions_router
from opscentral.routes.settings import router as settings_router
from opscentral.services.app_state import AppState
from opscentral.services.poller import PollerRegistry

logger = logging.getLogger(__name__)


def create_app(
    session_factory: Optional[Callable[[], Session]] = None,
    bind: Optional[Engine] = None,
    *,
    poll_interval_seconds: Optional[float] = None,
) -> FastAPI:
    session_factory = session_factory or SessionLocal
    bind = bind or engine

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.AUTO_CREATE_TABLES:
            Base.metadata.create_all(bind=bind)
        state = AppState(TableClient(session_factory))
        await state.refresh_all()
        app.state.app_state = state
        app.state.pollers = PollerRegistry(state, poll_interval_seconds)
        logger.info("%s started env=%s", settings.APP_NAME, settings.ENV)
        try:
            yield
        finally:
            await app.state.pollers.shutdown()
            logger.info("%s stopped", settings.APP_NAME)

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    install_error_handlers(app)

    app.include_router(jobs_router)
    app.include_router(approvals_router)
    app.include_router(notifications_router)
    app.include_router(sessions_router)
    app.include_router(settings_router)
    app.include_router(resources_router)
    app.include_router(dashboard_router)

    @app.get("/health")
    def health() -> dict[str, str]:
        database = "connected"
        status_value = "healthy"
        try:
            check_database_connection(bind)
        except Exception:
            database = "disconnected"
            status_value = "degraded"
        return {"status": status_value, "database": database, "environment": settings.ENV}

    @app.get("/heartbeat")
    def heartbeat() -> dict[str, str]:
        return {
            "service": settings.APP_NAME,
            "status": "alive",
            "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
