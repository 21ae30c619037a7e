# Run with: uvicorn matchpass.main:create_app --factory

import logging

from fastapi import FastAPI

from matchpass.api.errors import register_exception_handlers
from matchpass.api.routes.routes import router
from matchpass.application.container import Services, build_services, build_store
from matchpass.config import Settings, load_settings
from matchpass.infrastructure.db.models import Base
from matchpass.infrastructure.db.session import wait_for_db

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    services: Services | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if services is None:
        store, engine = build_store(settings)
        services = build_services(store, settings, engine=engine)

    app = FastAPI(title="MatchPass")
    app.state.settings = settings
    app.state.services = services
    app.include_router(router)
    register_exception_handlers(app)

    @app.on_event("startup")
    def on_startup() -> None:
        if services.engine is None:
            logger.info("Using in-memory store.")
            return
        wait_for_db(
            services.engine,
            max_retries=settings.db_connect_max_retries,
            retry_delay_seconds=settings.db_connect_retry_delay,
        )
        Base.metadata.create_all(bind=services.engine)

    return app
