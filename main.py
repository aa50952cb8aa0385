from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from notifier.config import Settings, get_settings
from notifier.container import build_dispatch_service
from notifier.infrastructure.database import SessionLocal, engine, initialize_database
from notifier.infrastructure.email import MailTransport
from notifier.infrastructure.push import PushTransport
from notifier.interfaces.api.routes import register_routes
from notifier.logging_config import setup_logging


def create_app(
    *,
    settings: Settings | None = None,
    bind: Engine | None = None,
    session_factory: sessionmaker[Session] | None = None,
    push_transport: PushTransport | None = None,
    mail_transport: MailTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or get_settings()
    bind = bind or engine
    session_factory = session_factory or SessionLocal

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Prepare the schema, start the dispatch workers and stop them on exit."""

        setup_logging(settings.log_level)
        initialize_database(bind)
        service = build_dispatch_service(
            settings,
            session_factory,
            push_transport=push_transport,
            mail_transport=mail_transport,
        )
        service.start()
        app.state.dispatch_service = service
        try:
            yield
        finally:
            service.shutdown(wait=True)
            app.state.dispatch_service = None
            bind.dispose()

    app = FastAPI(title="Publish notifier", lifespan=lifespan)
    register_routes(app)
    return app


app = create_app()
