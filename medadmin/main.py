"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session, sessionmaker

from medadmin.api.routes import router as api_router
from medadmin.core.config import Settings, get_settings
from medadmin.core.database import build_engine, build_session_factory
from medadmin.core.errors import register_exception_handlers
from medadmin.core.logging import configure_logging
from medadmin.services.ai_service import AIServiceClient
from medadmin.services.audit import AuditRecorder
from medadmin.services.notifications import LogNotifier, Notifier


def create_app(
    settings: Settings | None = None,
    *,
    session_factory: sessionmaker[Session] | None = None,
    ai_service: AIServiceClient | None = None,
    notifier: Notifier | None = None,
    audit_recorder: AuditRecorder | None = None,
) -> FastAPI:
    """
    Build the application. Collaborators default to ones built from settings;
    tests pass their own.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    if session_factory is None:
        session_factory = build_session_factory(build_engine(settings))

    app = FastAPI(
        title="BLOX Medical Admin API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.audit_recorder = audit_recorder or AuditRecorder(session_factory)
    app.state.ai_service = ai_service or AIServiceClient.from_settings(settings)
    app.state.notifier = notifier or LogNotifier(include_links=settings.APP_ENV == "dev")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.APP_BASE_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "BLOX Medical Admin API"}

    return app
