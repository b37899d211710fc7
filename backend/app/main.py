import logging
from datetime import timedelta

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .api import auth as auth_api
from .api import freelancers as freelancers_api
from .api import job as job_api
from .api import profile as profile_api
from .api import support as support_api
from .config import Settings, load_settings
from .database import build_engine, build_session_factory, init_db
from .utils.error_handlers import AppError, register_exception_handlers
from .utils.jwt import TokenService

logger = logging.getLogger(__name__)

_default_origins = ["http://localhost:5173", "http://127.0.0.1:5173", "http://localhost:8080"]


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API with its database and token service wired from `settings`."""
    settings = settings or load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Freelance Marketplace API")

    engine = build_engine(settings.database_url)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.token_service = TokenService(
        settings.secret_key,
        ttl=timedelta(days=settings.token_ttl_days),
    )
    app.state.db_init_error = None

    app.include_router(auth_api.router)
    app.include_router(profile_api.router)
    app.include_router(freelancers_api.router)
    app.include_router(job_api.router)
    app.include_router(support_api.router)

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[*_default_origins, *settings.frontend_origins],
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def on_startup() -> None:
        try:
            init_db(engine)
            app.state.db_init_error = None
        except SQLAlchemyError as e:
            logger.exception("Database init failed: %s", e)
            app.state.db_init_error = str(e)

    @app.get("/api/health")
    def health_check():
        """Health check endpoint."""
        return {"message": "Server is running"}

    @app.get("/api/db/health")
    def db_health():
        if app.state.db_init_error:
            logger.error("DB init failed: %s", app.state.db_init_error)
            raise AppError("Database is unavailable", status_code=503)

        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error("DB connection failed: %s", e)
            raise AppError("Database is unavailable", status_code=503) from e

        return {"status": "ok"}

    return app


app = create_app()
