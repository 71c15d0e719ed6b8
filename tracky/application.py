"""Application factory: builds settings-dependent state and wires routers and middleware."""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import Engine

from tracky.api.v1 import files_router
from tracky.api.v1 import router as v1_router
from tracky.core.config import Settings, get_settings
from tracky.core.database import build_engine, build_session_factory, init_db
from tracky.core.identity import build_verifier
from tracky.core.middleware import IdentityMiddleware, log_requests

logger = logging.getLogger(__name__)

STATIC_PREFIX = "/static"


def public_paths(settings: Settings) -> tuple[frozenset[str], tuple[str, ...]]:
    """Paths reachable without identity: (exact matches, directory prefixes)."""
    prefix = settings.API_V1_PREFIX
    exact = frozenset(
        {
            "/",
            f"{prefix}/signup",
            f"{prefix}/login",
            f"{prefix}/health",
            "/docs",
            "/docs/oauth2-redirect",
            "/redoc",
            "/openapi.json",
        }
    )
    return exact, (f"{STATIC_PREFIX}/",)


def create_app(settings: Settings | None = None, engine: Engine | None = None) -> FastAPI:
    """
    Build a Tracky app. Every piece of per-process state (engine, session
    factory, identity verifier and its secret or session registry) is created
    here and hung off app.state; nothing lives in module globals.
    """
    settings = settings or get_settings()
    engine = engine or build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
    if settings.DB_AUTO_CREATE:
        init_db(engine)

    if settings.AUTH_STRATEGY == "signed" and settings.uses_dev_cookie_secret:
        logger.warning(
            "COOKIE_SECRET is the built-in development value; anyone can forge auth cookies. "
            "Set COOKIE_SECRET before exposing this server."
        )

    app = FastAPI(
        title="Tracky API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.verifier = build_verifier(settings)

    exact, prefixes = public_paths(settings)
    # Last added runs first: CORS -> request log -> identity -> routes
    app.add_middleware(
        IdentityMiddleware,
        verifier=app.state.verifier,
        public_paths=exact,
        public_prefixes=prefixes,
    )
    app.middleware("http")(log_requests)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)
    app.include_router(files_router, tags=["images"])

    if os.path.isdir(settings.STATIC_DIR):
        app.mount(STATIC_PREFIX, StaticFiles(directory=settings.STATIC_DIR), name="static")

    index_path = os.path.join(settings.STATIC_DIR, "index.html")

    @app.get("/", response_model=None)
    def root() -> FileResponse | dict[str, str]:
        """Landing page when the web client is present; minimal payload for discovery otherwise."""
        if os.path.isfile(index_path):
            return FileResponse(index_path)
        return {"message": "Tracky API"}

    logger.info(
        "Tracky app created",
        extra={"app_env": settings.APP_ENV, "auth_strategy": settings.AUTH_STRATEGY},
    )
    return app
