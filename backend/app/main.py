# app/main.py
import datetime as dt
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import Settings, settings
from app.core.bootstrap import ensure_default_admin
from app.core.cache import NullCache, TTLCache
from app.core.db import close_db, init_db
from app.core.errors import register_exception_handlers
from app.core.security import PasswordHasher, TokenService
from app.services.identity import AuthService, TortoiseCredentialStore
from app.services.storage import LocalBlobStorage

from app.api.v1.routers import admin, auth, company, files, offers, users, videos

logger = logging.getLogger("uvicorn.error")


def create_app(config: Settings | None = None) -> FastAPI:
    """
    Build the application and its shared components.

    Startup is refused (ConfigurationError) when the signing secret or the
    database URL is missing. The cache, hasher, token service, credential
    store and blob storage are created here and kept on app.state, so each
    app instance (and each test) gets its own.
    """
    config = config or settings
    config.ensure_ready()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_db(config.database_url, generate_schemas=config.db_generate_schemas)
        await ensure_default_admin(config, app.state.hasher)
        logger.info("[startup] revocation_check=%s identity_cache=%s",
                    config.revocation_check, config.identity_cache_enabled)
        try:
            yield
        finally:
            await close_db()

    app = FastAPI(title=config.APP_NAME, lifespan=lifespan)

    # CORS (with Cookie)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if config.identity_cache_enabled:
        cache = TTLCache(
            default_ttl=config.identity_cache_ttl_seconds,
            max_size=config.identity_cache_max_size,
        )
    else:
        cache = NullCache()

    hasher = PasswordHasher(rounds=config.bcrypt_rounds)
    tokens = TokenService(
        config.jwt_secret,
        ttl=dt.timedelta(minutes=config.access_token_expire_minutes),
        algorithm=config.jwt_algorithm,
    )
    blobs = LocalBlobStorage(config.upload_dir, url_prefix=config.upload_url_prefix)

    app.state.settings = config
    app.state.identity_cache = cache
    app.state.hasher = hasher
    app.state.tokens = tokens
    app.state.blobs = blobs
    app.state.auth = AuthService(
        store=TortoiseCredentialStore(),
        cache=cache,
        hasher=hasher,
        tokens=tokens,
        cache_ttl=config.identity_cache_ttl_seconds,
    )

    register_exception_handlers(app)

    # REST
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(users.router, prefix="/api/v1")
    app.include_router(company.router, prefix="/api/v1")
    app.include_router(offers.router, prefix="/api/v1")
    app.include_router(videos.router, prefix="/api/v1")
    app.include_router(files.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    # Uploaded blobs, read-only
    app.mount(config.upload_url_prefix, StaticFiles(directory=str(blobs.base_path)), name="uploads")

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    return app


app = create_app()
