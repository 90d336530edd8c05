# app/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def _env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class ConfigurationError(RuntimeError):
    """Raised at startup when a required setting is missing."""


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "Palacio de Ferias API"
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3000"))

    # CORS origins for frontend (cookies are sent, so origins must be explicit)
    CORS_ORIGINS: list[str] = _env_list("CORS_ORIGINS", "http://localhost:4200,http://localhost:3000")

    # Credential / document store
    database_url: str | None = os.getenv("DATABASE_URL")
    db_generate_schemas: bool = _env_bool("DB_GENERATE_SCHEMAS", "true")

    # Session tokens
    jwt_secret: str | None = os.getenv("JWT_SECRET")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "10080"))  # 7 days

    # Session cookie
    auth_cookie_name: str = os.getenv("AUTH_COOKIE_NAME", "authToken")
    cookie_secure: bool = _env_bool("COOKIE_SECURE", "true")
    cookie_samesite: str = os.getenv("COOKIE_SAMESITE", "strict")

    # Soft revocation: re-read the user on every gated request and reject
    # tokens issued before its last logout. Applies to all routes or none.
    revocation_check: bool = _env_bool("REVOCATION_CHECK", "true")

    # Identity cache (login path only)
    identity_cache_enabled: bool = _env_bool("IDENTITY_CACHE_ENABLED", "true")
    identity_cache_ttl_seconds: int = int(os.getenv("IDENTITY_CACHE_TTL", "3600"))
    identity_cache_max_size: int = int(os.getenv("IDENTITY_CACHE_MAX_SIZE", "1024"))

    # Password hashing work factor
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "10"))

    # Blob storage for company documents, banners and posters
    upload_dir: str = os.getenv("UPLOAD_DIR", "./uploads")
    upload_url_prefix: str = os.getenv("UPLOAD_URL_PREFIX", "/uploads")

    # First admin account (only created when ADMIN_PASSWORD is set)
    admin_name: str = os.getenv("ADMIN_NAME", "admin")
    admin_email: str = os.getenv("ADMIN_EMAIL", "admin@example.com")
    admin_password: str | None = os.getenv("ADMIN_PASSWORD")

    def ensure_ready(self) -> None:
        """
        Fail fast when the process cannot run safely.

        A signing secret and a store descriptor must both be present; there is
        no insecure fallback for either.
        """
        missing = []
        if not (self.jwt_secret or "").strip():
            missing.append("JWT_SECRET")
        if not (self.database_url or "").strip():
            missing.append("DATABASE_URL")
        if missing:
            raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")


settings = Settings()  # Instantiate configuration
