import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str

    clerk_webhook_secret: str
    clerk_jwt_key: str
    clerk_jwt_algorithm: str
    clerk_sign_in_url: str

    posts_page_size: int

    gunicorn_workers: int
    gunicorn_timeout: int


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def load_settings() -> Settings:
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=_getenv("ENV", "development"),
        database_url=_getenv("DATABASE_URL", "sqlite:///forum.db"),
        clerk_webhook_secret=_getenv("CLERK_WEBHOOK_SECRET", ""),
        # PEM public key; multi-line values arrive with literal "\n" from some hosts
        clerk_jwt_key=_getenv("CLERK_JWT_KEY", "").replace("\\n", "\n"),
        clerk_jwt_algorithm=_getenv("CLERK_JWT_ALGORITHM", "RS256"),
        clerk_sign_in_url=_getenv("CLERK_SIGN_IN_URL", ""),
        posts_page_size=_getenv_int("POSTS_PAGE_SIZE", 20),
        gunicorn_workers=_getenv_int("GUNICORN_WORKERS", 2),
        gunicorn_timeout=_getenv_int("GUNICORN_TIMEOUT", 60),
    )


def load_config() -> dict:
    s = load_settings()
    is_production = s.env in ("prod", "production")
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "CLERK_WEBHOOK_SECRET": s.clerk_webhook_secret,
        "CLERK_JWT_KEY": s.clerk_jwt_key,
        "CLERK_JWT_ALGORITHM": s.clerk_jwt_algorithm,
        "CLERK_SIGN_IN_URL": s.clerk_sign_in_url,
        "POSTS_PAGE_SIZE": s.posts_page_size,
        # security defaults
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "SESSION_COOKIE_SECURE": is_production,  # Require HTTPS in production
        # webhook and form bodies are small
        "MAX_CONTENT_LENGTH": 1 * 1024 * 1024,
    }
