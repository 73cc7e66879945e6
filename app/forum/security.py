import secrets
from flask import session, Request

# Paths that never carry a browser session (server-to-server callbacks, probes).
CSRF_EXEMPT_PREFIXES = ("/static/", "/health", "/healthz", "/api/webhook/")


def ensure_csrf_token() -> str:
    """Ensure a CSRF token exists in the session and return it."""
    token = session.get("csrf_token")
    if not token:
        token = secrets.token_urlsafe(32)
        session["csrf_token"] = token
    return token


def validate_csrf(req: Request) -> bool:
    """Validate CSRF token from form or header."""
    token = req.headers.get("X-CSRF-Token") or req.form.get("csrf_token")
    expected = session.get("csrf_token") or ""
    return bool(token and expected and secrets.compare_digest(token.encode(), expected.encode()))


def is_csrf_exempt(path: str) -> bool:
    return path.startswith(CSRF_EXEMPT_PREFIXES)
