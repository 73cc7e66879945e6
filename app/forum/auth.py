from __future__ import annotations

import uuid
from collections.abc import Callable
from functools import wraps
from typing import Any
from urllib.parse import urlencode

import jwt
from flask import Blueprint, current_app, g, redirect, render_template, request, url_for

from app.forum.db import db_session
from app.forum.models import User

bp = Blueprint("auth", __name__)

# Cookie the hosted auth provider sets for same-site sessions.
SESSION_COOKIE = "__session"
_TOKEN_LEEWAY_SECONDS = 5
_SKIP_PREFIXES = ("/static/", "/health", "/healthz", "/api/webhook/")


def _session_token() -> str | None:
    header = request.headers.get("Authorization") or ""
    if header.lower().startswith("bearer "):
        token = header[7:].strip()
        if token:
            return token
    return request.cookies.get(SESSION_COOKIE) or None


def decode_session_token(token: str) -> dict[str, Any] | None:
    """Verify the provider-issued session JWT. Returns claims or None if invalid/expired."""
    key = current_app.config.get("CLERK_JWT_KEY") or ""
    if not key:
        current_app.logger.debug("CLERK_JWT_KEY not set; treating request as anonymous")
        return None
    algorithm = current_app.config.get("CLERK_JWT_ALGORITHM") or "RS256"
    try:
        return jwt.decode(
            token,
            key,
            algorithms=[algorithm],
            leeway=_TOKEN_LEEWAY_SECONDS,
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        current_app.logger.debug("Session token expired")
        return None
    except jwt.InvalidTokenError as e:
        current_app.logger.info("Session token rejected: %s", e)
        return None


def load_current_user() -> None:
    """
    Resolves g.auth_user_id from the provider session token and g.current_user from the DB.
    Also assigns a simple per-request request_id (for audit/log correlation).
    g.current_user stays None for signed-in users who have not onboarded yet.
    """
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    g.auth_user_id = None
    g.auth_claims = {}
    g.current_user = None
    if request.path.startswith(_SKIP_PREFIXES):
        return

    token = _session_token()
    if not token:
        return
    claims = decode_session_token(token)
    if not claims:
        return

    g.auth_user_id = str(claims["sub"])
    g.auth_claims = claims
    try:
        s = db_session()
        g.current_user = s.query(User).filter(User.auth_id == g.auth_user_id).one_or_none()
    except Exception as e:
        current_app.logger.error("load_current_user DB error (request_id=%s): %s", g.request_id, e)
        g.current_user = None


def _redirect_to_sign_in():
    nxt = request.full_path or request.path
    # Avoid trailing '?' from full_path when there is no query string.
    if nxt.endswith("?"):
        nxt = nxt[:-1]
    return redirect(url_for("auth.sign_in", next=nxt))


def require_session(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Signed in with the auth provider (onboarding not required)."""

    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        if not getattr(g, "auth_user_id", None):
            return _redirect_to_sign_in()
        return fn(*args, **kwargs)

    return wrapped


def require_onboarded(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Signed in and onboarded; otherwise redirect to sign-in or onboarding."""

    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        if not getattr(g, "auth_user_id", None):
            return _redirect_to_sign_in()
        user: User | None = getattr(g, "current_user", None)
        if not user or not user.onboarded:
            return redirect(url_for("users.onboarding_get"))
        return fn(*args, **kwargs)

    return wrapped


def _safe_next(nxt: str) -> str:
    # Only allow local paths to avoid open redirects.
    if nxt.startswith("/") and not nxt.startswith("//"):
        return nxt
    return "/"


@bp.get("/sign-in")
def sign_in():
    nxt = _safe_next((request.args.get("next") or "").strip())
    if getattr(g, "auth_user_id", None):
        return redirect(nxt)
    hosted_url = current_app.config.get("CLERK_SIGN_IN_URL") or ""
    if hosted_url:
        hosted_url = f"{hosted_url}?{urlencode({'redirect_url': request.host_url.rstrip('/') + nxt})}"
    return render_template("auth/sign_in.html", hosted_url=hosted_url, next=nxt)


@bp.get("/sign-out")
def sign_out():
    resp = redirect(url_for("routes.index"))
    resp.delete_cookie(SESSION_COOKIE)
    return resp
