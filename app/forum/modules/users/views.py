from __future__ import annotations

from flask import Blueprint, abort, flash, g, redirect, render_template, request, url_for

from app.forum.auth import require_session
from app.forum.db import db_session
from app.forum.models import User
from app.forum.modules.users.service import (
    fetch_user,
    fetch_user_threads,
    get_activity,
    update_user,
    username_taken,
)
from app.forum.validations import validate_user_payload

bp = Blueprint("users", __name__)


# ---------- Activity ----------
@bp.get("/activity")
@require_session
def activity():
    s = db_session()
    user_info = fetch_user(s, g.auth_user_id)
    if not user_info or not user_info.onboarded:
        return redirect(url_for("users.onboarding_get"))

    items = get_activity(s, user_info.id)
    return render_template("users/activity.html", activity=items)


# ---------- Onboarding ----------
def _claims_defaults() -> dict:
    claims = getattr(g, "auth_claims", None) or {}
    return {
        "profile_photo": claims.get("image_url") or "",
        "name": claims.get("name") or "",
        "username": claims.get("username") or "",
        "bio": "",
    }


@bp.get("/onboarding")
@require_session
def onboarding_get():
    user: User | None = getattr(g, "current_user", None)
    if user:
        form = {
            "profile_photo": user.image or "",
            "name": user.name or "",
            "username": user.username or "",
            "bio": user.bio or "",
        }
    else:
        form = _claims_defaults()
    return render_template("users/onboarding.html", form=form, btn_title="Continue")


@bp.post("/onboarding")
@require_session
def onboarding_post():
    s = db_session()
    payload = {
        "profile_photo": (request.form.get("profile_photo") or "").strip(),
        "name": (request.form.get("name") or "").strip(),
        "username": (request.form.get("username") or "").strip(),
        "bio": (request.form.get("bio") or "").strip(),
    }

    errors = validate_user_payload(payload)
    if not errors and username_taken(s, payload["username"], exclude_auth_id=g.auth_user_id):
        errors.append("username: Username is already taken")
    if errors:
        for e in errors:
            flash(e, "danger")
        return redirect(url_for("users.onboarding_get"))

    update_user(
        s,
        g.auth_user_id,
        username=payload["username"],
        name=payload["name"],
        bio=payload["bio"],
        image=payload["profile_photo"],
    )
    s.commit()
    return redirect(url_for("routes.index"))


# ---------- Profile ----------
@bp.get("/profile/<username>")
def profile(username: str):
    s = db_session()
    user = s.query(User).filter(User.username == username.lower()).one_or_none()
    if not user or not user.onboarded:
        abort(404)
    return render_template("users/profile.html", profile=user, threads=fetch_user_threads(s, user.id))
