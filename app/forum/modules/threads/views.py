from __future__ import annotations

from flask import Blueprint, abort, flash, g, redirect, render_template, request, url_for

from app.forum.auth import require_onboarded
from app.forum.db import db_session
from app.forum.models import User
from app.forum.modules.threads.service import add_comment_to_thread, create_thread, fetch_thread_by_id
from app.forum.validations import validate_comment_payload, validate_thread_payload

bp = Blueprint("threads", __name__)


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


# ---------- New ----------
@bp.get("/create-thread")
@require_onboarded
def create_thread_get():
    user = _current_user()
    return render_template("threads/new.html", communities=user.communities)


@bp.post("/create-thread")
@require_onboarded
def create_thread_post():
    s = db_session()
    user = _current_user()

    payload = {
        "thread": request.form.get("thread") or "",
        "accountId": str(user.id),
    }
    errors = validate_thread_payload(payload)
    if errors:
        for e in errors:
            flash(e, "danger")
        return redirect(url_for("threads.create_thread_get"))

    community_id = (request.form.get("community_id") or "").strip() or None
    create_thread(s, payload["thread"], user, community_auth_id=community_id)
    s.commit()
    return redirect(url_for("routes.index"))


# ---------- Detail ----------
@bp.get("/thread/<int:thread_id>")
def thread_detail(thread_id: int):
    s = db_session()
    thread = fetch_thread_by_id(s, thread_id)
    if not thread:
        abort(404)
    return render_template("threads/detail.html", thread=thread)


@bp.post("/thread/<int:thread_id>/comment")
@require_onboarded
def thread_comment_post(thread_id: int):
    s = db_session()
    user = _current_user()

    payload = {"thread": request.form.get("thread") or ""}
    errors = validate_comment_payload(payload)
    if errors:
        for e in errors:
            flash(e, "danger")
        return redirect(url_for("threads.thread_detail", thread_id=thread_id))

    if fetch_thread_by_id(s, thread_id) is None:
        abort(404)
    add_comment_to_thread(s, thread_id, payload["thread"], user)
    s.commit()
    return redirect(url_for("threads.thread_detail", thread_id=thread_id))
