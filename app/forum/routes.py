from flask import Blueprint, current_app, render_template, request

from app.forum.db import db_session
from app.forum.modules.threads.service import fetch_posts

bp = Blueprint("routes", __name__)


@bp.get("/")
def index():
    s = db_session()
    page = request.args.get("page", 1, type=int) or 1
    posts, is_next = fetch_posts(s, page_number=page, page_size=current_app.config["POSTS_PAGE_SIZE"])
    return render_template("public/index.html", posts=posts, page=page, is_next=is_next)


@bp.get("/health")
def health():
    """Health check endpoint. Returns JSON."""
    return {"ok": True}


@bp.get("/healthz")
def healthz():
    """
    Fast health check for container probes. No DB access, minimal overhead.
    """
    return "ok", 200
