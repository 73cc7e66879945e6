from __future__ import annotations

from flask import Blueprint, abort, current_app, render_template, request

from app.forum.db import db_session
from app.forum.modules.communities.service import fetch_communities, fetch_community_details
from app.forum.modules.threads.models import Thread

bp = Blueprint("communities", __name__)


@bp.get("/communities")
def communities_list():
    s = db_session()
    search = (request.args.get("q") or "").strip()
    page = request.args.get("page", 1, type=int) or 1
    items, is_next = fetch_communities(
        s,
        search=search,
        page_number=page,
        page_size=current_app.config["POSTS_PAGE_SIZE"],
    )
    return render_template("communities/list.html", communities=items, search=search, page=page, is_next=is_next)


@bp.get("/communities/<community_id>")
def community_detail(community_id: str):
    s = db_session()
    community = fetch_community_details(s, community_id)
    if not community:
        abort(404)
    threads = (
        s.query(Thread)
        .filter(Thread.community_id == community.id)
        .order_by(Thread.created_at.desc(), Thread.id.desc())
        .all()
    )
    return render_template("communities/detail.html", community=community, threads=threads)
