from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func

from app.forum.audit import record_event
from app.forum.errors import ActionError
from app.forum.modules.communities.models import Community
from app.forum.modules.threads.models import Thread

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.forum.models import User


def fetch_thread_by_id(s: "Session", thread_id: int) -> Thread | None:
    return s.get(Thread, thread_id)


def create_thread(s: "Session", text: str, author: "User", community_auth_id: str | None = None) -> Thread:
    """
    Post a top-level thread. `community_auth_id` is the provider organization id;
    an unknown id posts the thread without a community.
    """
    community = None
    if community_auth_id:
        community = s.query(Community).filter(Community.auth_id == community_auth_id).one_or_none()

    thread = Thread(text=text, author=author, community=community)
    s.add(thread)
    s.flush()

    record_event(
        s,
        actor=author,
        action="thread.create",
        entity_type="Thread",
        entity_id=str(thread.id),
        metadata={"community": community.auth_id} if community else None,
    )
    return thread


def add_comment_to_thread(s: "Session", thread_id: int, text: str, author: "User") -> Thread:
    original = fetch_thread_by_id(s, thread_id)
    if original is None:
        raise ActionError("Thread not found")

    comment = Thread(text=text, author=author, parent=original)
    s.add(comment)
    s.flush()

    record_event(
        s,
        actor=author,
        action="thread.comment",
        entity_type="Thread",
        entity_id=str(comment.id),
        metadata={"parent_id": original.id},
    )
    return comment


def fetch_posts(s: "Session", page_number: int = 1, page_size: int = 20) -> tuple[list[Thread], bool]:
    """Top-level threads, newest first. Returns (threads, is_next)."""
    q = s.query(Thread).filter(Thread.parent_id.is_(None))
    total = q.with_entities(func.count(Thread.id)).scalar() or 0

    page_number = max(page_number, 1)
    skip = (page_number - 1) * page_size
    posts = q.order_by(Thread.created_at.desc(), Thread.id.desc()).offset(skip).limit(page_size).all()
    return posts, total > skip + len(posts)
