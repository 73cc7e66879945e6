from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.orm import aliased

from app.forum.audit import record_event
from app.forum.models import User
from app.forum.modules.threads.models import Thread

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def fetch_user(s: "Session", auth_id: str) -> User | None:
    return s.query(User).filter(User.auth_id == auth_id).one_or_none()


def update_user(
    s: "Session",
    auth_id: str,
    *,
    username: str,
    name: str,
    bio: str,
    image: str | None,
) -> User:
    """Create or update the profile for `auth_id` and mark it onboarded."""
    user = fetch_user(s, auth_id)
    created = user is None
    if user is None:
        user = User(auth_id=auth_id)
        s.add(user)

    user.username = username.strip().lower()
    user.name = name.strip()
    user.bio = bio.strip()
    user.image = (image or "").strip() or None
    user.onboarded = True
    s.flush()

    record_event(
        s,
        actor=user,
        action="user.onboard" if created else "user.update",
        entity_type="User",
        entity_id=auth_id,
        metadata={"username": user.username},
    )
    return user


def username_taken(s: "Session", username: str, *, exclude_auth_id: str | None = None) -> bool:
    q = s.query(User.id).filter(User.username == username.strip().lower())
    if exclude_auth_id:
        q = q.filter(User.auth_id != exclude_auth_id)
    return q.first() is not None


def get_activity(s: "Session", user_id: int) -> list[Thread]:
    """
    Replies other people left on the user's threads, newest first.
    Each item exposes id, parent_id and author (name, image).
    """
    parent = aliased(Thread)
    return (
        s.query(Thread)
        .join(parent, Thread.parent_id == parent.id)
        .filter(parent.author_id == user_id)
        .filter(Thread.author_id != user_id)
        .order_by(Thread.created_at.desc(), Thread.id.desc())
        .all()
    )


def fetch_user_threads(s: "Session", user_id: int) -> list[Thread]:
    return (
        s.query(Thread)
        .filter(Thread.author_id == user_id)
        .filter(Thread.parent_id.is_(None))
        .order_by(Thread.created_at.desc(), Thread.id.desc())
        .all()
    )
