"""
Community actions.

Communities mirror auth-provider organizations. The create/update/delete and
membership actions are driven by the provider webhook, so they identify
communities and users by provider ids (`auth_id`), never by local primary keys.
Actions flush but never commit; the caller owns the transaction.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, or_

from app.forum.audit import record_event
from app.forum.errors import ActionError
from app.forum.models import User
from app.forum.modules.communities.models import Community

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def _get_user(s: "Session", auth_id: str) -> User | None:
    return s.query(User).filter(User.auth_id == auth_id).one_or_none()


def fetch_community_details(s: "Session", community_auth_id: str) -> Community | None:
    return s.query(Community).filter(Community.auth_id == community_auth_id).one_or_none()


def create_community(
    s: "Session",
    auth_id: str,
    name: str,
    username: str,
    image: str | None,
    bio: str | None,
    created_by_auth_id: str,
) -> Community:
    creator = _get_user(s, created_by_auth_id)
    if creator is None:
        raise ActionError("User not found")

    community = Community(
        auth_id=auth_id,
        name=name,
        username=username,
        image=image or None,
        bio=bio,
        created_by=creator,
    )
    community.members.append(creator)
    s.add(community)
    s.flush()

    record_event(
        s,
        actor=None,
        action="community.create",
        entity_type="Community",
        entity_id=auth_id,
        metadata={"name": name, "username": username, "created_by": created_by_auth_id},
    )
    return community


def add_member_to_community(s: "Session", community_auth_id: str, member_auth_id: str) -> Community:
    community = fetch_community_details(s, community_auth_id)
    if community is None:
        raise ActionError("Community not found")
    user = _get_user(s, member_auth_id)
    if user is None:
        raise ActionError("User not found")
    if any(m.id == user.id for m in community.members):
        raise ActionError("User is already a member of the community")

    community.members.append(user)
    s.flush()

    record_event(
        s,
        actor=None,
        action="community.member_add",
        entity_type="Community",
        entity_id=community_auth_id,
        metadata={"user": member_auth_id},
    )
    return community


def remove_user_from_community(s: "Session", user_auth_id: str, community_auth_id: str) -> Community:
    user = _get_user(s, user_auth_id)
    if user is None:
        raise ActionError("User not found")
    community = fetch_community_details(s, community_auth_id)
    if community is None:
        raise ActionError("Community not found")

    community.members = [m for m in community.members if m.id != user.id]
    s.flush()

    record_event(
        s,
        actor=None,
        action="community.member_remove",
        entity_type="Community",
        entity_id=community_auth_id,
        metadata={"user": user_auth_id},
    )
    return community


def update_community_info(
    s: "Session",
    community_auth_id: str,
    name: str,
    username: str,
    image: str | None,
) -> Community:
    community = fetch_community_details(s, community_auth_id)
    if community is None:
        raise ActionError("Community not found")

    changes = {}
    for field, new in (("name", name), ("username", username), ("image", image or None)):
        old = getattr(community, field)
        if old != new:
            changes[field] = {"old": old, "new": new}
            setattr(community, field, new)
    s.flush()

    record_event(
        s,
        actor=None,
        action="community.update",
        entity_type="Community",
        entity_id=community_auth_id,
        metadata={"changes": changes},
    )
    return community


def delete_community(s: "Session", community_auth_id: str) -> None:
    """Delete the community together with its threads (and their replies) and memberships."""
    community = fetch_community_details(s, community_auth_id)
    if community is None:
        raise ActionError("Community not found")

    thread_count = len(community.threads)
    s.delete(community)
    s.flush()

    record_event(
        s,
        actor=None,
        action="community.delete",
        entity_type="Community",
        entity_id=community_auth_id,
        metadata={"name": community.name, "threads_deleted": thread_count},
    )


def fetch_communities(
    s: "Session",
    *,
    search: str = "",
    page_number: int = 1,
    page_size: int = 20,
) -> tuple[list[Community], bool]:
    """Page of communities matching `search` by name or slug. Returns (communities, is_next)."""
    q = s.query(Community)
    search = (search or "").strip()
    if search:
        like = f"%{search}%"
        q = q.filter(or_(Community.name.ilike(like), Community.username.ilike(like)))

    total = q.with_entities(func.count(Community.id)).scalar() or 0
    page_number = max(page_number, 1)
    skip = (page_number - 1) * page_size
    communities = q.order_by(Community.created_at.desc(), Community.id.desc()).offset(skip).limit(page_size).all()
    return communities, total > skip + len(communities)
