from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

if TYPE_CHECKING:
    from app.forum.modules.communities.models import Community
    from app.forum.modules.threads.models import Thread


class Base(DeclarativeBase):
    pass


class User(Base):
    """
    Application-side profile of an auth-provider user.
    `auth_id` is the provider's user id (the `sub` claim of its session token).
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    auth_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    username: Mapped[str | None] = mapped_column(String(64), nullable=True, unique=True)
    name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    onboarded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    threads: Mapped[list["Thread"]] = relationship(
        "Thread",
        back_populates="author",
        foreign_keys="Thread.author_id",
    )
    communities: Mapped[list["Community"]] = relationship(
        "Community",
        secondary="community_members",
        back_populates="members",
    )


class AuditEvent(Base):
    """
    Append-only audit trail event.
    Keep this table intentionally generic; module-specific tables can refer to it by id if needed.
    """

    __tablename__ = "audit_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    request_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    client_ip: Mapped[str | None] = mapped_column(String(64), nullable=True)

    actor_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    actor_auth_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    action: Mapped[str] = mapped_column(String(128), nullable=False)  # e.g. "community.create"
    entity_type: Mapped[str | None] = mapped_column(String(128), nullable=True)  # e.g. "Community"
    entity_id: Mapped[str | None] = mapped_column(String(128), nullable=True)  # provider ids are strings

    metadata_json: Mapped[str | None] = mapped_column(Text, nullable=True)  # small JSON string


# Ensure module models are imported so Base.metadata includes their tables.
# (Kept at bottom to avoid circular imports.)
from app.forum.modules.threads.models import Thread  # noqa: E402,F401
from app.forum.modules.communities.models import Community, CommunityMember  # noqa: E402,F401
