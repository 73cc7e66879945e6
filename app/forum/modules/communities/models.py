from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.forum.models import Base

if TYPE_CHECKING:
    from app.forum.models import User
    from app.forum.modules.threads.models import Thread


class CommunityMember(Base):
    __tablename__ = "community_members"
    community_id: Mapped[int] = mapped_column(ForeignKey("communities.id", ondelete="CASCADE"), primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)


class Community(Base):
    """Mirror of an auth-provider organization, kept in sync by the webhook."""

    __tablename__ = "communities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    auth_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)  # provider org id
    username: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)  # org slug
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_by_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    created_by: Mapped["User | None"] = relationship("User", foreign_keys=[created_by_id], lazy="joined")
    members: Mapped[list["User"]] = relationship(
        "User",
        secondary="community_members",
        back_populates="communities",
        lazy="selectin",
    )
    threads: Mapped[list["Thread"]] = relationship(
        "Thread",
        back_populates="community",
        cascade="all, delete-orphan",
    )
