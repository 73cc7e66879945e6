from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.forum.models import Base

if TYPE_CHECKING:
    from app.forum.models import User
    from app.forum.modules.communities.models import Community


class Thread(Base):
    """A top-level post (parent_id is NULL) or a reply to another thread."""

    __tablename__ = "threads"
    __table_args__ = (
        Index("idx_threads_author_id", "author_id"),
        Index("idx_threads_parent_id", "parent_id"),
        Index("idx_threads_community_id", "community_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)

    author_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    community_id: Mapped[int | None] = mapped_column(ForeignKey("communities.id", ondelete="CASCADE"), nullable=True)
    parent_id: Mapped[int | None] = mapped_column(ForeignKey("threads.id", ondelete="CASCADE"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    author: Mapped["User"] = relationship("User", back_populates="threads", foreign_keys=[author_id], lazy="joined")
    community: Mapped["Community | None"] = relationship("Community", back_populates="threads", lazy="joined")
    parent: Mapped["Thread | None"] = relationship("Thread", back_populates="children", remote_side=[id])
    children: Mapped[list["Thread"]] = relationship(
        "Thread",
        back_populates="parent",
        cascade="all, delete-orphan",
        order_by="Thread.created_at",
        lazy="selectin",
    )
