"""
Trait: a reusable block of system-prompt context.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from valet.core.constants import DEFAULT_TRAIT_COLOR
from valet.db.models.base import Base, generate_uuid, utcnow


class Trait(Base):
    __tablename__ = "traits"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=generate_uuid)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    context: Mapped[str] = mapped_column(Text, nullable=False)
    color: Mapped[str] = mapped_column(String(64), nullable=False, default=DEFAULT_TRAIT_COLOR)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Trait {self.id} {self.name!r}>"
