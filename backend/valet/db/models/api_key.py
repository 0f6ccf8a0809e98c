"""
ApiKey: a user's encrypted credential for one LLM provider.

One row per (user, provider). The model preference is stored on every
row of the user and kept in sync by the settings endpoint.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from valet.core.config import settings
from valet.db.models.base import Base, generate_uuid, utcnow


class ApiKey(Base):
    __tablename__ = "api_keys"
    __table_args__ = (
        UniqueConstraint("user_id", "provider", name="uq_api_keys_user_provider"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=generate_uuid)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    provider: Mapped[str] = mapped_column(String(20), nullable=False)  # anthropic | openai
    encrypted_key: Mapped[str] = mapped_column(Text, nullable=False)
    model_preference: Mapped[str] = mapped_column(
        String(100), nullable=False, default=settings.DEFAULT_MODEL
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<ApiKey user={self.user_id} provider={self.provider}>"
