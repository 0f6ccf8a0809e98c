"""
Pipeline: a user-defined graph of agent and trait nodes.

``flow_data`` is stored as-is: ``{"nodes": [...], "edges": [...],
"viewport": {...}}``. Only the executor interprets it.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from valet.db.models.base import Base, JSONType, generate_uuid, utcnow


def empty_flow() -> dict[str, Any]:
    return {"nodes": [], "edges": []}


class Pipeline(Base):
    __tablename__ = "pipelines"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=generate_uuid)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    flow_data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=empty_flow)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False, index=True
    )

    def __repr__(self) -> str:
        return f"<Pipeline {self.id} {self.name!r}>"
