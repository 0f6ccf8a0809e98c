"""
AgentTrait: many-to-many link between agents and traits.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from valet.db.models.base import Base, utcnow


class AgentTrait(Base):
    __tablename__ = "agent_traits"

    agent_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("agents.id", ondelete="CASCADE"), primary_key=True
    )
    trait_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("traits.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
