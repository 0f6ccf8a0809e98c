"""
PipelineRunEvent: append-only log of what happened during a run.

The worker appends, the SSE endpoint reads everything after the last
``seq`` it has sent. ``seq`` is global and strictly increasing.
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from valet.db.models.base import Base, JSONType, utcnow


class PipelineRunEvent(Base):
    __tablename__ = "pipeline_run_events"

    # SQLite only autoincrements INTEGER PRIMARY KEY
    seq: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    run_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("pipeline_runs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    event_type: Mapped[str] = mapped_column(String(30), nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<PipelineRunEvent #{self.seq} run={self.run_id} {self.event_type}>"
