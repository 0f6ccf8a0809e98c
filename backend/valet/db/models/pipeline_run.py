"""
PipelineRun: one execution of a pipeline.

Created ``pending`` by the API, moved to ``running`` and then
``completed`` or ``failed`` by the worker.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from valet.core.constants import RunStatus
from valet.db.models.base import Base, JSONType, generate_uuid, utcnow

if TYPE_CHECKING:
    from valet.db.models.pipeline_run_step import PipelineRunStep


class PipelineRun(Base):
    __tablename__ = "pipeline_runs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=generate_uuid)
    pipeline_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("pipelines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # ── Status ───────────────────────────────
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=RunStatus.PENDING.value, index=True
    )

    # ── Input / Output ───────────────────────
    input: Mapped[str] = mapped_column(Text, nullable=False, default="")
    variables: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    final_output: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ── Model / Usage ────────────────────────
    model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    input_tokens: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    output_tokens: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # ── Timing (UTC) ─────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # ── Relationships ─────────────────────────
    steps: Mapped[list[PipelineRunStep]] = relationship(
        back_populates="run",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PipelineRunStep.step_order",
    )

    def __repr__(self) -> str:
        return f"<PipelineRun {self.id} pipeline={self.pipeline_id} status={self.status}>"
