"""
PipelineTab: one open editor tab of a user.

The whole set for a user is replaced on every save; rows are never
patched individually.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from valet.db.models.base import Base, generate_uuid, utcnow


class PipelineTab(Base):
    __tablename__ = "pipeline_tabs"
    __table_args__ = (
        UniqueConstraint("user_id", "pipeline_id", name="uq_pipeline_tabs_user_pipeline"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=generate_uuid)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    pipeline_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("pipelines.id", ondelete="CASCADE"), nullable=False
    )
    pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<PipelineTab user={self.user_id} pipeline={self.pipeline_id} pos={self.position}>"
