from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, Integer, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column

from survey_gems.db.models.base import Base, BigIntPK, JSONPayload


class Survey(Base):
    __tablename__ = "surveys"
    __table_args__ = (
        CheckConstraint("reward > 0", name="reward_positive"),
        CheckConstraint("duration > 0", name="duration_positive"),
        CheckConstraint("participant_count >= 0", name="participant_count_non_negative"),
        Index("idx_surveys_active_created", "is_active", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    reward: Mapped[int] = mapped_column(Integer, nullable=False)
    questions: Mapped[list[dict[str, object]]] = mapped_column(JSONPayload, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))
    participant_count: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
