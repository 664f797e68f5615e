from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from survey_gems.db.models.base import Base, BigIntPK, JSONPayload


class SurveyResponse(Base):
    __tablename__ = "survey_responses"
    __table_args__ = (
        UniqueConstraint("user_id", "survey_id", name="uq_survey_responses_user_survey"),
        Index("idx_survey_responses_user_completed", "user_id", "completed_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    survey_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("surveys.id"), nullable=False)
    responses: Mapped[dict[str, object]] = mapped_column(JSONPayload, nullable=False)
    gem_awarded: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
