from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from survey_gems.db.models.base import Base, JSONPayload


class Session(Base):
    __tablename__ = "sessions"
    __table_args__ = (Index("idx_sessions_expire", "expire"),)

    sid: Mapped[str] = mapped_column(String(64), primary_key=True)
    sess: Mapped[dict[str, object]] = mapped_column(JSONPayload, nullable=False)
    expire: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
