from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from survey_gems.db.models.base import Base, BigIntPK

TRANSACTION_TYPES = (
    "survey_reward",
    "offerwall_reward",
    "withdrawal_request",
    "withdrawal_approved",
    "withdrawal_rejected",
)


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint(
            "type IN ('survey_reward','offerwall_reward','withdrawal_request',"
            "'withdrawal_approved','withdrawal_rejected')",
            name="type",
        ),
        Index("idx_transactions_user_created", "user_id", "created_at"),
        Index("idx_transactions_withdrawal", "withdrawal_id"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    survey_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey("surveys.id"), nullable=True)
    withdrawal_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("withdrawal_requests.id"),
        nullable=True,
    )
    offerwall_provider: Mapped[str | None] = mapped_column(String(32), nullable=True)
    offerwall_offer_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
