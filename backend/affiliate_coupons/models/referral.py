"""Referral model: a conversion attributed to an affiliate."""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, func

from affiliate_coupons.core.database import Base


class ReferralStatus(str, Enum):
    PAID = "paid"
    UNPAID = "unpaid"
    PENDING = "pending"
    REJECTED = "rejected"


class Referral(Base):
    __tablename__ = "affiliate_wp_referrals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    affiliate_id = Column(
        Integer,
        ForeignKey("affiliate_wp_affiliates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status = Column(String(20), nullable=False, default=ReferralStatus.PENDING.value)
    amount = Column(Numeric(12, 4), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
