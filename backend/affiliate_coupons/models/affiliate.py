"""Affiliate model: a tracked referral partner."""

from enum import Enum

from sqlalchemy import Column, DateTime, Integer, String, func

from affiliate_coupons.core.database import Base


class AffiliateStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"
    REJECTED = "rejected"


class Affiliate(Base):
    __tablename__ = "affiliate_wp_affiliates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, default=0, index=True)
    status = Column(String(20), nullable=False, default=AffiliateStatus.ACTIVE.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
