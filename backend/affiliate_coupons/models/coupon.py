"""Coupon model linking an affiliate to the referrals it was generated for."""

from enum import Enum

from sqlalchemy import Column, DateTime, Integer, String, Text

from affiliate_coupons.core.config import settings
from affiliate_coupons.core.database import Base
from affiliate_coupons.models.shared import utc_now


class CouponStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Coupon(Base):
    """Coupon generated by an integration on behalf of an affiliate.

    ``referrals`` holds the associated referral IDs as a comma-joined string.
    """

    __tablename__ = settings.COUPONS_TABLE_NAME

    id = Column(Integer, primary_key=True, autoincrement=True)
    integration_coupon_id = Column(Integer, nullable=False, default=0)
    affiliate_id = Column(Integer, nullable=False, index=True)
    referrals = Column(Text, nullable=False)
    integration = Column(Text, nullable=False, default="")
    owner = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=CouponStatus.ACTIVE.value)
    code = Column(String(255), nullable=False, default="")
    expiration_date = Column(DateTime(timezone=True), nullable=False, default=utc_now)
