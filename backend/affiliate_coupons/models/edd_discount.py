"""Discount records owned by the Easy Digital Downloads integration."""

from sqlalchemy import Column, Integer, String

from affiliate_coupons.core.database import Base


class EddDiscount(Base):
    """An EDD discount row.

    ``is_coupon_template`` marks the discount used as the basis for
    auto-generated affiliate coupons.
    """

    __tablename__ = "edd_discounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(255), nullable=False, default="")
    name = Column(String(255), nullable=False, default="")
    status = Column(String(20), nullable=False, default="active")
    is_coupon_template = Column(Integer, nullable=False, default=0, index=True)
