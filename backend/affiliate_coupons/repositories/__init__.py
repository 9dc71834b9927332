from affiliate_coupons.repositories.affiliate_repository import AffiliateRepository
from affiliate_coupons.repositories.coupon_repository import (
    AddCouponResult,
    CouponError,
    CouponRepository,
)
from affiliate_coupons.repositories.referral_repository import ReferralRepository

__all__ = [
    "AddCouponResult",
    "AffiliateRepository",
    "CouponError",
    "CouponRepository",
    "ReferralRepository",
]
