from affiliate_coupons.models.affiliate import Affiliate, AffiliateStatus
from affiliate_coupons.models.coupon import Coupon, CouponStatus
from affiliate_coupons.models.edd_discount import EddDiscount
from affiliate_coupons.models.referral import Referral, ReferralStatus

__all__ = [
    "Affiliate",
    "AffiliateStatus",
    "Coupon",
    "CouponStatus",
    "EddDiscount",
    "Referral",
    "ReferralStatus",
]
