from decimal import Decimal

from sqlalchemy.orm import Session

from affiliate_coupons.models.referral import Referral, ReferralStatus


class ReferralRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, referral_id: int) -> Referral | None:
        if not referral_id:
            return None
        return self.db.query(Referral).filter(Referral.id == referral_id).first()

    def create(
        self,
        affiliate_id: int,
        status: ReferralStatus = ReferralStatus.PENDING,
        amount: Decimal = Decimal("0"),
    ) -> Referral:
        referral = Referral(affiliate_id=affiliate_id, status=status.value, amount=amount)
        self.db.add(referral)
        self.db.commit()
        self.db.refresh(referral)
        return referral
