from sqlalchemy.orm import Session

from affiliate_coupons.models.affiliate import Affiliate, AffiliateStatus


class AffiliateRepository:
    def __init__(self, db: Session):
        self.db = db

    def exists(self, affiliate_id: int) -> bool:
        if not affiliate_id:
            return False
        return self.db.query(Affiliate.id).filter(Affiliate.id == affiliate_id).first() is not None

    def create(self, user_id: int = 0, status: AffiliateStatus = AffiliateStatus.ACTIVE) -> Affiliate:
        affiliate = Affiliate(user_id=user_id, status=status.value)
        self.db.add(affiliate)
        self.db.commit()
        self.db.refresh(affiliate)
        return affiliate
