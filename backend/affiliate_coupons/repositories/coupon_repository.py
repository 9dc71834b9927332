"""Coupon repository for data access."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy import exists, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from affiliate_coupons.core.cache import VersionedCache, get_versioned_cache
from affiliate_coupons.core.filters import PredicateBuilder
from affiliate_coupons.core.hooks import COUPON_CREATED, HookRegistry, default_hooks
from affiliate_coupons.core.sorting import apply_order_by
from affiliate_coupons.models.coupon import Coupon
from affiliate_coupons.models.shared import utc_now
from affiliate_coupons.repositories.affiliate_repository import AffiliateRepository
from affiliate_coupons.repositories.referral_repository import ReferralRepository
from affiliate_coupons.schemas.coupon import CouponCreate, CouponQuery, CouponRecord, CouponUpdate
from affiliate_coupons.services.referral_validator import ReferralValidator

logger = logging.getLogger(__name__)

# Cache namespace for coupon queries.
CACHE_NAMESPACE = "coupons"


class CouponError(str, Enum):
    INVALID_AFFILIATE = "invalid_affiliate"
    NO_VALID_REFERRALS = "no_valid_referrals"
    STORAGE_ERROR = "storage_error"


@dataclass
class AddCouponResult:
    """Outcome of ``CouponRepository.add``; falsy when the coupon was not created."""

    coupon_id: int | None = None
    error: CouponError | None = None
    message: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None and self.coupon_id is not None

    def __bool__(self) -> bool:
        return self.success


class CouponRepository:
    """Repository for Coupon model.

    Queries go through a generation-stamped cache; every write bumps the
    ``coupons`` generation so earlier cached results are never served again.
    """

    def __init__(
        self,
        db: Session,
        cache: VersionedCache | None = None,
        hooks: HookRegistry | None = None,
        acting_user_id: int = 0,
    ):
        self.db = db
        self.cache = cache if cache is not None else get_versioned_cache()
        self.hooks = hooks if hooks is not None else default_hooks
        self.acting_user_id = acting_user_id
        self.affiliate_repo = AffiliateRepository(db)
        self.referral_validator = ReferralValidator(ReferralRepository(db))

    def add(self, data: CouponCreate | dict[str, Any]) -> AddCouponResult:
        """Add a new coupon after validating its affiliate and referrals.

        Referrals that do not exist or belong to another affiliate are
        dropped. If none survive, nothing is written.

        Args:
            data: Coupon fields. Plain dicts are validated into ``CouponCreate``.

        Returns:
            An ``AddCouponResult`` carrying the new coupon ID or the failure
            reason.
        """
        if not isinstance(data, CouponCreate):
            data = CouponCreate.model_validate(data)

        if not self.affiliate_repo.exists(data.affiliate_id):
            logger.info("Rejected coupon: affiliate %s does not exist", data.affiliate_id)
            return AddCouponResult(
                error=CouponError.INVALID_AFFILIATE,
                message=f"Affiliate {data.affiliate_id} not found",
            )

        referrals = self.referral_validator.resolve(data.affiliate_id, data.referrals)
        if not referrals:
            logger.info(
                "Rejected coupon: no valid referrals for affiliate %s", data.affiliate_id
            )
            return AddCouponResult(
                error=CouponError.NO_VALID_REFERRALS,
                message=f"No valid referrals for affiliate {data.affiliate_id}",
            )

        coupon = Coupon(
            integration_coupon_id=data.integration_coupon_id,
            affiliate_id=data.affiliate_id,
            referrals=",".join(str(referral_id) for referral_id in referrals),
            integration=data.integration,
            owner=data.owner if data.owner is not None else self.acting_user_id,
            status=data.status,
            code=data.code,
            expiration_date=data.expiration_date or utc_now(),
        )

        try:
            self.db.add(coupon)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to insert coupon for affiliate %s", data.affiliate_id)
            return AddCouponResult(error=CouponError.STORAGE_ERROR, message=str(exc))

        self.db.refresh(coupon)
        coupon_id = int(coupon.id)  # type: ignore[arg-type]

        self.cache.bump(CACHE_NAMESPACE)
        self.hooks.do_action(COUPON_CREATED, coupon_id)

        return AddCouponResult(coupon_id=coupon_id)

    def get_coupons(
        self,
        args: CouponQuery | dict[str, Any] | None = None,
        count: bool = False,
    ) -> list[CouponRecord] | list[int] | int:
        """Retrieve coupons matching ``args``.

        Args:
            args: Query arguments; see ``CouponQuery`` for the accepted filters.
            count: Return only the number of matching rows, ignoring
                pagination.

        Returns:
            Hydrated coupons, coupon IDs when ``fields="ids"``, or a count.
        """
        if not isinstance(args, CouponQuery):
            args = CouponQuery.model_validate(args or {})

        fingerprint = self.cache.fingerprint(CACHE_NAMESPACE, args.model_dump(), count)

        key = self.cache.current_key(CACHE_NAMESPACE, fingerprint)

        results = self.cache.get(CACHE_NAMESPACE, key)
        if results is None:
            results = self._fetch(args, count)
            self.cache.add(CACHE_NAMESPACE, key, results)

        if count:
            return results
        if args.fields == "ids":
            return list(results)
        return [CouponRecord.model_validate(row) for row in results]

    def count(self, args: CouponQuery | dict[str, Any] | None = None) -> int:
        """Retrieve the number of coupons matching ``args``."""
        return self.get_coupons(args, count=True)  # type: ignore[return-value]

    def _fetch(self, args: CouponQuery, count: bool) -> list[dict[str, Any]] | list[int] | int:
        """Run the query against storage, returning cache-safe values."""
        where = (
            PredicateBuilder()
            .where_in(Coupon.id, args.coupon_id)
            .where_in(Coupon.integration_coupon_id, args.integration_coupon_id)
            .where_in(Coupon.affiliate_id, args.affiliate_id)
            .where_in(Coupon.owner, args.owner)
            .where_equals(Coupon.code, args.code)
            .where_equals(Coupon.integration, args.integration)
            .where_equals(Coupon.status, args.status)
            .build()
        )

        if count:
            return int(self.db.query(func.count(Coupon.id)).filter(where).scalar() or 0)

        if args.fields == "ids":
            query = self.db.query(Coupon.id).filter(where)
        else:
            query = self.db.query(Coupon).filter(where)

        query = apply_order_by(query, Coupon, args.orderby, args.order)
        rows = query.offset(args.offset).limit(args.number).all()

        if args.fields == "ids":
            return [int(row.id) for row in rows]
        return [CouponRecord.model_validate(coupon).model_dump(mode="json") for coupon in rows]

    def coupon_exists(self, coupon_id: int) -> bool:
        """Check whether a coupon exists without loading the row."""
        if not coupon_id:
            return False
        return bool(self.db.query(exists().where(Coupon.id == coupon_id)).scalar())

    def get_by_id(self, coupon_id: int) -> Coupon | None:
        """Get a coupon by ID."""
        if not coupon_id:
            return None
        return self.db.query(Coupon).filter(Coupon.id == coupon_id).first()

    def get_object(self, coupon: Coupon | CouponRecord | int) -> CouponRecord | None:
        """Get a hydrated coupon record from an ID or coupon object."""
        if isinstance(coupon, CouponRecord):
            return coupon
        if not isinstance(coupon, Coupon):
            coupon = self.get_by_id(coupon)  # type: ignore[assignment]
            if coupon is None:
                return None
        return CouponRecord.model_validate(coupon)

    def get_column(self, column: str, coupon_id: int) -> Any | None:
        """Get a single column value for a coupon, or None if it does not exist."""
        if column not in Coupon.__table__.columns:
            raise ValueError(f"Unknown coupon column '{column}'")
        return self.db.query(getattr(Coupon, column)).filter(Coupon.id == coupon_id).scalar()

    def get_referral_ids(self, coupon: Coupon | CouponRecord | int) -> list[int]:
        """Get the referral IDs stored for a coupon; empty if the coupon is missing."""
        record = self.get_object(coupon)
        if record is None:
            return []
        return record.referral_ids

    def update(self, coupon_id: int, data: CouponUpdate) -> Coupon | None:
        """Update a coupon by ID."""
        coupon = self.get_by_id(coupon_id)
        if not coupon:
            return None

        update_data = data.model_dump(exclude_unset=True)

        if "referrals" in update_data and update_data["referrals"] is not None:
            update_data["referrals"] = ",".join(str(r) for r in update_data["referrals"])

        for key, value in update_data.items():
            if value is not None:
                setattr(coupon, key, value)

        self.db.commit()
        self.db.refresh(coupon)
        self.cache.bump(CACHE_NAMESPACE)
        return coupon

    def delete(self, coupon_id: int) -> bool:
        """Delete a coupon by ID."""
        coupon = self.get_by_id(coupon_id)
        if not coupon:
            return False

        self.db.delete(coupon)
        self.db.commit()
        self.cache.bump(CACHE_NAMESPACE)
        return True
