"""Cross-checks referral ownership before referrals are attached to a coupon."""

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from affiliate_coupons.models.referral import ReferralStatus
if TYPE_CHECKING:
    from affiliate_coupons.repositories.referral_repository import ReferralRepository

logger = logging.getLogger(__name__)


class ReferralValidator:
    """Resolves referral IDs against the referral store."""

    def __init__(self, referral_repo: "ReferralRepository"):
        self.referral_repo = referral_repo

    def resolve(self, affiliate_id: int, referral_ids: Iterable[int]) -> list[int]:
        """Keep only referrals that exist and belong to ``affiliate_id``.

        Unknown referrals and referrals owned by another affiliate are
        dropped, not reported as errors; the caller decides whether an empty
        result is fatal.

        Args:
            affiliate_id: The affiliate the referrals must belong to.
            referral_ids: Candidate referral IDs, in the caller's order.

        Returns:
            The surviving referral IDs, in input order.
        """
        candidates = list(referral_ids)
        valid: list[int] = []

        for referral_id in candidates:
            referral = self.referral_repo.get_by_id(referral_id)
            if referral is None:
                continue
            if int(referral.affiliate_id) == affiliate_id:  # type: ignore[arg-type]
                valid.append(referral_id)

        dropped = len(candidates) - len(valid)
        if dropped:
            logger.debug(
                "Dropped %d of %d referrals not owned by affiliate %s",
                dropped,
                len(candidates),
                affiliate_id,
            )
        return valid

    def group_by_affiliate(
        self,
        referral_ids: Iterable[int],
        status: str = ReferralStatus.PAID.value,
    ) -> dict[int, list[int]]:
        """Group referral IDs by the affiliate that owns them.

        Args:
            referral_ids: Referral IDs to resolve.
            status: Required referral status. Pass an empty string to accept
                any status.

        Returns:
            Mapping of affiliate ID to that affiliate's referral IDs.
        """
        affiliates: dict[int, list[int]] = {}

        for referral_id in referral_ids:
            referral = self.referral_repo.get_by_id(referral_id)
            if referral is None:
                continue
            if status and referral.status != status:
                continue
            affiliates.setdefault(int(referral.affiliate_id), []).append(int(referral.id))  # type: ignore[arg-type]

        return affiliates
