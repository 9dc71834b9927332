"""Integration coupon templates.

Each integration may designate one of its own discount records as the
template that auto-generated affiliate coupons are based on. Lookups are
registered per integration tag; results pass through the hook registry so
other integrations can be supported without modifying this module.
"""

import logging
from collections.abc import Callable

from sqlalchemy.orm import Session

from affiliate_coupons.core.config import settings
from affiliate_coupons.core.hooks import (
    COUPON_EDIT_URL,
    COUPON_TEMPLATE_ID,
    HookRegistry,
    default_hooks,
)
from affiliate_coupons.models.edd_discount import EddDiscount
from affiliate_coupons.models.shared import absint

logger = logging.getLogger(__name__)

TemplateLookup = Callable[[Session], int]


def edd_template_id(db: Session) -> int:
    """Return the ID of the EDD discount flagged as the coupon template, or 0."""
    discount_id = (
        db.query(EddDiscount.id)
        .filter(EddDiscount.is_coupon_template == 1)
        .order_by(EddDiscount.is_coupon_template.desc(), EddDiscount.id.desc())
        .limit(1)
        .scalar()
    )
    return absint(discount_id) if discount_id else 0


def edd_edit_url(admin_url: str, template_id: int) -> str:
    return (
        f"{admin_url}edit.php?post_type=download&page=edd-discounts"
        f"&edd-action=edit_discount&discount={template_id}"
    )


TEMPLATE_LOOKUPS: dict[str, TemplateLookup] = {
    "edd": edd_template_id,
}

EDIT_URL_BUILDERS: dict[str, Callable[[str, int], str]] = {
    "edd": edd_edit_url,
}


class CouponTemplateResolver:
    """Locates coupon templates and their admin edit URLs per integration."""

    def __init__(
        self,
        db: Session,
        hooks: HookRegistry | None = None,
        admin_url: str | None = None,
    ):
        self.db = db
        self.hooks = hooks if hooks is not None else default_hooks
        self.admin_url = admin_url if admin_url is not None else settings.ADMIN_URL
        self.lookups: dict[str, TemplateLookup] = dict(TEMPLATE_LOOKUPS)
        self.url_builders: dict[str, Callable[[str, int], str]] = dict(EDIT_URL_BUILDERS)

    def register_template_lookup(
        self,
        integration: str,
        lookup: TemplateLookup,
        url_builder: Callable[[str, int], str] | None = None,
    ) -> None:
        """Add template support for another integration."""
        self.lookups[integration] = lookup
        if url_builder is not None:
            self.url_builders[integration] = url_builder

    def get_template_id(self, integration: str) -> int:
        """Get the coupon template used as a basis for automatic affiliate coupons.

        Args:
            integration: The integration tag, e.g. "edd".

        Returns:
            The template's ID in the integration's own store, or 0 if none is
            set or the integration is not recognized. Filtered through the
            ``coupon_template_id`` hook.
        """
        template_id = 0

        lookup = self.lookups.get(integration)
        if lookup is None:
            logger.info(
                "get_template_id: Unable to determine discount ID from %s integration.",
                integration,
            )
        else:
            template_id = lookup(self.db)

        return self.hooks.apply_filters(COUPON_TEMPLATE_ID, template_id, integration)

    def get_edit_url(self, integration_coupon_id: int, integration: str) -> str:
        """Get the admin edit URL of the integration's coupon template.

        ``integration_coupon_id`` is accepted but not used: the template ID is
        always re-resolved from ``integration``.

        Returns:
            The edit URL, or an empty string for unrecognized integrations.
            Filtered through the ``coupon_edit_url`` hook.
        """
        template_id = self.get_template_id(integration)

        url = ""
        builder = self.url_builders.get(integration)
        if builder is not None:
            url = builder(self.admin_url, template_id)

        return self.hooks.apply_filters(COUPON_EDIT_URL, url, integration)
