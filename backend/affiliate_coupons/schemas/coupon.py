"""Coupon schemas: create/update payloads, query arguments, hydrated records."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from affiliate_coupons.core.config import settings
from affiliate_coupons.core.sorting import normalize_order, normalize_orderby
from affiliate_coupons.models.coupon import Coupon, CouponStatus
from affiliate_coupons.models.shared import absint, intval, parse_id_list, sanitize_key

# Page size used when a query asks for "everything" (number < 1).
UNBOUNDED_LIMIT = 999999999999


def _unique_absints(value: Any) -> list[int]:
    if value is None:
        return []
    if not isinstance(value, list | tuple | set):
        value = [value]
    seen: dict[int, None] = {}
    for item in value:
        seen.setdefault(absint(item), None)
    return list(seen)


def _id_filter(value: Any) -> list[int]:
    """Scalar or list filter value to a list of ints; empty means "no filter"."""
    if not value:
        return []
    if isinstance(value, list | tuple | set):
        return [intval(item) for item in value]
    return [intval(value)]


class CouponCreate(BaseModel):
    affiliate_id: int = 0
    integration_coupon_id: int = 0
    code: str = ""
    referrals: list[int] = Field(
        default_factory=list,
        validation_alias=AliasChoices("referrals", "referral_ids"),
    )
    integration: str = ""
    owner: int | None = None
    status: str = CouponStatus.ACTIVE.value
    expiration_date: datetime | None = None

    @field_validator("affiliate_id", "integration_coupon_id", mode="before")
    @classmethod
    def to_absint(cls, v: Any) -> int:
        return absint(v)

    @field_validator("owner", mode="before")
    @classmethod
    def owner_to_absint(cls, v: Any) -> int | None:
        return None if v is None else absint(v)

    @field_validator("code", mode="before")
    @classmethod
    def key_safe_code(cls, v: Any) -> str:
        return sanitize_key(v) if v else ""

    @field_validator("status", mode="before")
    @classmethod
    def key_safe_status(cls, v: Any) -> str:
        # Only key-safed here; unlike query filters, unknown values are kept.
        if v is None:
            return CouponStatus.ACTIVE.value
        return sanitize_key(v) if v else ""

    @field_validator("referrals", mode="before")
    @classmethod
    def normalize_referrals(cls, v: Any) -> list[int]:
        return _unique_absints(v)

    @field_validator("integration", mode="before")
    @classmethod
    def integration_to_str(cls, v: Any) -> str:
        return str(v).strip() if v else ""


class CouponUpdate(BaseModel):
    integration_coupon_id: int | None = None
    code: str | None = None
    referrals: list[int] | None = None
    integration: str | None = None
    owner: int | None = None
    status: str | None = None
    expiration_date: datetime | None = None

    @field_validator("code", "status", mode="before")
    @classmethod
    def key_safe(cls, v: Any) -> str | None:
        return None if v is None else sanitize_key(v)

    @field_validator("referrals", mode="before")
    @classmethod
    def normalize_referrals(cls, v: Any) -> list[int] | None:
        return None if v is None else _unique_absints(v)


class CouponQuery(BaseModel):
    """Arguments accepted by ``CouponRepository.get_coupons``.

    Every field is optional and all given filters are AND-combined. Empty
    values (0, "", []) disable a filter.
    """

    model_config = ConfigDict(extra="ignore")

    number: int = Field(default_factory=lambda: settings.DEFAULT_PAGE_SIZE)
    offset: int = 0
    coupon_id: list[int] = Field(default_factory=list)
    integration_coupon_id: list[int] = Field(default_factory=list)
    affiliate_id: list[int] = Field(default_factory=list)
    owner: list[int] = Field(default_factory=list)
    code: str = ""
    integration: str = ""
    status: str = ""
    order: str = "DESC"
    orderby: str = "id"
    fields: str = ""

    @field_validator("number", mode="before")
    @classmethod
    def unbounded_when_below_one(cls, v: Any) -> int:
        number = intval(v)
        return UNBOUNDED_LIMIT if number < 1 else number

    @field_validator("offset", mode="before")
    @classmethod
    def offset_to_absint(cls, v: Any) -> int:
        return absint(v)

    @field_validator("coupon_id", "integration_coupon_id", "affiliate_id", "owner", mode="before")
    @classmethod
    def to_id_list(cls, v: Any) -> list[int]:
        return _id_filter(v)

    @field_validator("code", mode="before")
    @classmethod
    def key_safe_code(cls, v: Any) -> str:
        return sanitize_key(v) if v else ""

    @field_validator("integration", mode="before")
    @classmethod
    def integration_to_str(cls, v: Any) -> str:
        return str(v).strip() if v else ""

    @field_validator("status", mode="before")
    @classmethod
    def restrict_status(cls, v: Any) -> str:
        if not v:
            return ""
        if isinstance(v, CouponStatus):
            return v.value
        statuses = {status.value for status in CouponStatus}
        return v if v in statuses else CouponStatus.ACTIVE.value

    @field_validator("order", mode="before")
    @classmethod
    def two_orders(cls, v: Any) -> str:
        return normalize_order(str(v) if v is not None else None)

    @field_validator("orderby", mode="before")
    @classmethod
    def known_column(cls, v: Any) -> str:
        return normalize_orderby(Coupon, str(v) if v is not None else None)

    @field_validator("fields", mode="before")
    @classmethod
    def ids_or_all(cls, v: Any) -> str:
        return "ids" if v == "ids" else ""


class CouponRecord(BaseModel):
    """Hydrated coupon returned by queries."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    integration_coupon_id: int
    affiliate_id: int
    referrals: str
    integration: str
    owner: int
    status: str
    code: str
    expiration_date: datetime

    @property
    def referral_ids(self) -> list[int]:
        return parse_id_list(self.referrals)
