from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


PAGE_SIZE = 30

SORT_FIELDS: tuple[str, ...] = ("id", "coupon_code", "payable", "status", "checkout_at")
DEFAULT_SORT = "checkout_at"

ASC = "asc"
DESC = "desc"

# BIGINT column range; larger ids cannot match and overflow the driver
INT_MIN = -(2**63)
INT_MAX = 2**63 - 1


class CartReportError(Exception):
    pass


class CartStatus(str, Enum):
    PENDING = "pending"
    CHECKOUT = "checkout"
    DELIVERED = "delivered"
    CANCELED = "canceled"


@dataclass(frozen=True)
class FilterCriteria:
    """
    Sparse search filters. A field left as None contributes no predicate.

    `id` stays a digit string (it comes from a free-text box), the rest are typed.
    """

    id: Optional[str] = None
    user_id: Optional[int] = None
    coupon_code: Optional[str] = None
    status: Optional[CartStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @property
    def has_date_range(self) -> bool:
        return self.date_from is not None or self.date_to is not None

    def __post_init__(self) -> None:
        coupon_code = (self.coupon_code or "").strip() or None
        object.__setattr__(self, "coupon_code", coupon_code)


@dataclass(frozen=True)
class SortSpec:
    field: str = DEFAULT_SORT
    direction: str = DESC

    def __post_init__(self) -> None:
        # out-of-whitelist input is coerced, never passed through
        if self.field not in SORT_FIELDS:
            object.__setattr__(self, "field", DEFAULT_SORT)
            object.__setattr__(self, "direction", DESC)
        else:
            direction = ASC if str(self.direction or "").lower() == ASC else DESC
            object.__setattr__(self, "direction", direction)

    def toggled(self, field: str) -> "SortSpec":
        """Sort on `field`, flipping the current direction (column header links)."""
        return SortSpec(field=field, direction=DESC if self.direction == ASC else ASC)


@dataclass(frozen=True)
class PageSpec:
    page: int = 0
    page_size: int = PAGE_SIZE

    def __post_init__(self) -> None:
        if self.page < 0:
            raise CartReportError("page must be a non-negative integer.")
        if self.page_size <= 0:
            raise CartReportError("page_size must be a positive integer.")

    @property
    def offset(self) -> int:
        return self.page_size * self.page

    @property
    def limit(self) -> int:
        return self.page_size

    def page_count(self, total: int) -> int:
        if total <= 0:
            return 0
        return -(-total // self.page_size)


# -------------------------
# Flat map -> typed criteria
# -------------------------
def _clean(raw: object) -> str:
    if raw is None:
        return ""
    return str(raw).strip()


def parse_id(raw: object) -> Optional[str]:
    s = _clean(raw)
    if s and s.isascii() and s.isdigit():
        if int(s) > INT_MAX:
            logger.debug("Ignoring out-of-range id filter %r", s)
            return None
        return s
    if s:
        logger.debug("Ignoring non-numeric id filter %r", s)
    return None


def parse_int(raw: object) -> Optional[int]:
    s = _clean(raw)
    if not s:
        return None
    try:
        value = int(s)
    except ValueError:
        logger.debug("Ignoring non-integer value %r", s)
        return None
    if not INT_MIN <= value <= INT_MAX:
        logger.debug("Ignoring out-of-range integer %r", s)
        return None
    return value


def parse_status(raw: object) -> Optional[CartStatus]:
    s = _clean(raw).lower()
    if not s:
        return None
    try:
        return CartStatus(s)
    except ValueError:
        logger.debug("Ignoring unknown status %r", s)
        return None


def parse_date(raw: object) -> Optional[date]:
    """
    Accepts YYYY-MM-DD, an ISO datetime (date part kept) or a unix timestamp.
    Anything else means "no bound".
    """
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw

    s = _clean(raw)
    if not s:
        return None

    if s.isascii() and s.isdigit():
        try:
            return datetime.fromtimestamp(int(s), tz=timezone.utc).date()
        except (OverflowError, OSError, ValueError):
            logger.debug("Ignoring out-of-range timestamp %r", s)
            return None

    try:
        return date.fromisoformat(s)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(s).date()
    except ValueError:
        logger.debug("Ignoring malformed date %r", s)
        return None


def parse_page(raw: object) -> int:
    page = parse_int(raw)
    if page is None or page < 0:
        return 0
    return page


def parse_sort(sort: object, direction: object) -> SortSpec:
    field = _clean(sort)
    dir_ = ASC if _clean(direction).lower() == ASC else DESC
    return SortSpec(field=field, direction=dir_)


def parse_report_params(params: Mapping[str, object]) -> tuple[FilterCriteria, SortSpec, PageSpec]:
    """Map the raw query-string map onto typed filter, sort and page state."""
    criteria = FilterCriteria(
        id=parse_id(params.get("id")),
        user_id=parse_int(params.get("user_id")),
        coupon_code=_clean(params.get("coupon_code")),
        status=parse_status(params.get("status")),
        date_from=parse_date(params.get("from")),
        date_to=parse_date(params.get("to")),
    )
    sort = parse_sort(params.get("sort"), params.get("dir"))
    page = PageSpec(page=parse_page(params.get("page")))
    return criteria, sort, page
