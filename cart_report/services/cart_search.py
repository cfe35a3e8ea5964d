from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Mapping, Optional

from cart_report.services.cart_criteria import (
    SORT_FIELDS,
    CartReportError,
    FilterCriteria,
    PageSpec,
    SortSpec,
    parse_report_params,
)
from cart_report.services.cart_query import CartQueryBuilder
from cart_report.services.cart_record import AggregateTotal, CartReportRecord
from cart_report.services.cart_store import CartStore
from cart_report.services.currency import D, CurrencyFormatter

logger = logging.getLogger(__name__)

__all__ = ["CartSearch", "CartReportError"]


def _param(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class CartSearch:
    """
    Request-scoped cart report search.

    Holds filter, sort and page state set once by `load()`; the fetch methods
    run read-only statements through the store and never mutate that state.
    """

    def __init__(
        self,
        store: CartStore,
        *,
        default_currency: str,
        formatter: Optional[CurrencyFormatter] = None,
        free_label: str = "Free",
    ) -> None:
        self.store = store
        self.default_currency = default_currency
        self.formatter = formatter or CurrencyFormatter()
        self.free_label = free_label

        self.criteria = FilterCriteria()
        self.sort = SortSpec()
        self.page = PageSpec()

    def load(
        self,
        criteria: Optional[FilterCriteria] = None,
        sort: Optional[SortSpec] = None,
        page: Optional[PageSpec] = None,
    ) -> "CartSearch":
        self.criteria = criteria or FilterCriteria()
        self.sort = sort or SortSpec()
        self.page = page or PageSpec()
        logger.debug(
            "Cart search loaded: criteria=%s sort=%s page=%s",
            self.criteria,
            self.sort,
            self.page,
        )
        return self

    def load_params(self, params: Mapping[str, object]) -> "CartSearch":
        """Load from a raw query-string map (the inverse of `url_params`)."""
        return self.load(*parse_report_params(params))

    @property
    def builder(self) -> CartQueryBuilder:
        return CartQueryBuilder(self.criteria, self.sort, self.page)

    # -------------------------
    # Queries
    # -------------------------
    async def fetch_all(self) -> list[CartReportRecord]:
        rows = await self.store.execute_query(self.builder.rows_query())
        return [
            CartReportRecord.from_row(
                r,
                default_currency=self.default_currency,
                formatter=self.formatter,
                free_label=self.free_label,
            )
            for r in rows
        ]

    async def count_all(self) -> int:
        return await self.store.count(self.builder.count_query())

    async def fetch_page(self) -> tuple[list[CartReportRecord], int]:
        total = await self.count_all()
        records = await self.fetch_all()
        logger.debug("Cart search page %s: %s rows of %s", self.page.page, len(records), total)
        return records, total

    async def fetch_totals(self) -> list[AggregateTotal]:
        """Payable sums per currency; NULL/blank currency folds into the default one."""
        rows = await self.store.execute_query(self.builder.sum_query())

        buckets: dict[str, Decimal] = {}
        for r in rows:
            currency = (r["currency"] or "").strip() or self.default_currency
            buckets[currency] = buckets.get(currency, Decimal("0")) + D(r["payable"])

        logger.debug("Cart search totals: %s currency buckets", len(buckets))
        return [
            AggregateTotal(
                currency=currency,
                payable_sum=amount,
                payable_formatted=self.formatter.format_money(amount, currency),
            )
            for currency, amount in sorted(buckets.items())
        ]

    # -------------------------
    # Link helpers
    # -------------------------
    def url_params(self) -> dict[str, str]:
        c = self.criteria
        return {
            "id": _param(c.id),
            "user_id": _param(c.user_id),
            "coupon_code": _param(c.coupon_code),
            "status": _param(c.status),
            "from": _param(c.date_from),
            "to": _param(c.date_to),
            "sort": self.sort.field,
            "dir": self.sort.direction,
            "page": str(self.page.page),
        }

    def sort_link_params(self, field: str) -> dict[str, str]:
        """Params for a column header link: sort on `field`, opposite direction."""
        sort = self.sort.toggled(field)
        params = self.url_params()
        params["sort"] = sort.field
        params["dir"] = sort.direction
        params["page"] = "0"
        return params

    def sort_links(self) -> dict[str, dict[str, str]]:
        return {f: self.sort_link_params(f) for f in SORT_FIELDS}

    def is_sorted_by(self, field: str) -> bool:
        return self.sort.field == field

    def page_count(self, total: int) -> int:
        return self.page.page_count(total)
