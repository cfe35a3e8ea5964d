from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from cart_report.services.currency import D, CurrencyFormatter


@dataclass(frozen=True)
class CartReportRecord:
    """
    One report row: a cart joined with its buyer.

    Money helpers derive display values on demand; nothing here touches the store.
    """

    id: int
    user_id: int
    status: str

    currency: Optional[str] = None
    price: Optional[Decimal] = None
    payable: Optional[Decimal] = None

    coupon_id: Optional[int] = None
    coupon_code: Optional[str] = None
    coupon_usage_id: Optional[int] = None

    checkout_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    created_by: Optional[int] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[int] = None

    # buyer columns
    username: str = ""
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    default_currency: str = field(default="USD", repr=False, compare=False)
    formatter: CurrencyFormatter = field(default_factory=CurrencyFormatter, repr=False, compare=False)
    free_label: str = field(default="Free", repr=False, compare=False)

    @classmethod
    def from_row(
        cls,
        row: Mapping[str, Any],
        *,
        default_currency: str,
        formatter: CurrencyFormatter,
        free_label: str = "Free",
    ) -> "CartReportRecord":
        price = row.get("price")
        payable = row.get("payable")
        return cls(
            id=int(row["id"]),
            user_id=int(row["user_id"]),
            status=row["status"],
            currency=row.get("currency"),
            price=D(price) if price is not None else None,
            payable=D(payable) if payable is not None else None,
            coupon_id=row.get("coupon_id"),
            coupon_code=row.get("coupon_code"),
            coupon_usage_id=row.get("coupon_usage_id"),
            checkout_at=row.get("checkout_at"),
            created_at=row.get("created_at"),
            created_by=row.get("created_by"),
            updated_at=row.get("updated_at"),
            updated_by=row.get("updated_by"),
            username=row.get("username") or "",
            email=row.get("email"),
            first_name=row.get("first_name"),
            last_name=row.get("last_name"),
            default_currency=default_currency,
            formatter=formatter,
            free_label=free_label,
        )

    def final_currency(self) -> str:
        return self.currency or self.default_currency

    def discount_amount(self) -> Optional[Decimal]:
        if self.price is None or self.payable is None:
            return None
        return self.price - self.payable

    def _format(self, amount: Optional[Decimal]) -> str:
        if amount is None or amount <= 0:
            return self.free_label
        return self.formatter.format_money(amount, self.final_currency())

    def formatted_price(self) -> str:
        return self._format(self.price)

    def formatted_payable(self) -> str:
        return self._format(self.payable)

    def formatted_discount(self) -> Optional[str]:
        amount = self.discount_amount()
        if amount is None:
            return None
        return self._format(amount)

    def view_url(self, template: str) -> str:
        return template.format(cart_id=self.id)


@dataclass(frozen=True)
class AggregateTotal:
    currency: str
    payable_sum: Decimal
    payable_formatted: str = ""


@dataclass(frozen=True)
class BuyerIdentity:
    user_id: int
    username: str
    display_name: str
    profile_url: str


def buyer_identity(record: CartReportRecord, profile_url_template: str) -> BuyerIdentity:
    """Buyer name and profile link, built from the joined user columns."""
    full_name = " ".join(p for p in (record.first_name, record.last_name) if p).strip()
    return BuyerIdentity(
        user_id=record.user_id,
        username=record.username,
        display_name=full_name or record.username,
        profile_url=profile_url_template.format(user_id=record.user_id),
    )
