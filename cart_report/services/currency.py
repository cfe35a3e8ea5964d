from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Amount = Union[Decimal, int, float, str]

# currencies that are shown without a fraction part
ZERO_DECIMAL_CURRENCIES: set[str] = {"IRR", "IRT", "JPY", "KRW"}

SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
}


def D(x: Amount) -> Decimal:
    return x if isinstance(x, Decimal) else Decimal(str(x or "0"))


class CurrencyFormatter:
    """Money formatting keyed on an ISO currency code."""

    def format_money(self, amount: Amount, currency: str) -> str:
        code = (currency or "").strip().upper()
        digits = 0 if code in ZERO_DECIMAL_CURRENCIES else 2

        value = D(amount).quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)
        sign = "-" if value < 0 else ""
        body = f"{abs(value):,.{digits}f}"

        symbol = SYMBOLS.get(code)
        if symbol:
            return f"{sign}{symbol}{body}"
        return f"{sign}{body} {code}".rstrip()
