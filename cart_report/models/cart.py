from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from cart_report.core.db import Base

# sqlite only autoincrements INTEGER PRIMARY KEY
_ID = BigInteger().with_variant(Integer(), "sqlite")


class Cart(Base):
    __tablename__ = "carts"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending','checkout','delivered','canceled')",
            name="carts_status_check",
        ),
    )

    id: Mapped[int] = mapped_column(_ID, primary_key=True)

    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending", index=True)

    # NULL means "use the configured payment currency"
    currency: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)

    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 2), nullable=True)
    payable: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 2), nullable=True)

    coupon_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    coupon_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    coupon_usage_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    # set when the cart is delivered
    checkout_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    created_by: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    updated_by: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
