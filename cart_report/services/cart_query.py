from __future__ import annotations

from datetime import datetime, time

from sqlalchemy import Select, bindparam, func, select
from sqlalchemy.sql.elements import ColumnElement

from cart_report.models.cart import Cart
from cart_report.models.user import User
from cart_report.services.cart_criteria import (
    ASC,
    CartStatus,
    FilterCriteria,
    PageSpec,
    SortSpec,
)

END_OF_DAY = time(23, 59, 59)

# whitelisted sort tokens -> columns; nothing else reaches ORDER BY
SORT_COLUMNS = {
    "id": Cart.id,
    "coupon_code": Cart.coupon_code,
    "payable": Cart.payable,
    "status": Cart.status,
    "checkout_at": Cart.checkout_at,
}


def day_start(d) -> datetime:
    return datetime.combine(d, time.min)


def day_end(d) -> datetime:
    return datetime.combine(d, END_OF_DAY)


class CartQueryBuilder:
    """
    Turns filter/sort/page state into three statements over carts JOIN users:
    a page of rows, a count of all matches and a per-currency payable sum.

    Every caller value is bound as a named parameter.
    """

    def __init__(
        self,
        criteria: FilterCriteria,
        sort: SortSpec | None = None,
        page: PageSpec | None = None,
    ) -> None:
        self.criteria = criteria
        self.sort = sort or SortSpec()
        self.page = page or PageSpec()

    def conditions(self) -> list[ColumnElement[bool]]:
        c = self.criteria
        where: list[ColumnElement[bool]] = []

        if c.id is not None:
            where.append(Cart.id == bindparam("id", int(c.id)))
        if c.user_id is not None:
            where.append(Cart.user_id == bindparam("user_id", int(c.user_id)))
        if c.status is not None:
            where.append(Cart.status == bindparam("status", CartStatus(c.status).value))
        if c.coupon_code is not None:
            where.append(Cart.coupon_code == bindparam("coupon_code", c.coupon_code))

        # a checkout range only makes sense for delivered carts; added on top of
        # any explicit status filter
        if c.has_date_range:
            where.append(
                Cart.status == bindparam("status_delivered", CartStatus.DELIVERED.value)
            )

        if c.date_from is not None:
            where.append(Cart.checkout_at >= bindparam("checkout_time_from", day_start(c.date_from)))
        if c.date_to is not None:
            where.append(Cart.checkout_at <= bindparam("checkout_time_to", day_end(c.date_to)))

        return where

    def _joined(self, stmt: Select) -> Select:
        stmt = stmt.select_from(Cart).join(User, Cart.user_id == User.id)
        where = self.conditions()
        if where:
            stmt = stmt.where(*where)
        return stmt

    def order_by(self) -> list:
        col = SORT_COLUMNS[self.sort.field]
        asc = self.sort.direction == ASC
        order = [col.asc() if asc else col.desc()]
        # stable pages when the sort column has ties
        if self.sort.field != "id":
            order.append(Cart.id.asc() if asc else Cart.id.desc())
        return order

    def rows_query(self) -> Select:
        stmt = select(
            Cart.id,
            Cart.user_id,
            Cart.status,
            Cart.currency,
            Cart.price,
            Cart.payable,
            Cart.coupon_id,
            Cart.coupon_code,
            Cart.coupon_usage_id,
            Cart.checkout_at,
            Cart.created_at,
            Cart.created_by,
            Cart.updated_at,
            Cart.updated_by,
            User.username.label("username"),
            User.email.label("email"),
            User.first_name.label("first_name"),
            User.last_name.label("last_name"),
        )
        return (
            self._joined(stmt)
            .order_by(*self.order_by())
            .limit(self.page.limit)
            .offset(self.page.offset)
        )

    def count_query(self) -> Select:
        return self._joined(select(func.count(Cart.id)))

    def sum_query(self) -> Select:
        stmt = select(
            func.sum(Cart.payable).label("payable"),
            Cart.currency.label("currency"),
        )
        return self._joined(stmt).group_by(Cart.currency)
