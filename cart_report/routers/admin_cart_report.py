from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cart_report.core.config import settings
from cart_report.core.db import get_db
from cart_report.schemas.cart_report import (
    BuyerOut,
    CartReportOut,
    CartReportRowOut,
    PayableTotalOut,
)
from cart_report.services.cart_record import AggregateTotal, CartReportRecord, buyer_identity
from cart_report.services.cart_search import CartSearch
from cart_report.services.cart_store import CartStore
from cart_report.services.currency import CurrencyFormatter


router = APIRouter(prefix="/admin/reports/carts", tags=["Admin Reports"])


def get_cart_search(db: AsyncSession = Depends(get_db)) -> CartSearch:
    return CartSearch(
        CartStore(db),
        default_currency=settings.DEFAULT_CURRENCY,
        formatter=CurrencyFormatter(),
        free_label=settings.FREE_LABEL,
    )


def _report_params(
    id: Optional[str] = None,
    user_id: Optional[str] = None,
    coupon_code: Optional[str] = None,
    status: Optional[str] = None,
    date_from: Optional[str] = Query(default=None, alias="from"),
    date_to: Optional[str] = Query(default=None, alias="to"),
    sort: Optional[str] = None,
    dir: Optional[str] = None,
    page: Optional[str] = None,
) -> dict[str, Optional[str]]:
    # kept as raw strings: bad values are normalized by the search, not rejected
    return {
        "id": id,
        "user_id": user_id,
        "coupon_code": coupon_code,
        "status": status,
        "from": date_from,
        "to": date_to,
        "sort": sort,
        "dir": dir,
        "page": page,
    }


def _row_out(r: CartReportRecord) -> CartReportRowOut:
    buyer = buyer_identity(r, settings.PROFILE_URL_TEMPLATE)
    return CartReportRowOut(
        id=r.id,
        status=r.status,
        currency=r.final_currency(),
        price=r.price,
        payable=r.payable,
        discount_amount=r.discount_amount(),
        price_formatted=r.formatted_price(),
        payable_formatted=r.formatted_payable(),
        discount_formatted=r.formatted_discount(),
        coupon_id=r.coupon_id,
        coupon_code=r.coupon_code,
        coupon_usage_id=r.coupon_usage_id,
        checkout_at=r.checkout_at,
        created_at=r.created_at,
        updated_at=r.updated_at,
        buyer=BuyerOut(
            user_id=buyer.user_id,
            username=buyer.username,
            display_name=buyer.display_name,
            profile_url=buyer.profile_url,
            email=r.email,
        ),
        view_url=r.view_url(settings.CART_VIEW_URL_TEMPLATE),
    )


def _total_out(t: AggregateTotal) -> PayableTotalOut:
    return PayableTotalOut(
        currency=t.currency,
        payable=t.payable_sum,
        payable_formatted=t.payable_formatted,
    )


@router.get("", response_model=CartReportOut)
async def admin_cart_report(
    params: dict = Depends(_report_params),
    with_totals: bool = Query(default=True),
    search: CartSearch = Depends(get_cart_search),
) -> CartReportOut:
    search.load_params(params)

    records, total = await search.fetch_page()

    totals: Optional[List[PayableTotalOut]] = None
    if with_totals:
        totals = [_total_out(t) for t in await search.fetch_totals()]

    page_count = search.page_count(total)

    return CartReportOut(
        items=[_row_out(r) for r in records],
        total=total,
        page=search.page.page,
        page_size=search.page.page_size,
        page_count=page_count,
        has_next=search.page.page + 1 < page_count,
        has_previous=search.page.page > 0,
        sort=search.sort.field,
        dir=search.sort.direction,
        url_params=search.url_params(),
        sort_links=search.sort_links(),
        totals=totals,
        empty=total == 0,
    )


@router.get("/totals", response_model=List[PayableTotalOut])
async def admin_cart_report_totals(
    params: dict = Depends(_report_params),
    search: CartSearch = Depends(get_cart_search),
) -> List[PayableTotalOut]:
    search.load_params(params)

    return [_total_out(t) for t in await search.fetch_totals()]
