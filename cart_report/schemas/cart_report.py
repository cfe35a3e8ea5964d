from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class BuyerOut(BaseModel):
    user_id: int
    username: str = ""
    display_name: str = ""
    profile_url: str = ""
    email: Optional[str] = None


class CartReportRowOut(BaseModel):
    id: int
    status: str

    currency: str
    price: Optional[Decimal] = None
    payable: Optional[Decimal] = None
    discount_amount: Optional[Decimal] = None

    # UI helpers
    price_formatted: str
    payable_formatted: str
    discount_formatted: Optional[str] = None

    coupon_id: Optional[int] = None
    coupon_code: Optional[str] = None
    coupon_usage_id: Optional[int] = None

    checkout_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    buyer: BuyerOut
    view_url: str


class PayableTotalOut(BaseModel):
    currency: str
    payable: Decimal
    payable_formatted: str


class CartReportOut(BaseModel):
    items: List[CartReportRowOut] = Field(default_factory=list)
    total: int

    page: int
    page_size: int
    page_count: int
    has_next: bool
    has_previous: bool

    sort: str
    dir: str

    # echo of the current state, for pagination / sort links
    url_params: Dict[str, str] = Field(default_factory=dict)
    sort_links: Dict[str, Dict[str, str]] = Field(default_factory=dict)

    totals: Optional[List[PayableTotalOut]] = None

    # the UI shows a "no results" notice instead of an empty table
    empty: bool
