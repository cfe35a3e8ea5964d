from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import Select
from sqlalchemy.engine import RowMapping
from sqlalchemy.ext.asyncio import AsyncSession


class CartStore:
    """Read-only access to the cart tables through an AsyncSession.

    Statements come with their parameters already bound; driver errors propagate.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def execute_query(self, stmt: Select, params: dict[str, Any] | None = None) -> Sequence[RowMapping]:
        res = await self.db.execute(stmt, params or {})
        return res.mappings().all()

    async def count(self, stmt: Select, params: dict[str, Any] | None = None) -> int:
        res = await self.db.execute(stmt, params or {})
        return int(res.scalar_one() or 0)
