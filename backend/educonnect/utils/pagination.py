"""
Pagination Utility Module

Standardized page/limit handling for list endpoints.
"""
import math
from typing import List, Any, Optional, Tuple
from pydantic import BaseModel
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from educonnect.core.config import settings


class PaginationParams(BaseModel):
    """Normalized pagination parameters"""
    page: int = 1
    limit: int = settings.DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_pagination(page: Optional[int] = None, limit: Optional[int] = None) -> PaginationParams:
    """page >= 1, limit clamped to [1, MAX_PAGE_SIZE]; missing values fall back to defaults"""
    page = max(1, page or 1)
    limit = settings.DEFAULT_PAGE_SIZE if limit is None else limit
    limit = min(settings.MAX_PAGE_SIZE, max(1, limit))
    return PaginationParams(page=page, limit=limit)


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


async def paginate(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    limit: int = settings.DEFAULT_PAGE_SIZE,
    count_query: Optional[Select] = None,
) -> Tuple[List[Any], int, PaginationParams]:
    """
    Apply pagination to a SQLAlchemy query.

    Returns:
        (items for the page, total count, normalized params)
    """
    params = parse_pagination(page, limit)

    if count_query is None:
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar() or 0

    result = await db.execute(query.offset(params.offset).limit(params.limit))
    items = list(result.scalars().unique().all())

    return items, total, params


LIKE_ESCAPE = "\\"


def contains_pattern(term: str) -> str:
    """`%term%` with LIKE wildcards in the term matched literally; pair with escape=LIKE_ESCAPE"""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
