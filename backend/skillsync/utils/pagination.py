import math

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 0


async def paginate(db: AsyncSession, query: Select, page: int, limit: int) -> tuple[list, int]:
    """Run ``query`` for one page and return ``(rows, total)``."""
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar() or 0
    result = await db.scalars(query.offset((page - 1) * limit).limit(limit))
    return list(result.all()), total


def order_clause(column, sort_order: str):
    return column.asc() if sort_order == "asc" else column.desc()
