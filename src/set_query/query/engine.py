"""
Post query engine.

Translates query engine arguments into a SQLAlchemy select over posts.

Supported arguments:
- post__in: only posts with these IDs. An empty list matches no posts.
- author: author ID
- post_status: post status, defaults to "publish"
- s: case-insensitive title search
- orderby: "post__in" (inclusion list order), "date", "title" or "id"
- order: "ASC" or "DESC"
- posts_per_page / offset: paging
"""

from collections.abc import Mapping
from typing import Any

from sqlalchemy import Select, case, false, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database.models import Posts
from ..logging import get_logger
from .keys import (
    AUTHOR_KEY,
    INCLUSION_KEY,
    OFFSET_KEY,
    ORDER_BY_INCLUSION,
    ORDER_BY_KEY,
    ORDER_KEY,
    PAGE_SIZE_KEY,
    SEARCH_KEY,
    STATUS_KEY,
)

logger = get_logger(__name__)

DEFAULT_STATUS = "publish"

ORDER_COLUMNS = {
    "date": Posts.created_at,
    "title": Posts.title,
    "id": Posts.id,
}


def _page_size(value: Any) -> int:
    try:
        size = int(value)
    except (TypeError, ValueError):
        size = settings.default_page_size
    if size <= 0:
        size = settings.default_page_size
    return min(size, settings.max_page_size)


def build_post_query(query_args: Mapping[str, Any]) -> Select:
    """Build the select statement for a post query."""
    stmt = select(Posts).where(Posts.status == (query_args.get(STATUS_KEY) or DEFAULT_STATUS))

    post_ids: list[int] | None = None
    if query_args.get(INCLUSION_KEY) is not None:
        post_ids = [int(post_id) for post_id in query_args[INCLUSION_KEY]]
        stmt = stmt.where(Posts.id.in_(post_ids) if post_ids else false())

    if query_args.get(AUTHOR_KEY) is not None:
        stmt = stmt.where(Posts.author_id == int(query_args[AUTHOR_KEY]))

    if query_args.get(SEARCH_KEY):
        stmt = stmt.where(Posts.title.ilike(f"%{query_args[SEARCH_KEY]}%"))

    descending = str(query_args.get(ORDER_KEY) or "DESC").upper() != "ASC"
    orderby = query_args.get(ORDER_BY_KEY) or "date"

    if orderby == ORDER_BY_INCLUSION:
        if post_ids:
            positions: dict[int, int] = {}
            for position, post_id in enumerate(post_ids):
                positions.setdefault(post_id, position)
            stmt = stmt.order_by(case(positions, value=Posts.id, else_=len(post_ids)))
    else:
        column = ORDER_COLUMNS.get(str(orderby).lower(), Posts.created_at)
        stmt = stmt.order_by(column.desc() if descending else column.asc(), Posts.id.desc())

    stmt = stmt.limit(_page_size(query_args.get(PAGE_SIZE_KEY)))
    offset = query_args.get(OFFSET_KEY)
    if offset:
        stmt = stmt.offset(max(int(offset), 0))

    return stmt


async def fetch_posts(session: AsyncSession, query_args: Mapping[str, Any]) -> list[Posts]:
    """Run a post query and return the matching posts."""
    stmt = build_post_query(query_args)
    result = await session.execute(stmt)
    posts = list(result.scalars().all())
    logger.debug("Fetched posts", count=len(posts))
    return posts
