"""
Post resolvers for GraphQL API
"""

import dataclasses
from typing import Any

import strawberry
from strawberry.utils.str_converters import to_camel_case

from ...database.connection import get_async_session
from ...logging import get_logger
from ...query.engine import fetch_posts
from ...query.keys import OFFSET_KEY, PAGE_SIZE_KEY
from ...query.mapping import InputFieldMapper
from ..types import Post

logger = get_logger(__name__)


def input_to_args(value: Any) -> Any:
    """Convert Strawberry input objects to plain data keyed by GraphQL field name.

    Unset and null fields are omitted; enum values are kept as enum members.
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        args: dict[str, Any] = {}
        for field in dataclasses.fields(value):
            field_value = getattr(value, field.name)
            if field_value is None or field_value is strawberry.UNSET:
                continue
            args[to_camel_case(field.name)] = input_to_args(field_value)
        return args

    if isinstance(value, list):
        return [input_to_args(item) for item in value]

    return value


async def resolve_posts(
    info: strawberry.Info,
    mapper: InputFieldMapper,
    where: Any = None,
    limit: int | None = None,
    offset: int | None = None,
) -> list[Post]:
    """Query posts with the given `where` arguments.

    Args:
        info: GraphQL info context
        mapper: Input mapper translating `where` into query engine arguments
        where: Post query arguments input object
        limit: Maximum number of posts
        offset: Number of posts to skip

    Returns:
        List of matching posts
    """
    _ = info  # Unused but required by GraphQL interface

    input_args = input_to_args(where) if where is not None else {}
    query_args = await mapper.map_input_fields(input_args)

    if limit is not None:
        query_args[PAGE_SIZE_KEY] = limit
    if offset:
        query_args[OFFSET_KEY] = offset

    async with get_async_session() as session:
        posts = await fetch_posts(session, query_args)

    logger.info("Resolved posts query", count=len(posts), input_fields=sorted(input_args))

    return [
        Post(
            id=post.id,
            title=post.title,
            content=post.content,
            status=post.status,
            author_id=post.author_id,
            created_at=post.created_at,
        )
        for post in posts
    ]
