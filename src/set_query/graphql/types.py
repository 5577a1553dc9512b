"""
GraphQL type definitions for posts and sets
"""

from datetime import datetime
from enum import Enum

import strawberry

from ..sets.registry import SetRegistry
from ..sets.resolver import SetRelation as _SetRelation

SetRelation = strawberry.enum(
    _SetRelation,
    name="SetRelation",
    description="How a set combines with the other sets of a query",
)


@strawberry.enum
class PostOrderBy(Enum):
    """Post ordering field."""

    DATE = "date"
    TITLE = "title"
    ID = "id"


@strawberry.enum
class OrderDirection(Enum):
    """Sort direction."""

    ASC = "ASC"
    DESC = "DESC"


@strawberry.type
class Post:
    """Post type for GraphQL API."""

    id: int
    title: str
    content: str | None
    status: str
    author_id: int | None
    created_at: datetime


@strawberry.type
class SetInfo:
    """A user-defined set that post queries can select from."""

    name: str
    description: str | None


def build_set_enum(set_registry: SetRegistry) -> type[Enum] | None:
    """
    Build the `SetName` enum from the sets registered so far.

    Returns None when no sets are registered, since a GraphQL enum must
    declare at least one value.
    """
    registered = set_registry.list_all()
    if not registered:
        return None

    members = {item.enum_name: item.name for item in registered}
    return strawberry.enum(
        Enum("SetName", members),  # type: ignore[misc]
        name="SetName",
        description="User-defined sets",
    )
