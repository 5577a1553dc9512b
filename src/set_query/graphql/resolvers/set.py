"""
Set resolvers for GraphQL API
"""

import strawberry

from ...sets.registry import SetRegistry
from ..types import SetInfo


async def resolve_sets(info: strawberry.Info, set_registry: SetRegistry) -> list[SetInfo]:
    """List the sets post queries can select from.

    Args:
        info: GraphQL info context
        set_registry: Registry the schema was built from

    Returns:
        List of set information, in registration order
    """
    _ = info  # Unused but required by GraphQL interface

    return [
        SetInfo(name=registered.name, description=registered.description)
        for registered in set_registry.list_all()
    ]
