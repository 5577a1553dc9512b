"""
User-defined sets for post queries.

Key components:
- SetRegistry: named set resolvers, registered at startup
- SetQueryResolver: turns `setQuery` input into an inclusion-list patch
- load_sets_from_config: registers sets declared in a YAML file

Example usage:
    from set_query.sets import registry

    @registry.set(description="Posts by curated authors")
    def curated_authors(*author_ids):
        return fetch_post_ids_for_authors(author_ids)
"""

from .loader import load_sets_from_config
from .registry import RegisteredSet, SetRegistry, registry
from .resolver import EXCLUDE_ALL, SetQueryItem, SetQueryResolver, SetRelation

__all__ = [
    "EXCLUDE_ALL",
    "RegisteredSet",
    "SetQueryItem",
    "SetQueryResolver",
    "SetRegistry",
    "SetRelation",
    "load_sets_from_config",
    "registry",
]
