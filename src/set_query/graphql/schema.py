"""
GraphQL schema definition using Strawberry
"""

from collections.abc import Sequence
from typing import Any

import strawberry
from fastapi import Request
from graphql import get_introspection_query, graphql_sync
from graphql import validate_schema as gql_validate_schema
from strawberry.fastapi import GraphQLRouter

from ..config import settings
from ..logging import bind_request_id, get_logger
from ..query.mapping import InputFieldMapper, map_post_fields
from ..sets.registry import SetRegistry
from ..sets.registry import registry as default_registry
from ..sets.resolver import SetQueryResolver
from .fields import POST_QUERY_FIELDS, FieldContributor, SetQueryFieldContributor, build_input_type
from .types import Post, SetInfo

logger = get_logger(__name__)

# Field renames run before the set query hook, which owns `orderby` last
POST_FIELDS_PRIORITY = 5
SET_QUERY_PRIORITY = 10


def create_input_mapper(set_registry: SetRegistry) -> InputFieldMapper:
    """Create the input mapper used by the posts query."""
    mapper = InputFieldMapper()
    mapper.add_hook(map_post_fields, priority=POST_FIELDS_PRIORITY)
    mapper.add_hook(SetQueryResolver(set_registry).atransform, priority=SET_QUERY_PRIORITY)
    return mapper


def create_schema(
    set_registry: SetRegistry | None = None,
    field_contributors: Sequence[FieldContributor] | None = None,
    mapper: InputFieldMapper | None = None,
) -> strawberry.Schema:
    """Build the GraphQL schema.

    Sets must be registered before this is called: the registry is frozen
    here, and its set names become the values of the `SetName` enum.

    Args:
        set_registry: Registry of user-defined sets (defaults to the global registry)
        field_contributors: Callables adding fields to the post query arguments
        mapper: Input mapper for the posts query

    Returns:
        The Strawberry schema
    """
    set_registry = set_registry if set_registry is not None else default_registry
    if field_contributors is None:
        field_contributors = [SetQueryFieldContributor(set_registry)]
    if mapper is None:
        mapper = create_input_mapper(set_registry)

    set_registry.freeze()

    fields = dict(POST_QUERY_FIELDS)
    for contribute in field_contributors:
        fields = contribute(fields)

    post_query_args = build_input_type(
        "PostQueryArgs", fields, description="Arguments for filtering posts"
    )

    @strawberry.type
    class Query:
        """Root GraphQL query type."""

        @strawberry.field
        async def posts(
            self,
            info: strawberry.Info,
            where: post_query_args | None = None,  # type: ignore[valid-type]
            limit: int | None = None,
            offset: int | None = 0,
        ) -> list[Post]:
            """Query posts, optionally restricted to user-defined sets."""
            from .resolvers.post import resolve_posts

            return await resolve_posts(info, mapper, where, limit, offset)

        @strawberry.field
        async def sets(self, info: strawberry.Info) -> list[SetInfo]:
            """Get the user-defined sets posts can be queried against."""
            from .resolvers.set import resolve_sets

            return await resolve_sets(info, set_registry)

    schema = strawberry.Schema(query=Query)
    logger.info("GraphQL schema created", sets=set_registry.list_names(), fields=sorted(fields))
    return schema


def validate_schema(schema: strawberry.Schema) -> None:
    """Validate the GraphQL schema at startup.

    Catches unresolved types early, so the server fails fast instead of
    erroring on the first query.

    Raises:
        Exception: If the schema is invalid or has unresolved types
    """
    try:
        graphql_schema = schema._schema

        errors = gql_validate_schema(graphql_schema)
        if errors:
            error_messages = [str(e) for e in errors]
            raise Exception(f"GraphQL schema validation failed: {'; '.join(error_messages)}")

        result = graphql_sync(graphql_schema, get_introspection_query())
        if result.errors:
            error_messages = [str(e) for e in result.errors]
            raise Exception(f"GraphQL introspection failed: {'; '.join(error_messages)}")

        logger.info("GraphQL schema validation successful")

    except Exception as e:
        logger.error("GraphQL schema validation failed", error=str(e))
        raise


def create_graphql_router(schema: strawberry.Schema) -> GraphQLRouter[dict[str, Any], None]:
    """Create a GraphQL router for FastAPI."""

    async def get_context(request: Request) -> dict[str, Any]:
        """Get the context for GraphQL resolvers."""
        bind_request_id(request.headers.get("x-request-id"))
        return {
            "request": request,
        }

    return GraphQLRouter(
        schema,
        path="/graphql",
        graphql_ide="graphiql" if settings.debug else None,
        context_getter=get_context,
    )
