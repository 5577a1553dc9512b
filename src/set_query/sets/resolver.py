"""
Set query resolution.

Turns the raw `setQuery` input of a post query into an inclusion-list patch on
the post query arguments: each valid set item's resolver is invoked, the
returned post IDs are merged and deduplicated, and the query is told to keep
the inclusion list's order.

Malformed input never raises. Items whose `set` does not resolve to a
resolver are dropped, and a resolver that fails or finds nothing contributes
the exclude-all sentinel `[0]` instead of aborting the whole query.
"""

import asyncio
import dataclasses
import inspect
import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from itertools import chain
from typing import Any

from set_query.config import settings
from set_query.logging import get_logger
from set_query.query.keys import INCLUSION_KEY, ORDER_BY_INCLUSION, ORDER_BY_KEY, SET_QUERY_KEY

from .registry import SetRegistry, SetResolver
from .registry import registry as default_registry

logger = get_logger(__name__)

# No post has ID 0, so an inclusion list of [0] matches nothing
EXCLUDE_ALL: tuple[int, ...] = (0,)

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")

# Numeric strings saturate at the bounds of a signed 64-bit ID column
ID_MAX = 2**63 - 1
ID_MIN = -(2**63)


class SetRelation(Enum):
    """How a set combines with the others. Only a union is supported."""

    OR = "OR"


@dataclass
class SetQueryItem:
    """One entry of a set query, as built by Python callers."""

    set: Any
    args: list[Any] = field(default_factory=list)
    relation: SetRelation = SetRelation.OR


@dataclass
class ValidSetQuery:
    """A set query item whose set resolved to a callable."""

    name: str
    resolver: SetResolver
    args: list[Any]
    relation: SetRelation


def to_identifier(value: Any) -> int:
    """Coerce a resolver result element to an integer post ID.

    Integers pass through, floats are truncated and strings contribute their
    leading integer, saturated to the 64-bit range. Anything that cannot be
    read as a number becomes 0.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, bytes | bytearray):
        value = bytes(value).decode("utf-8", "ignore")
    if isinstance(value, str):
        match = _INT_PREFIX.match(value)
        if not match:
            return 0
        digits = match.group(1)
        try:
            number = int(digits)
        except ValueError:
            # Past the interpreter's digit limit for str -> int conversion
            return ID_MIN if digits.startswith("-") else ID_MAX
        return max(ID_MIN, min(number, ID_MAX))
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


def _item_fields(item: Any) -> Mapping[str, Any] | None:
    if isinstance(item, Mapping):
        return item
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        return {f.name: getattr(item, f.name) for f in dataclasses.fields(item)}
    return None


def _relation(value: Any) -> SetRelation:
    if isinstance(value, SetRelation):
        return value
    if isinstance(value, Enum):
        value = value.value
    try:
        return SetRelation(value)
    except ValueError:
        return SetRelation.OR


def _normalize_result(name: str, result: Any) -> list[int]:
    if (
        isinstance(result, Sequence)
        and not isinstance(result, str | bytes | bytearray)
        and len(result) > 0
    ):
        return [to_identifier(value) for value in result]

    logger.debug("Set resolved to no posts", set=name, result_type=type(result).__name__)
    return list(EXCLUDE_ALL)


class SetQueryResolver:
    """
    Maps `setQuery` input onto post query arguments.

    `transform` is the synchronous form; `atransform` additionally awaits
    asynchronous resolvers, concurrently and bounded by a timeout.
    """

    def __init__(
        self,
        set_registry: SetRegistry | None = None,
        resolver_timeout: float | None = None,
    ):
        self.registry = set_registry if set_registry is not None else default_registry
        self.resolver_timeout = resolver_timeout

    def lookup(self, reference: Any) -> tuple[str, SetResolver] | None:
        """
        Resolve a set reference to its name and resolver.

        Names, and enum values wrapping names, are looked up in the registry.
        Callables are accepted as-is; they can only come from server-side
        callers since GraphQL input cannot carry one.
        """
        if isinstance(reference, Enum):
            reference = reference.value

        if isinstance(reference, str):
            resolver = self.registry.get_resolver(reference)
            return (reference, resolver) if resolver is not None else None

        if callable(reference):
            return getattr(reference, "__qualname__", repr(reference)), reference

        return None

    def validate(self, items: Any) -> list[ValidSetQuery]:
        """Drop items without a resolvable set and fill in defaults."""
        if not isinstance(items, list | tuple):
            logger.debug("Ignoring set query that is not a list", type=type(items).__name__)
            return []

        queries = []
        for index, item in enumerate(items):
            fields = _item_fields(item)
            found = self.lookup(fields.get("set")) if fields is not None else None
            if found is None:
                logger.debug("Dropped invalid set query item", index=index)
                continue

            name, resolver = found
            args = fields.get("args")
            queries.append(
                ValidSetQuery(
                    name=name,
                    resolver=resolver,
                    args=list(args) if isinstance(args, list | tuple) else [],
                    relation=_relation(fields.get("relation")),
                )
            )

        return queries

    def resolve(self, query: ValidSetQuery) -> list[int]:
        """Invoke one set's resolver and return its post IDs."""
        try:
            result = query.resolver(*query.args)

            if inspect.isawaitable(result):
                if inspect.iscoroutine(result):
                    result.close()
                logger.warning("Asynchronous set resolver called synchronously", set=query.name)
                return list(EXCLUDE_ALL)

            return _normalize_result(query.name, result)
        except Exception as e:
            logger.warning("Set resolver failed", set=query.name, error=str(e))
            return list(EXCLUDE_ALL)

    async def aresolve(self, query: ValidSetQuery) -> list[int]:
        """
        Invoke one set's resolver, awaiting it if it is asynchronous.

        Synchronous resolvers run in a worker thread so they neither block the
        event loop nor escape the timeout. A timed-out thread is abandoned and
        its result discarded.
        """
        timeout = (
            self.resolver_timeout if self.resolver_timeout is not None else settings.resolver_timeout
        )
        try:
            if inspect.iscoroutinefunction(query.resolver):
                result = await asyncio.wait_for(query.resolver(*query.args), timeout=timeout)
            else:
                result = await asyncio.wait_for(
                    asyncio.to_thread(query.resolver, *query.args), timeout=timeout
                )
                if inspect.isawaitable(result):
                    result = await asyncio.wait_for(result, timeout=timeout)

            return _normalize_result(query.name, result)
        except TimeoutError:
            logger.warning("Set resolver timed out", set=query.name, timeout=timeout)
            return list(EXCLUDE_ALL)
        except Exception as e:
            logger.warning("Set resolver failed", set=query.name, error=str(e))
            return list(EXCLUDE_ALL)

    def transform(self, query_args: dict[str, Any], input_args: Mapping[str, Any]) -> dict[str, Any]:
        """
        Apply the `setQuery` input to post query arguments.

        Args:
            query_args: Query arguments built by the upstream input mapping
            input_args: Parsed input arguments of the post query

        Returns:
            query_args, patched in place, or unchanged when there is no set query
        """
        raw = input_args.get(SET_QUERY_KEY)
        if not raw:
            return query_args

        queries = self.validate(raw)
        return self._apply(query_args, queries, [self.resolve(query) for query in queries])

    async def atransform(
        self, query_args: dict[str, Any], input_args: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Asynchronous form of transform()."""
        raw = input_args.get(SET_QUERY_KEY)
        if not raw:
            return query_args

        queries = self.validate(raw)
        contributions = await asyncio.gather(*(self.aresolve(query) for query in queries))
        return self._apply(query_args, queries, contributions)

    def _apply(
        self,
        query_args: dict[str, Any],
        queries: list[ValidSetQuery],
        contributions: Sequence[list[int]],
    ) -> dict[str, Any]:
        post_ids = list(dict.fromkeys(chain.from_iterable(contributions)))

        query_args[INCLUSION_KEY] = post_ids
        query_args[ORDER_BY_KEY] = ORDER_BY_INCLUSION
        query_args.pop(SET_QUERY_KEY, None)

        logger.debug(
            "Applied set query",
            sets=[query.name for query in queries],
            post_count=len(post_ids),
        )
        return query_args
