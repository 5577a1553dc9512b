"""
Input field mapping for post queries.

Post query input arrives keyed by GraphQL field name. The mapper copies it
verbatim into a fresh query argument mapping and then runs the registered
hooks over it in priority order, so each hook can translate the fields it
owns into query engine arguments.
"""

import inspect
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from set_query.logging import get_logger

from .keys import AUTHOR_KEY, ORDER_BY_KEY, ORDER_KEY, SEARCH_KEY, STATUS_KEY

logger = get_logger(__name__)

QueryArgs = dict[str, Any]
MappingHook = Callable[[QueryArgs, Mapping[str, Any]], QueryArgs | Awaitable[QueryArgs]]

DEFAULT_PRIORITY = 10

# GraphQL input field -> query engine argument
POST_FIELD_MAP: dict[str, str] = {
    "authorId": AUTHOR_KEY,
    "status": STATUS_KEY,
    "search": SEARCH_KEY,
    "orderby": ORDER_BY_KEY,
    "order": ORDER_KEY,
}


def map_post_fields(query_args: QueryArgs, input_args: Mapping[str, Any]) -> QueryArgs:
    """Rename the base post fields to their query engine arguments."""
    for input_name, query_name in POST_FIELD_MAP.items():
        if input_name not in input_args:
            continue
        value = query_args.pop(input_name, input_args[input_name])
        if value is None:
            continue
        # Enum inputs carry their engine value
        query_args[query_name] = getattr(value, "value", value)
    return query_args


@dataclass(frozen=True)
class _Hook:
    priority: int
    order: int
    func: MappingHook


class InputFieldMapper:
    """Chain of hooks mapping post query input to query engine arguments."""

    def __init__(self):
        self._hooks: list[_Hook] = []

    def add_hook(self, hook: MappingHook, priority: int = DEFAULT_PRIORITY) -> None:
        """
        Register a mapping hook.

        Hooks run in ascending priority; hooks with equal priority run in the
        order they were added. A hook receives the query arguments built so
        far plus the original input and returns the (possibly new) query
        arguments. It may be a coroutine function.
        """
        self._hooks.append(_Hook(priority=priority, order=len(self._hooks), func=hook))
        self._hooks.sort(key=lambda h: (h.priority, h.order))

    @property
    def hooks(self) -> list[MappingHook]:
        return [hook.func for hook in self._hooks]

    async def map_input_fields(self, input_args: Mapping[str, Any] | None) -> QueryArgs:
        """Build query engine arguments from parsed post query input."""
        input_args = dict(input_args or {})
        query_args: QueryArgs = dict(input_args)

        for hook in self._hooks:
            result = hook.func(query_args, input_args)
            if inspect.isawaitable(result):
                result = await result
            query_args = result

        logger.debug("Mapped post query input", input_fields=sorted(input_args), query_args=query_args)
        return query_args
