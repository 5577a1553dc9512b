"""
Input field declarations for post query arguments.

Post query arguments are declared as a mapping of python field name to
InputField. Field contributors receive that mapping and return an augmented
copy, and build_input_type() turns the final mapping into the Strawberry
input type exposed as the `where` argument.
"""

from collections.abc import Callable, Mapping
from dataclasses import MISSING, dataclass
from typing import Any

import strawberry

from ..logging import get_logger
from ..sets.registry import SetRegistry
from ..sets.registry import registry as default_registry
from .types import OrderDirection, PostOrderBy, SetRelation, build_set_enum

logger = get_logger(__name__)


@dataclass(frozen=True)
class InputField:
    """Declaration of one input field."""

    annotation: Any
    description: str | None = None
    default: Any = None


InputFields = dict[str, InputField]
FieldContributor = Callable[[Mapping[str, InputField]], InputFields]

SET_QUERY_FIELD = "set_query"

POST_QUERY_FIELDS: InputFields = {
    "author_id": InputField(int | None, "Only posts by this author"),
    "status": InputField(str | None, "Post status, defaults to published posts"),
    "search": InputField(str | None, "Case-insensitive title search"),
    "orderby": InputField(PostOrderBy | None, "Field to order posts by"),
    "order": InputField(OrderDirection | None, "Sort direction"),
}


def build_input_type(name: str, fields: Mapping[str, InputField], description: str | None = None):
    """Create a Strawberry input type from field declarations."""
    namespace: dict[str, Any] = {"__annotations__": {}}
    for field_name, declaration in fields.items():
        namespace["__annotations__"][field_name] = declaration.annotation
        namespace[field_name] = strawberry.field(
            default=declaration.default, description=declaration.description
        )

    return strawberry.input(type(name, (), namespace), name=name, description=description)


class SetQueryFieldContributor:
    """Adds the `setQuery` field to post query arguments."""

    def __init__(self, set_registry: SetRegistry | None = None):
        self.registry = set_registry if set_registry is not None else default_registry
        self._field: InputField | None = None

    def build_item_input(self):
        """Build the input type of one set query item."""
        set_enum = build_set_enum(self.registry)
        if set_enum is None:
            logger.warning("No sets registered; exposing set names as strings")
            set_type: Any = str
        else:
            set_type = set_enum

        return build_input_type(
            "SetQueryItem",
            {
                "set": InputField(set_type, "User-defined sets", default=MISSING),
                "args": InputField(
                    list[str] | None,
                    "A list of arguments passed to the user-defined set function",
                ),
                "relation": InputField(
                    SetRelation | None,
                    "How this set combines with the others (only OR is supported)",
                ),
            },
            description="Query objects based on user-defined sets",
        )

    def field(self) -> InputField:
        """The `setQuery` field declaration, built once per contributor."""
        if self._field is None:
            item_input = self.build_item_input()
            self._field = InputField(
                list[item_input] | None,  # type: ignore[valid-type]
                "Query objects based on user-defined sets",
            )
        return self._field

    def contribute_fields(self, existing_fields: Mapping[str, InputField]) -> InputFields:
        """Return the existing fields plus `setQuery`; the input is not modified."""
        return {**existing_fields, SET_QUERY_FIELD: self.field()}

    __call__ = contribute_fields
