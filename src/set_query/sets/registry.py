"""
Set registry for registering and looking up named set resolvers.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from set_query.logging import get_logger

logger = get_logger(__name__)

SetResolver = Callable[..., Any]

# Set names double as GraphQL enum values, so they must be valid GraphQL names
SET_NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _reserved_name(name: str) -> bool:
    # GraphQL reserves leading "__"; Python enums reserve _sunder_ members
    return name.startswith("__") or (name.startswith("_") and name.endswith("_"))


@dataclass(frozen=True)
class RegisteredSet:
    """A named set backed by a resolver callable."""

    name: str
    resolver: SetResolver
    description: str | None = None

    @property
    def enum_name(self) -> str:
        """Name of the GraphQL enum value exposing this set."""
        return self.name.upper()


class SetRegistry:
    """
    Central registry of user-defined sets.

    Resolvers are registered at startup, before the GraphQL schema is built.
    Once the schema is built the registry is frozen and further registration
    is rejected, so the advertised `set` enumeration and the resolvers the
    query layer can reach always agree.
    """

    def __init__(self):
        self._sets: dict[str, RegisteredSet] = {}
        self._frozen = False

    def register(
        self, name: str, resolver: SetResolver, description: str | None = None
    ) -> RegisteredSet:
        """
        Register a resolver under a set name.

        Args:
            name: Set name, must be a valid GraphQL name
            resolver: Callable invoked with the query item's args spread positionally
            description: Optional human-readable description

        Returns:
            The registered set

        Raises:
            RuntimeError: If the registry has been frozen
            ValueError: If the name is invalid, reserved or already registered
            TypeError: If the resolver is not callable
        """
        if self._frozen:
            raise RuntimeError(f"Cannot register set '{name}': registry is frozen")
        if not isinstance(name, str) or not SET_NAME_PATTERN.fullmatch(name):
            raise ValueError(f"Invalid set name: {name!r}")
        if _reserved_name(name):
            raise ValueError(f"Reserved set name: {name!r}")
        if not callable(resolver):
            raise TypeError(f"Resolver for set '{name}' is not callable")

        enum_name = name.upper()
        for existing in self._sets.values():
            if existing.name == name:
                raise ValueError(f"Set '{name}' is already registered")
            if existing.enum_name == enum_name:
                raise ValueError(f"Set '{name}' conflicts with registered set '{existing.name}'")

        registered = RegisteredSet(name=name, resolver=resolver, description=description)
        self._sets[name] = registered
        logger.info("Registered set", name=name)
        return registered

    def set(
        self, name: str | None = None, description: str | None = None
    ) -> Callable[[SetResolver], SetResolver]:
        """
        Decorator form of register().

        The set name defaults to the decorated function's name and the
        description to the first line of its docstring.
        """

        def decorator(func: SetResolver) -> SetResolver:
            doc = (func.__doc__ or "").strip().splitlines()
            self.register(
                name or func.__name__,
                func,
                description=description or (doc[0] if doc else None),
            )
            return func

        return decorator

    def get(self, name: str) -> RegisteredSet | None:
        """
        Get a registered set by name.

        Returns:
            RegisteredSet or None if not found
        """
        return self._sets.get(name)

    def get_resolver(self, name: str) -> SetResolver | None:
        """Get the resolver callable for a set name, or None if not registered."""
        registered = self._sets.get(name)
        return registered.resolver if registered else None

    def list_all(self) -> list[RegisteredSet]:
        """List all registered sets in registration order."""
        return list(self._sets.values())

    def list_names(self) -> list[str]:
        """List all registered set names."""
        return list(self._sets.keys())

    def unregister(self, name: str) -> bool:
        """
        Unregister a set by name.

        Returns:
            True if the set was found and removed, False otherwise

        Raises:
            RuntimeError: If the registry has been frozen
        """
        if self._frozen:
            raise RuntimeError(f"Cannot unregister set '{name}': registry is frozen")
        if name in self._sets:
            del self._sets[name]
            return True
        return False

    def freeze(self) -> None:
        """Reject any further registration changes."""
        if not self._frozen:
            logger.info("Set registry frozen", names=self.list_names())
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def clear(self) -> None:
        """Remove all registered sets and unfreeze the registry."""
        self._sets.clear()
        self._frozen = False

    def __len__(self) -> int:
        return len(self._sets)

    def __contains__(self, name: object) -> bool:
        return name in self._sets


# Global registry instance
registry = SetRegistry()
