"""Test helper module that registers on import (import-based)."""

from ..registry import registry


@registry.set(name="import_set", description="Test import-based set")
def import_set(*args):
    return [42]
