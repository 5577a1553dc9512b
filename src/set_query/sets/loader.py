"""Configuration-driven set loader.

Loads and registers set resolvers from a YAML file. The path is given
explicitly or via settings.sets_config_path.

Supports three declaration forms: callable, import, entrypoint.
Strict mode is enabled by default and will fail startup on errors.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from importlib import import_module
from importlib import metadata as importlib_metadata
from pathlib import Path
from typing import Any

import yaml

from set_query.config import settings
from set_query.logging import get_logger

from .registry import SetRegistry, SetResolver
from .registry import registry as default_registry

logger = get_logger(__name__)


ENTRYPOINT_GROUP = "set_query.sets"


@dataclass
class LoaderConfig:
    strict_mode: bool = True
    declarations: list[dict[str, Any]] | None = None


def _load_file_config(path: str) -> LoaderConfig | None:
    try:
        with open(path, encoding="utf-8") as f:
            data: dict[str, Any] = yaml.safe_load(f) or {}
    except FileNotFoundError:
        return None

    return LoaderConfig(
        strict_mode=bool(data.get("strict_mode", True)),
        declarations=list(data.get("sets", []) or []),
    )


def _discover_config() -> LoaderConfig | None:
    """Discover config from settings.sets_config_path."""
    if not settings.sets_config_path:
        return None

    path = Path(settings.sets_config_path)
    if not path.exists():
        logger.warning("Sets config path set but not found", path=str(path))
        return None

    cfg = _load_file_config(str(path))
    if cfg:
        logger.info("Loaded sets config from settings", path=str(path))
    return cfg


def _resolve_callable(qualified_name: str) -> SetResolver:
    if ":" in qualified_name:
        module_name, attr_name = qualified_name.split(":", 1)
    else:
        module_name, attr_name = qualified_name.rsplit(".", 1)

    obj = getattr(import_module(module_name), attr_name)
    if not callable(obj):
        raise TypeError(f"Resolved object is not callable: {qualified_name}")
    return obj


def _resolve_entrypoint(name: str) -> SetResolver:
    try:
        group_filtered: Iterable[Any] = importlib_metadata.entry_points().select(
            group=ENTRYPOINT_GROUP
        )
    except Exception as e:  # pragma: no cover - edge cases
        raise RuntimeError(f"Failed to read entry points: {e}") from e

    for ep in group_filtered:
        if getattr(ep, "name", None) == name:
            obj = ep.load()
            if not callable(obj):
                raise TypeError(f"Entry point '{name}' is not callable")
            return obj

    raise LookupError(f"Entry point not found: {name}")


def _register(
    set_registry: SetRegistry, decl: dict[str, Any], resolver: SetResolver, default_name: str
) -> str:
    name = decl.get("name") or default_name
    set_registry.register(name, resolver, description=decl.get("description"))
    return name


def load_sets_from_config(
    config_path: str | None = None, set_registry: SetRegistry | None = None
) -> None:
    """Load and register sets according to configuration.

    Raises on errors when strict mode is enabled (default).
    """
    set_registry = set_registry if set_registry is not None else default_registry

    cfg: LoaderConfig | None
    if config_path:
        cfg = _load_file_config(config_path)
        if cfg:
            logger.info("Loaded sets config from explicit path", path=config_path)
    else:
        cfg = _discover_config()

    if not cfg or not cfg.declarations:
        logger.info("No sets configuration found; skipping set loading")
        return

    strict_mode = cfg.strict_mode

    for decl in cfg.declarations:
        if not isinstance(decl, dict):
            msg = f"Invalid set declaration type: {type(decl)}"
            if strict_mode:
                raise ValueError(msg)
            logger.error(msg)
            continue

        if decl.get("enabled") is False:
            continue

        try:
            if "callable" in decl:
                qualified = decl["callable"]
                resolver = _resolve_callable(qualified)
                name = _register(set_registry, decl, resolver, re.split(r"[:.]", qualified)[-1])
                logger.info("Registered set via callable", callable_path=qualified, name=name)
            elif "import" in decl:
                # The module registers its sets on import, via the registry.set decorator
                import_module(decl["import"])
                logger.info("Imported set module", import_path=decl["import"])
            elif "entrypoint" in decl:
                ep_name = decl["entrypoint"]
                resolver = _resolve_entrypoint(ep_name)
                name = _register(set_registry, decl, resolver, ep_name)
                logger.info("Registered set via entrypoint", entrypoint=ep_name, name=name)
            else:
                raise ValueError("Set declaration must include one of: callable, import, entrypoint")

        except Exception as e:
            msg = f"Failed to load set declaration: {e}"
            if strict_mode:
                raise RuntimeError(msg) from e
            logger.error(msg)
            continue

    logger.info(
        "Sets loading complete",
        requested=len(cfg.declarations),
        registered=len(set_registry),
        names=set_registry.list_names(),
        strict_mode=strict_mode,
    )
