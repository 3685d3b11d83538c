"""Lookup of JSON Schemas shipped as package data.

Schemas live next to this module as ``<name>.schema.json`` and are read via
importlib.resources, so they resolve the same from a checkout or a wheel.
"""

import json
from importlib.resources import files
from typing import Any

SCHEMA_PACKAGE = "secgate.schemas"
SCHEMA_SUFFIX = ".schema.json"


class SchemaRegistry:
    """Index of the bundled schemas, keyed by name without suffix."""

    def __init__(self, package: str = SCHEMA_PACKAGE) -> None:
        self.package = package
        self.available: tuple[str, ...] = tuple(sorted(
            item.name.removesuffix(SCHEMA_SUFFIX)
            for item in files(package).iterdir()
            if item.name.endswith(SCHEMA_SUFFIX)
        ))
        self._parsed: dict[str, dict[str, Any]] = {}

    def get_text(self, name: str) -> str:
        """Raw schema text.

        Raises:
            KeyError: If no schema of that name is bundled
        """
        name = name.removesuffix(SCHEMA_SUFFIX)
        if name not in self.available:
            raise KeyError(
                f"Schema '{name}' is not bundled with secgate "
                f"(available: {', '.join(self.available) or 'none'})"
            )
        return (files(self.package) / f"{name}{SCHEMA_SUFFIX}").read_text(encoding="utf-8")

    def get_json(self, name: str) -> dict[str, Any]:
        """Parsed schema, cached per registry.

        Raises:
            KeyError: If no schema of that name is bundled
            ValueError: If the bundled file is not valid JSON
        """
        name = name.removesuffix(SCHEMA_SUFFIX)
        if name not in self._parsed:
            try:
                self._parsed[name] = json.loads(self.get_text(name))
            except json.JSONDecodeError as e:
                raise ValueError(f"Bundled schema '{name}' is corrupt: {e}") from e
        return self._parsed[name]


_registry: SchemaRegistry | None = None


def get_registry() -> SchemaRegistry:
    """Process-wide registry, built on first use."""
    global _registry
    if _registry is None:
        _registry = SchemaRegistry()
    return _registry
