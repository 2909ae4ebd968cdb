"""Helpers for loading configurable classes."""

from __future__ import annotations

from importlib import import_module
from typing import Any


def get_builder(builder_path: str) -> Any:
    """Import and instantiate a builder class."""
    cls = import_class(builder_path)
    return cls()


def import_class(dotted_path: str) -> type:
    """Import a class from a dotted path string."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = import_module(module_path)
    return getattr(module, class_name)  # type: ignore[no-any-return]
