"""Compiled assets and the renderers attached to template assets."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

Bindings = Mapping[str, Any]


class Renderer(ABC):
    """A compiled template.

    Every renderer is awaited the same way, whether the underlying engine
    renders synchronously or not.
    """

    @abstractmethod
    async def __call__(self, bindings: Bindings) -> str: ...


class SyncRenderer(Renderer):
    """Wraps an engine that returns the rendered markup immediately."""

    def __init__(self, render: Callable[[Bindings], str]) -> None:
        self._render = render

    async def __call__(self, bindings: Bindings) -> str:
        return self._render(bindings)


class AsyncRenderer(Renderer):
    """Wraps an engine whose render call returns an awaitable."""

    def __init__(self, render: Callable[[Bindings], Awaitable[str]]) -> None:
        self._render = render

    async def __call__(self, bindings: Bindings) -> str:
        return await self._render(bindings)


@dataclass
class Artifact:
    """A servable asset compiled from one source file.

    Exactly one of ``content`` (finished payload) and ``renderer``
    (template) is set. ``public_path`` may be rewritten once by the site
    index (HTML extension hiding); everything else is fixed at creation.
    """

    public_path: str
    content_type: str
    source_path: str
    content: bytes | str | None = None
    renderer: Renderer | None = None
    engine: str | None = None

    def __post_init__(self) -> None:
        if (self.content is None) == (self.renderer is None):
            raise ValueError(
                f"Artifact {self.public_path!r} needs exactly one of content or renderer"
            )

    @property
    def is_template(self) -> bool:
        return self.renderer is not None

    async def render(self, bindings: Bindings | None = None) -> bytes | str:
        """Return the payload, rendering templates with ``bindings``."""
        if self.renderer is not None:
            return await self.renderer(bindings or {})
        return self.content  # type: ignore[return-value]
