"""Compile one source file into a servable :class:`Artifact`.

Stages run in a fixed order, each triggered by a marker in the file name:

| markers              | served as | content type           |
|----------------------|-----------|------------------------|
| ``.jsx``, ``.js``    | ``.js``   | application/javascript |
| ``.ejs``             | ``.html`` | text/html (template)   |
| ``.handlebars``      | ``.html`` | text/html (template)   |
| ``.sass``, ``.scss`` | ``.css``  | text/css               |
| anything else        | unchanged | MIME lookup            |

The template stage ends compilation early: templates are never style
processed or minified after compiling.
"""

from __future__ import annotations

import logging
import mimetypes
import os
import posixpath
from collections.abc import Callable
from dataclasses import dataclass

from .artifacts import Artifact
from .builders.base import BuildContext
from .conf import get_setting, resolve_minify
from .engines import ENGINES
from .minify import minify as minify_content
from .utils import get_builder

logger = logging.getLogger(__name__)

SCRIPT_MARKERS = (".jsx", ".js")
TEMPLATE_MARKERS = tuple(ENGINES)
STYLE_MARKERS = (".sass", ".scss")

SCRIPT_TYPE = "application/javascript"
HTML_TYPE = "text/html"
CSS_TYPE = "text/css"
DEFAULT_TYPE = "text/plain"


@dataclass
class _Compilation:
    """Working state of a single compile."""

    path: str
    root: str
    name: str
    content: bytes | str
    minify: bool
    content_type: str | None = None

    @property
    def context(self) -> BuildContext:
        return BuildContext(name=self.name, path=self.path, root=self.root)

    @property
    def text(self) -> str:
        if isinstance(self.content, bytes):
            return self.content.decode("utf-8")
        return self.content


def compile_asset(
    path: str | os.PathLike[str],
    root: str | os.PathLike[str] | None = None,
    minify: bool | None = None,
) -> Artifact:
    """Load a file and compile it into a static asset or a template.

    Args:
        path: Source file.
        root: Directory the public path is relative to. Defaults to the
            file's own directory.
        minify: Minify output. ``None`` applies the configured default
            (see :func:`asset_renderer.conf.resolve_minify`).

    Returns:
        The compiled artifact. Transform errors propagate.
    """
    abs_path = os.path.abspath(path)
    abs_root = os.path.abspath(root) if root else os.path.dirname(abs_path)
    name = abs_path.replace(abs_root, "", 1).replace(os.sep, "/")
    if not name.startswith("/"):
        name = "/" + name

    with open(abs_path, "rb") as f:
        content = f.read()

    state = _Compilation(
        path=abs_path,
        root=abs_root,
        name=name,
        content=content,
        minify=resolve_minify(minify),
    )

    for applies, stage in STAGES:
        if not applies(state):
            continue
        artifact = stage(state)
        if artifact is not None:
            logger.debug("Compiled template %s -> %s", abs_path, artifact.public_path)
            return artifact

    logger.debug("Compiled %s -> %s (%s)", abs_path, state.name, state.content_type)
    return Artifact(
        public_path=state.name,
        content_type=state.content_type or DEFAULT_TYPE,
        source_path=abs_path,
        content=state.content,
    )


def has_marker(name: str, markers: tuple[str, ...]) -> bool:
    """Whether the file name in ``name`` carries any of ``markers``.

    Markers match whole dot-separated suffixes, so ``data.json`` does not
    carry ``.js``.
    """
    suffixes = _suffixes(posixpath.basename(name))
    return any(marker in suffixes for marker in markers)


def rewrite_markers(name: str, markers: tuple[str, ...], served: str) -> str:
    """Drop ``markers`` from the file name and ensure it ends up ``served``.

    ``/page.ejs`` -> ``/page.html``, ``/page.html.ejs`` -> ``/page.html``,
    ``/app.jsx`` -> ``/app.js``.
    """
    directory, base = posixpath.split(name)
    stem, *rest = base.split(".")
    suffixes = [f".{part}" for part in rest if f".{part}" not in markers]
    if served not in suffixes:
        suffixes.append(served)
    return posixpath.join(directory, stem + "".join(suffixes))


def _suffixes(base: str) -> list[str]:
    return [f".{part}" for part in base.split(".")[1:]]


# Stages


def _compile_script(state: _Compilation) -> None:
    builder = get_builder(get_setting("SCRIPT_BUILDER"))
    state.content = builder.build(state.text, state.context)
    state.name = rewrite_markers(state.name, SCRIPT_MARKERS, ".js")
    state.content_type = SCRIPT_TYPE


def _compile_template(state: _Compilation) -> Artifact:
    source = state.text
    # Pre-minify the source; rendered output is served as produced.
    if state.minify:
        source = minify_content(source, HTML_TYPE)  # type: ignore[assignment]

    marker = next(m for m in TEMPLATE_MARKERS if has_marker(state.name, (m,)))
    engine, compile_template = ENGINES[marker]
    renderer = compile_template(source, state.path, state.root)

    return Artifact(
        public_path=rewrite_markers(state.name, (marker,), ".html"),
        content_type=HTML_TYPE,
        source_path=state.path,
        renderer=renderer,
        engine=engine,
    )


def _compile_style(state: _Compilation) -> None:
    builder = get_builder(get_setting("STYLE_BUILDER"))
    state.content = builder.build(state.text, state.context)
    state.name = rewrite_markers(state.name, STYLE_MARKERS, ".css")
    state.content_type = CSS_TYPE


def _optimize_style(state: _Compilation) -> None:
    optimizer = get_builder(get_setting("STYLE_OPTIMIZER"))
    state.content = optimizer.build(state.text, state.context)


def _resolve_type(state: _Compilation) -> None:
    guessed, _ = mimetypes.guess_type(state.name, strict=False)
    state.content_type = guessed or DEFAULT_TYPE


def _minify(state: _Compilation) -> None:
    state.content = minify_content(state.content, state.content_type or DEFAULT_TYPE)


Stage = Callable[[_Compilation], "Artifact | None"]

STAGES: list[tuple[Callable[[_Compilation], bool], Stage]] = [
    (lambda s: has_marker(s.name, SCRIPT_MARKERS), _compile_script),
    (lambda s: has_marker(s.name, TEMPLATE_MARKERS), _compile_template),
    (lambda s: has_marker(s.name, STYLE_MARKERS), _compile_style),
    (lambda s: s.minify and has_marker(s.name, (".css",)), _optimize_style),
    (lambda s: s.content_type is None, _resolve_type),
    (lambda s: s.minify, _minify),
]
