"""Build a site index: every file of a source compiled and keyed by public path.

The index is built once and never changes afterwards; request handlers
created from it only read it.
"""

from __future__ import annotations

import glob
import logging
import os
import posixpath
from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .artifacts import Artifact
from .compiler import compile_asset
from .conf import resolve_minify

if TYPE_CHECKING:
    from .middleware import GetVars, RequestHandler

logger = logging.getLogger(__name__)


class SiteIndex:
    """Compiled artifacts of one source, keyed by public path.

    Attributes:
        artifacts: Read-only mapping of public path to :class:`Artifact`.
        vars: Default template bindings. A value keyed by an artifact's
            public path is used as that file's own bindings.
        display_errors: Answer misses with a 404 instead of passing on.
        cache: ``Cache-Control`` max-age in seconds, or None for the default.
    """

    def __init__(
        self,
        artifacts: Mapping[str, Artifact],
        vars: Mapping[str, Any] | None = None,
        display_errors: bool = False,
        cache: int | None = None,
    ) -> None:
        self.artifacts: Mapping[str, Artifact] = MappingProxyType(dict(artifacts))
        self.vars = vars
        self.display_errors = display_errors
        self.cache = cache

    def __len__(self) -> int:
        return len(self.artifacts)

    def __contains__(self, public_path: object) -> bool:
        return public_path in self.artifacts

    def get(self, public_path: str) -> Artifact | None:
        return self.artifacts.get(public_path)

    def handle_request(
        self,
        vars: Mapping[str, Any] | None = None,
        get_vars: GetVars | None = None,
        display_errors: bool | None = None,
        cache: int | None = None,
    ) -> RequestHandler:
        """Create a request handler serving this index.

        Arguments given here take precedence over the index-level defaults.
        """
        from .middleware import RequestHandler

        return RequestHandler(
            self,
            vars=vars,
            get_vars=get_vars,
            display_errors=display_errors,
            cache=cache,
        )


def load(
    source: str | os.PathLike[str] | Sequence[str | os.PathLike[str]],
    root: str | os.PathLike[str] | None = None,
    skip: Iterable[str] | None = None,
    hide_html_extension: bool = True,
    minify: bool | None = None,
    vars: Mapping[str, Any] | None = None,
    display_errors: bool = False,
    cache: int | None = None,
) -> SiteIndex:
    """Compile every file of ``source`` into a :class:`SiteIndex`.

    Args:
        source: A directory (walked recursively, dot-files excluded) or an
            explicit ordered list of files.
        root: Directory public paths are relative to. Defaults to the
            source directory, or the directory of the first listed file.
        skip: Path fragments to exclude; a fragment matches a path segment,
            so ``"drafts"`` skips ``/site/drafts/x.html``.
        hide_html_extension: Serve ``/about.html`` at ``/about`` and
            ``/docs/index.html`` at ``/docs``.
        minify: Minify artifacts. ``None`` applies the configured default,
            resolved once for the whole load.
        vars: Default template bindings.
        display_errors: Answer misses with a 404 instead of passing on.
        cache: ``Cache-Control`` max-age in seconds.

    Returns:
        The site index. A file that fails to compile aborts the load.
    """
    files, default_root = _enumerate(source)
    root = root or default_root
    fragments = [posixpath.join("/", fragment) for fragment in skip or ()]
    minify = resolve_minify(minify)

    artifacts: dict[str, Artifact] = {}
    for path in files:
        if os.path.isdir(path):
            continue
        if any(fragment in _posix(path) for fragment in fragments):
            continue

        try:
            artifact = compile_asset(path, root, minify=minify)
        except Exception:
            logger.error("Failed to compile %s", path)
            raise

        if hide_html_extension:
            artifact.public_path = strip_html_extension(artifact.public_path)

        previous = artifacts.get(artifact.public_path)
        if previous is not None:
            logger.warning(
                "Public path %s from %s replaces %s",
                artifact.public_path,
                artifact.source_path,
                previous.source_path,
            )
        artifacts[artifact.public_path] = artifact

    logger.info("Loaded %d asset(s) from %s", len(artifacts), root)
    return SiteIndex(
        artifacts, vars=vars, display_errors=display_errors, cache=cache
    )


def strip_html_extension(public_path: str) -> str:
    """Map an HTML public path to its extensionless route.

    ``/index.html`` -> ``/``, ``/docs/index.html`` -> ``/docs``,
    ``/about.html`` -> ``/about``. Other paths are returned unchanged.
    """
    if public_path.endswith("/index.html"):
        public_path = public_path[: -len("/index.html")]
    elif public_path.endswith(".html"):
        public_path = public_path[: -len(".html")]
    return public_path or "/"


def _enumerate(
    source: str | os.PathLike[str] | Sequence[str | os.PathLike[str]],
) -> tuple[list[str], str]:
    """Return the files of ``source`` in load order and the default root."""
    if isinstance(source, (str, os.PathLike)):
        folder = os.fspath(source)
        pattern = os.path.join(glob.escape(folder), "**", "*")
        return sorted(glob.glob(pattern, recursive=True)), folder

    files = [os.fspath(path) for path in source]
    if not files:
        raise ValueError("load() needs at least one file")
    return files, os.path.dirname(os.path.abspath(files[0]))


def _posix(path: str) -> str:
    return path.replace(os.sep, "/")
