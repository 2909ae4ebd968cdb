"""SASS/SCSS style builder."""

from __future__ import annotations

import os

import sass

from .base import BaseAssetBuilder, BuildContext


class SassStyleBuilder(BaseAssetBuilder):
    """Compile ``.sass``/``.scss`` sources to CSS with libsass.

    Imports resolve from the source file's own directory. The indented
    dialect is selected for ``.sass`` files. Syntax errors surface as
    ``sass.CompileError``.
    """

    def build(self, source: str, context: BuildContext) -> str:
        return sass.compile(  # type: ignore[no-any-return]
            string=source,
            include_paths=[os.path.dirname(context.path)],
            indented=context.name.endswith(".sass"),
        )
