"""Base class for asset builders."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import NamedTuple


class BuildContext(NamedTuple):
    """Where the source being built comes from."""

    name: str  # working public path, e.g. "/js/app.jsx"
    path: str  # absolute source path
    root: str  # absolute site root


class BaseAssetBuilder(ABC):
    """Abstract base class for asset builders.

    Builders are the text transforms of the compile pipeline (script
    lowering, style preprocessing, style optimization). They receive source
    text and produce a single built output string, raising on failure.
    """

    @abstractmethod
    def build(self, source: str, context: BuildContext) -> str:
        """Build an asset from source text.

        Args:
            source: Source text of the asset.
            context: File name and paths of the current compile.

        Returns:
            Built asset content as a string.
        """
        ...
