"""Compile a directory of templates, styles and scripts and serve it from Django."""

from .artifacts import Artifact, AsyncRenderer, Renderer, SyncRenderer
from .compiler import compile_asset
from .minify import minify
from .site import SiteIndex, load, strip_html_extension

__all__ = [
    "Artifact",
    "AsyncRenderer",
    "Renderer",
    "SiteIndex",
    "SyncRenderer",
    "compile_asset",
    "load",
    "minify",
    "strip_html_extension",
]

__version__ = "0.1.0"
