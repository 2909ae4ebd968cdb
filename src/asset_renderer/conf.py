"""Configuration and settings for django-asset-renderer."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    # Site served by AssetRendererMiddleware
    "SOURCE": None,
    "ROOT": None,
    "SKIP": [],
    "HIDE_HTML_EXTENSION": True,
    "VARS": None,
    "DISPLAY_ERRORS": False,
    "CACHE_MAX_AGE": 3600,
    # None means "minify when DEBUG is off"
    "MINIFY": None,
    # Transform collaborators
    "SCRIPT_BUILDER": "asset_renderer.builders.esbuild.EsbuildScriptBuilder",
    "STYLE_BUILDER": "asset_renderer.builders.scss.SassStyleBuilder",
    "STYLE_OPTIMIZER": "asset_renderer.builders.postcss.PostCSSOptimizer",
    # esbuild settings
    "ESBUILD_PATH": None,
    "ESBUILD_TARGET": "es2015",
    "JSX_FACTORY": "Aviation.element",
    # PostCSS settings
    "POSTCSS_PATH": None,
    "POSTCSS_PLUGINS": ["autoprefixer"],
    # Script minification
    "TERSER_PATH": None,
    "TERSER_OPTIONS": ["-c", "-m"],
    "CLI_TIMEOUT": 30,
}


_UNSET = object()


def get_setting(key: str, default: Any = _UNSET) -> Any:
    """Get a setting from the ASSET_RENDERER dict or return default."""
    user_settings: dict[str, Any] = getattr(settings, "ASSET_RENDERER", {})
    fallback = DEFAULTS.get(key) if default is _UNSET else default
    return user_settings.get(key, fallback)


def resolve_minify(minify: bool | None = None) -> bool:
    """Decide whether output should be minified.

    An explicit argument wins, then the ``MINIFY`` setting. When neither is
    set, minification follows the execution mode: on in production
    (``DEBUG`` off), off during development.
    """
    if minify is not None:
        return minify
    configured: bool | None = get_setting("MINIFY")
    if configured is not None:
        return bool(configured)
    return not getattr(settings, "DEBUG", False)


def find_executable(setting_key: str, name: str) -> str | None:
    """Find a Node CLI binary.

    Search order: explicit setting -> node_modules/.bin/<name> -> PATH.
    """
    explicit: str | None = get_setting(setting_key)
    if explicit:
        return explicit

    base_dir = getattr(settings, "BASE_DIR", None)
    if base_dir is not None:
        local = Path(base_dir) / "node_modules" / ".bin" / name
        if local.exists():
            return str(local)
    return shutil.which(name)
