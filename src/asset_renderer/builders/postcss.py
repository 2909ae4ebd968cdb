"""PostCSS optimizer (autoprefixer)."""

from __future__ import annotations

import subprocess

from ..conf import find_executable, get_setting
from .base import BaseAssetBuilder, BuildContext


class PostCSSOptimizer(BaseAssetBuilder):
    """Run CSS through the PostCSS CLI with ``POSTCSS_PLUGINS``.

    Plugins are resolved by postcss-cli from the site root, so they must be
    installed in the project's ``node_modules``.

    Requirements:
        - postcss-cli and the configured plugins (autoprefixer by default)
    """

    def build(self, source: str, context: BuildContext) -> str:
        plugins: list[str] = get_setting("POSTCSS_PLUGINS")
        if not plugins:
            return source

        cmd = self._build_command(self._get_cli_path(), plugins)
        result = subprocess.run(  # noqa: S603
            cmd,
            input=source,
            capture_output=True,
            text=True,
            timeout=get_setting("CLI_TIMEOUT"),
            cwd=context.root,
        )

        if result.returncode != 0:
            raise subprocess.SubprocessError(
                f"PostCSS failed for {context.name}: {result.stderr}"
            )

        return result.stdout

    def _get_cli_path(self) -> str:
        return find_executable("POSTCSS_PATH", "postcss") or "postcss"

    def _build_command(self, cli_path: str, plugins: list[str]) -> list[str]:
        """Build the PostCSS CLI command arguments (stdin -> stdout)."""
        return [cli_path, "--no-map", "--use", *plugins]
