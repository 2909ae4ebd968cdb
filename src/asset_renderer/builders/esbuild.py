"""esbuild script builder: JSX lowering and syntax down-levelling."""

from __future__ import annotations

import subprocess

from ..conf import find_executable, get_setting
from .base import BaseAssetBuilder, BuildContext


class EsbuildScriptBuilder(BaseAssetBuilder):
    """Builder that transpiles ``.js``/``.jsx`` sources with the esbuild CLI.

    JSX elements are lowered to calls of the configured factory
    (``JSX_FACTORY``) and newer syntax is lowered to ``ESBUILD_TARGET``.

    Requirements:
        - esbuild CLI (``npm install esbuild`` or the standalone binary)
    """

    def build(self, source: str, context: BuildContext) -> str:
        cmd = self._build_command(self._get_cli_path(), context)
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
                f"esbuild failed for {context.name}: {result.stderr}"
            )

        return result.stdout

    def _get_cli_path(self) -> str:
        return find_executable("ESBUILD_PATH", "esbuild") or "esbuild"

    def _build_command(self, cli_path: str, context: BuildContext) -> list[str]:
        """Build the esbuild CLI command arguments (stdin -> stdout)."""
        return [
            cli_path,
            "--loader=jsx",
            f"--sourcefile={context.name}",
            f"--target={get_setting('ESBUILD_TARGET')}",
            f"--jsx-factory={get_setting('JSX_FACTORY')}",
            "--log-level=error",
        ]
