"""Pytest fixtures for django-asset-renderer tests."""

from __future__ import annotations

from pathlib import Path
from unittest import mock

import pytest


def write_files(root: Path, files: dict[str, str | bytes]) -> Path:
    """Create ``files`` (relative path -> content) under ``root``."""
    for relative, content in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def site_dir(tmp_path):
    """A small site mixing templates, styles and static files."""
    return write_files(
        tmp_path / "site",
        {
            "index.handlebars": "<h1>{{title}}</h1>",
            "about.ejs": "<p>About <%= name %></p>",
            "notes.txt": "plain notes\n",
            "docs/index.html": "<p>Docs</p>",
            "docs/guide.html": "<p>Guide</p>",
            "img/logo.png": b"\x89PNG\r\n\x1a\n\x00\x00binary",
            "drafts/wip.html": "<p>Not ready</p>",
        },
    )


@pytest.fixture
def script_builder():
    """Replace the esbuild CLI with a builder that tags its input."""
    builder = mock.Mock()
    builder.build.side_effect = lambda source, context: f"/*built*/{source}"
    with mock.patch(
        "asset_renderer.compiler.get_builder",
        side_effect=lambda path: builder,
    ):
        yield builder


@pytest.fixture
def no_terser():
    """Force script minification through rjsmin."""
    with mock.patch("asset_renderer.minify.find_executable", return_value=None):
        yield
