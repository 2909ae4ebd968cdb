"""Management command to compile a source tree and write the results."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError, CommandParser

from asset_renderer.artifacts import Artifact
from asset_renderer.conf import get_setting

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Compile a directory of assets and write every artifact to an output directory."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "source",
            nargs="?",
            help="Directory to compile. Defaults to ASSET_RENDERER['SOURCE'].",
        )
        parser.add_argument(
            "--output",
            "-o",
            default="dist",
            help="Directory the compiled site is written to.",
        )
        parser.add_argument(
            "--skip",
            nargs="+",
            default=None,
            help="Path fragments to exclude (matched as path segments).",
        )
        minify = parser.add_mutually_exclusive_group()
        minify.add_argument(
            "--minify",
            action="store_true",
            dest="minify",
            default=None,
            help="Minify output regardless of DEBUG.",
        )
        minify.add_argument(
            "--no-minify",
            action="store_false",
            dest="minify",
            help="Never minify output.",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be written without writing anything.",
        )

    def handle(self, **options: object) -> None:
        from asset_renderer.site import load

        source = options.get("source") or get_setting("SOURCE")
        if not source:
            raise CommandError("No source given and ASSET_RENDERER['SOURCE'] is not set.")

        skip = options.get("skip")
        index = load(
            str(source),
            root=get_setting("ROOT"),
            skip=skip if skip is not None else get_setting("SKIP"),
            hide_html_extension=get_setting("HIDE_HTML_EXTENSION"),
            minify=options.get("minify"),  # type: ignore[arg-type]
            vars=get_setting("VARS"),
        )
        output = Path(str(options.get("output") or "dist"))
        dry_run = options.get("dry_run")
        vars = index.vars or {}
        self.stdout.write(f"Writing {len(index)} asset(s) to {output}...")

        written = 0
        errors = 0
        for public_path, artifact in sorted(index.artifacts.items()):
            target = output / output_name(artifact)
            if dry_run:
                self.stdout.write(f"  [DRY RUN] Would write: {public_path} -> {target}")
                written += 1
                continue

            try:
                own = vars.get(public_path)
                bindings = own if isinstance(own, Mapping) else vars
                content = async_to_sync(artifact.render)(bindings)
                target.parent.mkdir(parents=True, exist_ok=True)
                if isinstance(content, str):
                    target.write_text(content, encoding="utf-8")
                else:
                    target.write_bytes(content)
                self.stdout.write(f"  Wrote: {public_path} -> {target}")
                written += 1
            except Exception:
                logger.exception("Failed to write %s", public_path)
                self.stderr.write(f"  ERROR: {public_path}")
                errors += 1

        logger.info("Wrote %d asset(s) to %s", written, output)
        prefix = "[DRY RUN] " if dry_run else ""
        self.stdout.write(
            self.style.SUCCESS(f"\n{prefix}Done. Written: {written}, Errors: {errors}")
        )


def output_name(artifact: Artifact) -> str:
    """Relative file name an artifact is written to.

    Extensionless HTML routes get their extension back: ``/`` ->
    ``index.html``, ``/docs`` -> ``docs.html``.
    """
    name = artifact.public_path.lstrip("/")
    if artifact.content_type != "text/html":
        return name
    if not name or name.endswith("/"):
        return f"{name}index.html"
    if not name.endswith(".html"):
        return f"{name}.html"
    return name
