"""Minification of compiled assets, dispatched on content type.

- HTML: minify-html, after inline ``<script>`` bodies are minified one by
  one. A script that fails to minify is kept as written.
- CSS: rcssmin. Failures propagate.
- JS: terser when available, rjsmin otherwise. A terser failure keeps the
  original content.
"""

from __future__ import annotations

import logging
import subprocess
from html.parser import HTMLParser

import minify_html
import rcssmin
import rjsmin

from .conf import find_executable, get_setting

logger = logging.getLogger(__name__)

HTML_TYPES = frozenset({"text/html"})
CSS_TYPES = frozenset({"text/css"})
JS_TYPES = frozenset({"application/javascript", "text/javascript"})


def minify(content: bytes | str, content_type: str) -> bytes | str:
    """Minify ``content`` according to its content type.

    Unknown types are returned unchanged.
    """
    if content_type in HTML_TYPES:
        return minify_markup(_as_text(content))
    if content_type in CSS_TYPES:
        return minify_style(_as_text(content))
    if content_type in JS_TYPES:
        return minify_script(_as_text(content))
    return content


def minify_markup(html: str) -> str:
    """Collapse whitespace, strip comments and minify embedded CSS/JS.

    Template syntax (``{{ }}`` and ``<% %>``) is preserved so template
    sources can be minified before they are compiled.
    """
    html = _minify_inline_scripts(html)
    return minify_html.minify(  # type: ignore[no-any-return]
        html,
        minify_css=True,
        minify_js=False,
        keep_closing_tags=True,
        keep_html_and_head_opening_tags=True,
        preserve_brace_template_syntax=True,
        preserve_chevron_percent_template_syntax=True,
    )


def minify_style(content: str) -> str:
    """Minify CSS content using rcssmin."""
    return rcssmin.cssmin(content)  # type: ignore[no-any-return]


def minify_script(content: str) -> str:
    """Minify JS content using terser (preferred) or rjsmin.

    Best effort: when terser rejects the script, the original content is
    returned unchanged.
    """
    terser_path = find_executable("TERSER_PATH", "terser")
    if terser_path is None:
        return rjsmin.jsmin(content)  # type: ignore[no-any-return]

    try:
        result = subprocess.run(  # noqa: S603
            [terser_path, *get_setting("TERSER_OPTIONS")],
            input=content,
            capture_output=True,
            text=True,
            timeout=get_setting("CLI_TIMEOUT"),
            check=True,
        )
    except (
        subprocess.CalledProcessError,
        subprocess.TimeoutExpired,
        OSError,
    ) as e:
        logger.warning("terser failed: %s. Keeping unminified script.", e)
        return content
    return result.stdout


def _as_text(content: bytes | str) -> str:
    if isinstance(content, bytes):
        return content.decode("utf-8")
    return content


class _InlineScriptMinifier(HTMLParser):
    """HTML parser that rewrites inline JS ``<script>`` bodies minified.

    Rebuilds the HTML string; everything outside inline scripts is copied
    through as written.
    """

    # Script types whose body is JavaScript.
    _JS_TYPES = frozenset({"", "text/javascript", "application/javascript", "module"})

    def __init__(self) -> None:
        super().__init__(convert_charrefs=False)
        self._output: list[str] = []
        self._in_script: bool = False
        self._script_content: list[str] = []

    def get_output(self) -> str:
        return "".join(self._output)

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._output.append(self.get_starttag_text() or "")
        if tag != "script":
            return
        attr_dict = dict(attrs)
        type_attr = (attr_dict.get("type") or "").strip().lower()
        if "src" not in attr_dict and type_attr in self._JS_TYPES:
            self._in_script = True
            self._script_content = []

    def handle_startendtag(
        self, tag: str, attrs: list[tuple[str, str | None]]
    ) -> None:
        self._output.append(self.get_starttag_text() or "")

    def handle_endtag(self, tag: str) -> None:
        if self._in_script and tag == "script":
            self._output.append(_minify_embedded_script("".join(self._script_content)))
            self._in_script = False
            self._script_content = []
        self._output.append(f"</{tag}>")

    def handle_data(self, data: str) -> None:
        if self._in_script:
            self._script_content.append(data)
        else:
            self._output.append(data)

    def handle_entityref(self, name: str) -> None:
        self._output.append(f"&{name};")

    def handle_charref(self, name: str) -> None:
        self._output.append(f"&#{name};")

    def handle_comment(self, data: str) -> None:
        self._output.append(f"<!--{data}-->")

    def handle_decl(self, decl: str) -> None:
        self._output.append(f"<!{decl}>")

    def handle_pi(self, data: str) -> None:
        self._output.append(f"<?{data}>")

    def unknown_decl(self, data: str) -> None:
        self._output.append(f"<![{data}]>")


def _minify_embedded_script(content: str) -> str:
    """Minify one inline script, keeping it as written on any failure."""
    if not content.strip():
        return content
    try:
        return minify_script(content)
    except Exception:  # noqa: BLE001
        logger.debug("Inline script left unminified", exc_info=True)
        return content


def _minify_inline_scripts(html: str) -> str:
    minifier = _InlineScriptMinifier()
    minifier.feed(html)
    minifier.close()
    return minifier.get_output()
