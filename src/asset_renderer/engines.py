"""Template engines for markup sources.

``.ejs`` sources are compiled by Jinja2 in async mode with EJS-style
delimiters::

    <% for item in items %><li><%= item %></li><% endfor %>

Output is always escaped. EJS's unescaped ``<%- x %>`` tag is not
supported: Jinja2 reads ``<%-`` as a block tag with whitespace control and
raises ``TemplateSyntaxError``. Use ``<%= x | safe %>`` instead.

``.handlebars`` sources are compiled by chevron (Mustache, the logic-less
core of Handlebars) and render synchronously. Partials (``{{> header}}``)
load from ``header.handlebars`` next to the template.
"""

from __future__ import annotations

import functools
import os

import chevron
import jinja2

from .artifacts import AsyncRenderer, Bindings, Renderer, SyncRenderer

EJS_SYNTAX = {
    "block_start_string": "<%",
    "block_end_string": "%>",
    "variable_start_string": "<%=",
    "variable_end_string": "%>",
    "comment_start_string": "<%#",
    "comment_end_string": "%>",
}


def compile_ejs(source: str, path: str, root: str) -> Renderer:
    """Compile an ``.ejs`` source into an async renderer.

    ``include``/``extends`` look up templates relative to the file's own
    directory first, then the site root.
    """
    search_path = [os.path.dirname(path)]
    if root not in search_path:
        search_path.append(root)
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(search_path),
        autoescape=True,
        enable_async=True,
        **EJS_SYNTAX,
    )
    template = env.from_string(source)

    def render(bindings: Bindings):
        return template.render_async(**bindings)

    return AsyncRenderer(render)


def compile_handlebars(source: str, path: str, root: str) -> Renderer:
    """Compile a ``.handlebars`` source into a sync renderer."""
    template = functools.partial(
        chevron.render,
        source,
        partials_path=os.path.dirname(path),
        partials_ext="handlebars",
    )

    def render(bindings: Bindings) -> str:
        return template(dict(bindings))

    return SyncRenderer(render)


ENGINES = {
    ".ejs": ("ejs", compile_ejs),
    ".handlebars": ("handlebars", compile_handlebars),
}
