"""Serve a site index from Django: resolve paths, render templates, respond."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Union

from asgiref.sync import (
    async_to_sync,
    iscoroutinefunction,
    markcoroutinefunction,
    sync_to_async,
)
from django.core.exceptions import MiddlewareNotUsed
from django.http import Http404, HttpRequest, HttpResponse, HttpResponseNotFound
from django.urls import re_path

from .artifacts import Artifact, Bindings
from .conf import get_setting
from .site import SiteIndex, load

logger = logging.getLogger(__name__)

ALLOWED_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
DEFAULT_CACHE_MAX_AGE = 3600
NOT_FOUND_BODY = "404 - No such page"
TEXT_CHARSET = "utf-8"

GetVars = Callable[[Artifact, HttpRequest], Union[Bindings, Awaitable[Bindings]]]


class RequestHandler:
    """Answer requests from a :class:`SiteIndex`.

    Template bindings are chosen in this order: ``get_vars(artifact,
    request)``, then the entry of ``vars`` keyed by the artifact's public
    path, then ``vars`` itself, then no bindings. ``vars`` falls back to the
    index's own ``vars``.

    The handler is usable as Django middleware (``handler(get_response)``)
    or as a view (:meth:`as_view`).
    """

    def __init__(
        self,
        index: SiteIndex,
        vars: Mapping[str, Any] | None = None,
        get_vars: GetVars | None = None,
        display_errors: bool | None = None,
        cache: int | None = None,
    ) -> None:
        self.index = index
        self.vars = vars if vars is not None else index.vars
        self.get_vars = get_vars
        self.display_errors = (
            display_errors if display_errors is not None else index.display_errors
        )
        self.cache = _first_set(cache, index.cache)

    async def resolve(
        self, request: HttpRequest, params: Mapping[str, str] | None = None
    ) -> HttpResponse | None:
        """Build the response for ``request``.

        Args:
            request: Inbound request.
            params: Router parameters. When given, ``file`` and ``rest``
                (the wildcard remainder) form the lookup key, relative to
                where the patterns are mounted; none at all means ``/``.
                Without params the request path is the key.

        Returns:
            The response, or None when the request should pass on to the
            next handler.
        """
        if request.method not in ALLOWED_METHODS:
            return self._miss()

        artifact = self.index.get(self._lookup_key(request, params))
        if artifact is None:
            return self._miss()

        content = artifact.content
        if artifact.is_template:
            bindings = await self._resolve_bindings(artifact, request)
            try:
                content = await artifact.render(bindings)
            except Exception:
                logger.exception("Failed to render %s", artifact.public_path)
                raise

        response = HttpResponse(
            content, status=200, content_type=_with_charset(artifact.content_type)
        )
        response["Cache-Control"] = f"max-age={self.cache}"
        return response

    def __call__(self, get_response: Callable[..., Any]) -> Callable[..., Any]:
        """Wrap ``get_response`` as middleware; misses pass on to it."""
        if iscoroutinefunction(get_response):

            async def amiddleware(request: HttpRequest) -> HttpResponse:
                response = await self.resolve(request)
                if response is None:
                    return await get_response(request)
                return response

            return amiddleware

        def middleware(request: HttpRequest) -> HttpResponse:
            response = async_to_sync(self.resolve)(request)
            if response is None:
                return get_response(request)
            return response

        return middleware

    def as_view(self) -> Callable[..., Awaitable[HttpResponse]]:
        """Return an async view; misses raise :class:`~django.http.Http404`."""

        async def view(request: HttpRequest, **kwargs: str) -> HttpResponse:
            response = await self.resolve(request, kwargs)
            if response is None:
                raise Http404(request.path)
            return response

        return view

    def urlpatterns(self, name: str = "asset_renderer") -> list[Any]:
        """URL patterns routing every path to :meth:`as_view`."""
        view = self.as_view()
        return [
            re_path(r"^(?P<file>[^/]+)(?P<rest>.*)$", view, name=name),
            re_path(r"^$", view, name=f"{name}_root"),
        ]

    def _lookup_key(
        self, request: HttpRequest, params: Mapping[str, str] | None
    ) -> str:
        # Router params are relative to where the patterns are mounted.
        if params is not None:
            return "/" + (params.get("file") or "") + (params.get("rest") or "")
        return request.path_info

    def _miss(self) -> HttpResponse | None:
        if self.display_errors:
            return HttpResponseNotFound(
                NOT_FOUND_BODY, content_type=_with_charset("text/plain")
            )
        return None

    async def _resolve_bindings(
        self, artifact: Artifact, request: HttpRequest
    ) -> Bindings:
        if self.get_vars is not None:
            if iscoroutinefunction(self.get_vars):
                return await self.get_vars(artifact, request)
            bindings = await sync_to_async(self.get_vars)(artifact, request)
            if inspect.isawaitable(bindings):
                bindings = await bindings
            return bindings

        if self.vars is None:
            return {}
        own = self.vars.get(artifact.public_path)
        if isinstance(own, Mapping):
            return own
        return self.vars


class AssetRendererMiddleware:
    """Serve the directory configured as ``ASSET_RENDERER["SOURCE"]``.

    The site is compiled once, when Django builds its middleware chain.
    Without a ``SOURCE`` the middleware removes itself.
    """

    sync_capable = True
    async_capable = True

    def __init__(self, get_response: Callable[..., Any]) -> None:
        source = get_setting("SOURCE")
        if not source:
            raise MiddlewareNotUsed("ASSET_RENDERER['SOURCE'] is not set")

        index = load(
            source,
            root=get_setting("ROOT"),
            skip=get_setting("SKIP"),
            hide_html_extension=get_setting("HIDE_HTML_EXTENSION"),
            minify=get_setting("MINIFY"),
            vars=get_setting("VARS"),
            display_errors=get_setting("DISPLAY_ERRORS"),
            cache=get_setting("CACHE_MAX_AGE"),
        )
        self.handler = index.handle_request()
        self._middleware = self.handler(get_response)
        if iscoroutinefunction(get_response):
            markcoroutinefunction(self)

    def __call__(self, request: HttpRequest) -> Any:
        return self._middleware(request)


def _with_charset(content_type: str) -> str:
    if content_type.startswith("text/") and "charset=" not in content_type:
        return f"{content_type}; charset={TEXT_CHARSET}"
    return content_type


def _first_set(*values: int | None) -> int:
    for value in values:
        if value is not None:
            return value
    return DEFAULT_CACHE_MAX_AGE
