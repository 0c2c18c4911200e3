"""Request routing with build gating and app-route fallback.

For every request the router:

1. waits while a build is pending,
2. answers 500 with a fixed banner if the build errored,
3. serves the main HTML bundle for URLs outside the public URL prefix,
4. otherwise serves the file below the prefix,
5. and falls back to ``next`` (or a bare 404) when nothing matched.

Exactly one response is written per request.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Callable, Optional
from urllib.parse import urlsplit

from bundlehost.core.build import BuildStatus, BuildStatusProvider

from .models import Request, Responder, Response, ServerConfig
from .static import DirectoryStaticFileServer, StaticFileServer

logger = logging.getLogger(__name__)

BUILD_ERROR_BANNER = "🚨 Build error, check the console for details."

NextHandler = Callable[[Request, Responder], None]


def build_error_response() -> Response:
    body = BUILD_ERROR_BANNER.encode("utf-8")
    return Response(
        status=500,
        headers={
            "Content-Type": "text/plain; charset=utf-8",
            "Content-Length": str(len(body)),
        },
        body=body,
    )


def not_found_response() -> Response:
    return Response(status=404, headers={"Content-Length": "0"})


def within_public_url(url: str, public_url: str, *, strict: bool = False) -> bool:
    """Return True when ``url`` belongs under ``public_url``.

    The default is a plain string-prefix test, so ``/publicity`` counts as
    inside ``/public``. ``strict`` compares whole path segments instead.
    """
    if not strict:
        return url.startswith(public_url)

    prefix = public_url.rstrip("/")
    if not prefix:
        return url.startswith("/")
    path = urlsplit(url).path
    return path == prefix or path.startswith(prefix + "/")


class RequestRouter:
    """Route requests to the build output, gated on build status."""

    def __init__(
        self,
        config: ServerConfig,
        provider: BuildStatusProvider,
        static_server: StaticFileServer | None = None,
    ) -> None:
        self.config = config
        self.provider = provider
        self.static_server = static_server or DirectoryStaticFileServer(config.out_dir)

    def handle(
        self,
        request: Request,
        responder: Responder,
        next: Optional[NextHandler] = None,
    ) -> None:
        """Write exactly one response for ``request`` into ``responder``.

        Blocks the calling thread while a build is pending.
        """
        ready = self.provider.when_ready()
        if not ready.done():
            logger.debug("Holding %s %s until the build finishes", request.method, request.url)
        status = ready.result()
        self._respond(request, status, responder, next)

    def _respond(
        self,
        request: Request,
        status: BuildStatus,
        responder: Responder,
        next: Optional[NextHandler],
    ) -> None:
        if status.errored:
            responder.send(build_error_response())
            return

        if not within_public_url(
            request.url,
            self.config.public_url,
            strict=self.config.strict_public_prefix,
        ):
            self._send_index(request, status, responder, next)
            return

        stripped = request.url[len(self.config.public_url):]
        if self.config.strict_public_prefix and not stripped.startswith("/"):
            stripped = "/" + stripped
        self._serve(dataclasses.replace(request, url=stripped), request, responder, next)

    def _send_index(
        self,
        request: Request,
        status: BuildStatus,
        responder: Responder,
        next: Optional[NextHandler],
    ) -> None:
        main_asset = status.main_asset
        if main_asset is None or main_asset.type != "html":
            self._send_404(request, responder, next)
            return

        index_url = f"/{main_asset.generate_bundle_name(True)}"
        self._serve(dataclasses.replace(request, url=index_url), request, responder, next)

    def _serve(
        self,
        rewritten: Request,
        original: Request,
        responder: Responder,
        next: Optional[NextHandler],
    ) -> None:
        response = self.static_server.serve(rewritten)
        if response is None:
            self._send_404(original, responder, next)
            return
        responder.send(response)

    def _send_404(
        self,
        request: Request,
        responder: Responder,
        next: Optional[NextHandler],
    ) -> None:
        if next is not None:
            next(request, responder)
            return
        responder.send(not_found_response())


__all__ = [
    "BUILD_ERROR_BANNER",
    "NextHandler",
    "RequestRouter",
    "build_error_response",
    "not_found_response",
    "within_public_url",
]
