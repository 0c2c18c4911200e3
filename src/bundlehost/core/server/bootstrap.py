"""Dev server startup and lifecycle.

``start()`` loads TLS credentials, negotiates a port, binds a threaded
HTTP(S) listener with :class:`RequestRouter` as its handler and reports the
bound URL. The returned :class:`ListeningServer` owns the listener.
"""
from __future__ import annotations

import logging
import socket
import ssl
import sys
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Optional

from bundlehost.core.build import BuildStatusProvider
from bundlehost.core.exceptions import ListenError

from .errors import describe_server_error
from .models import ListenResult, Request, Responder, Response, ServerConfig
from .ports import find_free_port
from .router import NextHandler, RequestRouter
from .static import StaticFileServer
from .tls import build_ssl_context

logger = logging.getLogger(__name__)

_CLIENT_GONE = (BrokenPipeError, ConnectionResetError, ConnectionAbortedError)
_NO_BODY_STATUSES = frozenset({100, 101, 102, 103, 204, 304})


class DevRequestHandler(BaseHTTPRequestHandler):
    """Adapts ``http.server`` requests to :class:`RequestRouter`."""

    server: "DevHTTPServer"
    protocol_version = "HTTP/1.1"
    server_version = "bundlehost"

    def _dispatch(self) -> None:
        request = Request(
            method=self.command,
            url=self.path,
            headers={k: v for k, v in self.headers.items()},
        )
        responder = Responder()
        self.server.router.handle(request, responder, self.server.fallback)

        response = responder.response
        if response is None:
            # A fallback handler declined to answer.
            response = Response(status=404, headers={"Content-Length": "0"})
        self._write(response)

    do_GET = _dispatch
    do_HEAD = _dispatch
    do_POST = _dispatch
    do_PUT = _dispatch
    do_PATCH = _dispatch
    do_DELETE = _dispatch
    do_OPTIONS = _dispatch

    def _write(self, response: Response) -> None:
        try:
            self.send_response(response.status)
            for name, value in response.headers.items():
                self.send_header(name, value)
            if response.status not in _NO_BODY_STATUSES and not any(
                name.lower() == "content-length" for name in response.headers
            ):
                self.send_header("Content-Length", str(len(response.body)))
            self.end_headers()
            if response.body and self.command != "HEAD":
                self.wfile.write(response.body)
        except _CLIENT_GONE:
            self.close_connection = True
            self.server.log.debug("Client disconnected before %s %s was answered", self.command, self.path)

    def log_message(self, format: str, *args: Any) -> None:
        self.server.log.debug("%s - %s", self.address_string(), format % args)

    def log_error(self, format: str, *args: Any) -> None:
        self.server.log.warning("%s - %s", self.address_string(), format % args)


class DevHTTPServer(ThreadingHTTPServer):
    """Threaded listener carrying the router, fallback, and logger."""

    daemon_threads = True

    def __init__(
        self,
        address: tuple[str, int],
        router: RequestRouter,
        *,
        fallback: Optional[NextHandler] = None,
        ssl_context: ssl.SSLContext | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.router = router
        self.fallback = fallback
        self.ssl_context = ssl_context
        self.log = log or logger
        if ":" in address[0]:
            self.address_family = socket.AF_INET6
        super().__init__(address, DevRequestHandler)

    def get_request(self) -> tuple[socket.socket, Any]:
        sock, addr = super().get_request()
        if self.ssl_context is not None:
            # Handshake runs in the request thread, see finish_request.
            sock = self.ssl_context.wrap_socket(sock, server_side=True, do_handshake_on_connect=False)
        return sock, addr

    def finish_request(self, request: Any, client_address: Any) -> None:
        if isinstance(request, ssl.SSLSocket):
            request.do_handshake()
        super().finish_request(request, client_address)

    def handle_error(self, request: Any, client_address: Any) -> None:
        exc = sys.exc_info()[1]
        if isinstance(exc, _CLIENT_GONE + (ssl.SSLError,)):
            self.log.debug("Connection from %s dropped: %s", client_address, exc)
            return
        self.log.error(
            "Error while handling request from %s on port %s",
            client_address,
            self.server_address[1],
            exc_info=True,
        )


class ListeningServer:
    """Handle to a bound dev server."""

    def __init__(self, httpd: DevHTTPServer, listen_result: ListenResult, log: logging.Logger) -> None:
        self.httpd = httpd
        self.listen_result = listen_result
        self._log = log
        self._thread: threading.Thread | None = None
        self._closed = False

    @property
    def port(self) -> int:
        return self.listen_result.port

    @property
    def url(self) -> str:
        return self.listen_result.url

    def serve_forever(self) -> None:
        self.httpd.serve_forever()

    def serve_in_background(self) -> threading.Thread:
        if self._thread is None:
            self._thread = threading.Thread(
                target=self.httpd.serve_forever,
                name=f"bundlehost-{self.port}",
                daemon=True,
            )
            self._thread.start()
        return self._thread

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._thread is not None:
            self.httpd.shutdown()
            self._thread.join()
        self.httpd.server_close()
        self._log.debug("Server on port %s closed", self.port)

    def __enter__(self) -> ListeningServer:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


def status_line(result: ListenResult) -> str:
    line = f"Server running at {result.url}"
    if result.port_changed:
        line += f" - configured port {result.requested_port} could not be used."
    return line


def start(
    config: ServerConfig,
    provider: BuildStatusProvider,
    *,
    static_server: StaticFileServer | None = None,
    fallback: Optional[NextHandler] = None,
    log: logging.Logger | None = None,
) -> ListeningServer:
    """Bind the dev server and return a handle; does not start serving.

    Raises:
        CredentialLoadError: TLS material could not be loaded (no socket opened).
        ListenError: no port could be negotiated or bound.
    """
    log = log or logger

    ssl_context = build_ssl_context(config.tls)
    router = RequestRouter(config, provider, static_server)

    port = config.port
    try:
        port = find_free_port(config.port, config.host)
        httpd = DevHTTPServer(
            (config.host, port),
            router,
            fallback=fallback,
            ssl_context=ssl_context,
            log=log,
        )
    except OSError as exc:
        message = describe_server_error(exc, port)
        log.error(message)
        raise ListenError(message, port=port, errno_code=exc.errno) from exc

    result = ListenResult(
        host=config.display_host,
        port=int(httpd.server_address[1]),
        scheme=config.scheme,
        requested_port=config.port,
    )
    log.info(status_line(result))
    return ListeningServer(httpd, result, log)


__all__ = [
    "DevHTTPServer",
    "DevRequestHandler",
    "ListeningServer",
    "start",
    "status_line",
]
