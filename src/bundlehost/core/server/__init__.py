"""Development server: build-gated request routing and listener bootstrap.

- ``models``: config snapshot, TLS variants, request/response types
- ``router``: per-request routing decisions
- ``static``: files from the build output directory
- ``bootstrap``: port negotiation, TLS selection, listener lifecycle
"""

from .bootstrap import DevHTTPServer, ListeningServer, start, status_line
from .models import (
    KeyCertTLS,
    ListenResult,
    PfxTLS,
    PlainTransport,
    Request,
    Responder,
    Response,
    ServerConfig,
    TLSMode,
)
from .ports import find_free_port
from .router import BUILD_ERROR_BANNER, RequestRouter
from .static import DirectoryStaticFileServer, StaticFileServer

__all__ = [
    "BUILD_ERROR_BANNER",
    "DevHTTPServer",
    "DirectoryStaticFileServer",
    "KeyCertTLS",
    "ListenResult",
    "ListeningServer",
    "PfxTLS",
    "PlainTransport",
    "Request",
    "RequestRouter",
    "Responder",
    "Response",
    "ServerConfig",
    "StaticFileServer",
    "TLSMode",
    "find_free_port",
    "start",
    "status_line",
]
