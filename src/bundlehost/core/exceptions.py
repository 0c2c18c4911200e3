from __future__ import annotations

from typing import Any, Dict, Mapping


class BundlehostError(Exception):
    """Base exception for bundlehost."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigError(BundlehostError, ValueError):
    """Raised when server configuration is missing, malformed, or inconsistent."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        BundlehostError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class CredentialLoadError(BundlehostError, OSError):
    """Raised when TLS key, certificate, or PKCS#12 material cannot be loaded."""

    def __init__(
        self,
        message: str = "",
        *,
        path: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if path:
            ctx["path"] = path
        BundlehostError.__init__(self, message, context=ctx)
        OSError.__init__(self, message)


class ListenError(BundlehostError, OSError):
    """Raised when the listener cannot bind its port."""

    def __init__(
        self,
        message: str = "",
        *,
        port: int | None = None,
        errno_code: int | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if port is not None:
            ctx["port"] = port
        if errno_code is not None:
            ctx["errno"] = errno_code
        BundlehostError.__init__(self, message, context=ctx)
        OSError.__init__(self, message)
        self.port = port
        self.errno_code = errno_code


class ResponseAlreadySentError(BundlehostError, RuntimeError):
    """Raised when a second response is written for the same request."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        BundlehostError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


__all__ = [
    "BundlehostError",
    "ConfigError",
    "CredentialLoadError",
    "ListenError",
    "ResponseAlreadySentError",
]
