from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Union

from bundlehost.core.exceptions import ConfigError, ResponseAlreadySentError

DEFAULT_PORT = 1234
DEFAULT_PUBLIC_URL = "/"
DEFAULT_ENTRY = "index.html"


# ----- TLS variants -----


@dataclass(frozen=True)
class PlainTransport:
    """Serve plain HTTP."""

    scheme = "http"


@dataclass(frozen=True)
class KeyCertTLS:
    """Serve HTTPS from a PEM private key and certificate."""

    key_path: Path
    cert_path: Path

    scheme = "https"

    def __post_init__(self) -> None:
        if not str(self.key_path or "").strip() or not str(self.cert_path or "").strip():
            raise ConfigError("https with key/cert requires both 'key' and 'cert' paths")


@dataclass(frozen=True)
class PfxTLS:
    """Serve HTTPS from a PKCS#12 bundle."""

    pfx_path: Path
    passphrase: str | None = None

    scheme = "https"

    def __post_init__(self) -> None:
        if not str(self.pfx_path or "").strip():
            raise ConfigError("https with a PKCS#12 bundle requires a 'pfx' path")


TLSMode = Union[PlainTransport, KeyCertTLS, PfxTLS]


_LEGACY_SERVER_KEY_HINTS: dict[str, str] = {
    "outDir": "server.out_dir",
    "outdir": "server.out_dir",
    "publicUrl": "server.public_url",
    "publicURL": "server.public_url",
    "strictPublicPrefix": "server.strict_public_prefix",
}


def raise_on_legacy_keys(raw: Mapping[str, Any]) -> None:
    found = [key for key in _LEGACY_SERVER_KEY_HINTS if raw.get(key) is not None]
    if not found:
        return
    hints = ", ".join(f"{k} -> {_LEGACY_SERVER_KEY_HINTS[k]}" for k in found)
    raise ConfigError(f"Unsupported legacy server keys: {hints}", context={"keys": found})


def _expand_path(value: Any, base_dir: Path | None) -> Path:
    path = Path(os.path.expandvars(str(value).strip())).expanduser()
    if base_dir is not None and not path.is_absolute():
        path = base_dir / path
    return path


def parse_tls_mode(raw: Any, *, base_dir: Path | None = None) -> TLSMode:
    """Turn the ``https`` config value into a TLS variant.

    Accepted forms: ``false``/``None`` (plain), ``{key, cert}``,
    ``{pfx, passphrase?}``. ``true`` alone carries no credentials and is
    rejected.
    """
    if raw is None or raw is False:
        return PlainTransport()
    if raw is True:
        raise ConfigError(
            "https is enabled but no credentials are configured (set https.key + https.cert or https.pfx)"
        )
    if not isinstance(raw, Mapping):
        raise ConfigError(f"server.https must be a boolean or mapping, got {type(raw).__name__}")

    if raw.get("pfx"):
        if raw.get("key") or raw.get("cert"):
            raise ConfigError("server.https accepts either key/cert or pfx, not both")
        passphrase = raw.get("passphrase")
        return PfxTLS(
            pfx_path=_expand_path(raw["pfx"], base_dir),
            passphrase=str(passphrase) if passphrase is not None else None,
        )

    key = raw.get("key")
    cert = raw.get("cert")
    if not key or not cert:
        raise ConfigError("server.https requires both 'key' and 'cert' (or 'pfx')")
    return KeyCertTLS(key_path=_expand_path(key, base_dir), cert_path=_expand_path(cert, base_dir))


@dataclass(frozen=True)
class ServerConfig:
    """Immutable snapshot of dev server options."""

    out_dir: Path
    public_url: str = DEFAULT_PUBLIC_URL
    tls: TLSMode = field(default_factory=PlainTransport)
    port: int = DEFAULT_PORT
    host: str = ""
    entry: str = DEFAULT_ENTRY
    strict_public_prefix: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.port, int) or isinstance(self.port, bool) or not 0 <= self.port <= 65535:
            raise ConfigError(f"server.port must be an integer in 0-65535, got {self.port!r}")
        if not self.public_url.startswith("/"):
            raise ConfigError(f"server.public_url must start with '/', got {self.public_url!r}")

    @classmethod
    def from_raw(cls, raw: Any, *, base_dir: Path | None = None) -> ServerConfig:
        """Build a config from the ``server`` mapping of the merged YAML config.

        Relative paths (``out_dir``, TLS files) resolve against ``base_dir``.
        """
        if not isinstance(raw, Mapping):
            raise ConfigError("server config must be a mapping")

        raise_on_legacy_keys(raw)

        out_dir_raw = str(raw.get("out_dir") or "").strip()
        if not out_dir_raw:
            raise ConfigError("server.out_dir is required")

        port_raw = raw.get("port", DEFAULT_PORT)
        try:
            port = int(port_raw)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"server.port must be an integer, got {port_raw!r}") from exc

        return cls(
            out_dir=_expand_path(out_dir_raw, base_dir),
            public_url=str(raw.get("public_url") or DEFAULT_PUBLIC_URL),
            tls=parse_tls_mode(raw.get("https"), base_dir=base_dir),
            port=port,
            host=str(raw.get("host") or ""),
            entry=str(raw.get("entry") or DEFAULT_ENTRY),
            strict_public_prefix=bool(raw.get("strict_public_prefix", False)),
        )

    @property
    def scheme(self) -> str:
        return self.tls.scheme

    @property
    def display_host(self) -> str:
        if self.host in ("", "0.0.0.0", "::"):
            return "localhost"
        return self.host


@dataclass(frozen=True)
class ListenResult:
    host: str
    port: int
    scheme: str
    requested_port: int

    @property
    def port_changed(self) -> bool:
        return self.requested_port != 0 and self.port != self.requested_port

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "scheme": self.scheme,
            "host": self.host,
            "port": self.port,
            "requestedPort": self.requested_port,
            "portChanged": self.port_changed,
        }


# ----- request / response -----


@dataclass(frozen=True)
class Request:
    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)

    def header(self, name: str, default: str | None = None) -> str | None:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default


@dataclass(frozen=True)
class Response:
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""


class Responder:
    """Write-once response slot for a single request."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._response: Response | None = None

    def send(self, response: Response) -> None:
        with self._lock:
            if self._response is not None:
                raise ResponseAlreadySentError(
                    "response already sent for this request",
                    context={"status": self._response.status, "attempted_status": response.status},
                )
            self._response = response

    @property
    def sent(self) -> bool:
        return self._response is not None

    @property
    def response(self) -> Response | None:
        return self._response


__all__ = [
    "DEFAULT_ENTRY",
    "DEFAULT_PORT",
    "DEFAULT_PUBLIC_URL",
    "KeyCertTLS",
    "ListenResult",
    "PfxTLS",
    "PlainTransport",
    "Request",
    "Responder",
    "Response",
    "ServerConfig",
    "TLSMode",
    "parse_tls_mode",
    "raise_on_legacy_keys",
]
