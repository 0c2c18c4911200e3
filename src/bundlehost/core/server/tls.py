"""TLS context construction for the HTTPS listener.

Credentials are read from disk once at startup. Any failure surfaces as
:class:`CredentialLoadError`; the server never downgrades to plain HTTP.
"""
from __future__ import annotations

import logging
import os
import ssl
import tempfile
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.serialization import pkcs12

from bundlehost.core.exceptions import CredentialLoadError

from .models import KeyCertTLS, PfxTLS, PlainTransport, TLSMode

logger = logging.getLogger(__name__)


def _read_credential(path: Path, label: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise CredentialLoadError(
            f"Could not read TLS {label} file {path}: {exc.strerror or exc}",
            path=str(path),
        ) from exc


def _server_context() -> ssl.SSLContext:
    return ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)


def _load_pem_chain(context: ssl.SSLContext, cert_pem: bytes, key_pem: bytes, *, source: Path) -> None:
    # ssl only loads chains from files; stage the PEM material in a private temp file.
    fd, tmp_name = tempfile.mkstemp(prefix="bundlehost-", suffix=".pem")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(cert_pem)
            fh.write(key_pem)
        context.load_cert_chain(certfile=tmp_name)
    except (ssl.SSLError, OSError) as exc:
        raise CredentialLoadError(f"Invalid TLS credentials in {source}: {exc}", path=str(source)) from exc
    finally:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass


def _key_cert_context(tls: KeyCertTLS) -> ssl.SSLContext:
    _read_credential(tls.key_path, "key")
    _read_credential(tls.cert_path, "certificate")
    context = _server_context()
    try:
        context.load_cert_chain(certfile=str(tls.cert_path), keyfile=str(tls.key_path))
    except (ssl.SSLError, OSError) as exc:
        raise CredentialLoadError(
            f"Invalid TLS key/certificate pair {tls.key_path} + {tls.cert_path}: {exc}",
            path=str(tls.cert_path),
        ) from exc
    return context


def _pfx_context(tls: PfxTLS) -> ssl.SSLContext:
    data = _read_credential(tls.pfx_path, "PKCS#12")
    password = tls.passphrase.encode("utf-8") if tls.passphrase else None
    try:
        key, cert, extra_certs = pkcs12.load_key_and_certificates(data, password)
    except ValueError as exc:
        raise CredentialLoadError(
            f"Could not parse PKCS#12 bundle {tls.pfx_path}: {exc}",
            path=str(tls.pfx_path),
        ) from exc
    if key is None or cert is None:
        raise CredentialLoadError(
            f"PKCS#12 bundle {tls.pfx_path} must contain a private key and a certificate",
            path=str(tls.pfx_path),
        )

    key_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    cert_pem = cert.public_bytes(serialization.Encoding.PEM)
    for extra in extra_certs or []:
        cert_pem += extra.public_bytes(serialization.Encoding.PEM)

    context = _server_context()
    _load_pem_chain(context, cert_pem, key_pem, source=tls.pfx_path)
    return context


def build_ssl_context(tls: TLSMode) -> ssl.SSLContext | None:
    """Return the server SSL context for ``tls``, or ``None`` for plain HTTP."""
    if isinstance(tls, PlainTransport):
        return None
    if isinstance(tls, KeyCertTLS):
        logger.debug("Loading TLS key %s and certificate %s", tls.key_path, tls.cert_path)
        return _key_cert_context(tls)
    if isinstance(tls, PfxTLS):
        logger.debug("Loading TLS PKCS#12 bundle %s", tls.pfx_path)
        return _pfx_context(tls)
    raise TypeError(f"Unsupported TLS mode: {tls!r}")


__all__ = ["build_ssl_context"]
