"""Static file serving from the build output directory.

Directory requests are not served (no index lookup); dotfiles are treated as
missing. A miss returns ``None`` so the caller can fall through to its own
not-found handling.
"""
from __future__ import annotations

import email.utils
import logging
import mimetypes
import os
from datetime import timezone
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlsplit

from .models import Request, Response

logger = logging.getLogger(__name__)

_SERVABLE_METHODS = {"GET", "HEAD"}

# Types the mimetypes database may not know or gets wrong on some platforms.
_EXTRA_TYPES = {
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".map": "application/json",
    ".wasm": "application/wasm",
    ".webmanifest": "application/manifest+json",
}


class StaticFileServer(Protocol):
    def serve(self, request: Request) -> Response | None: ...


def guess_content_type(path: Path) -> str:
    ctype = _EXTRA_TYPES.get(path.suffix.lower())
    if ctype is None:
        ctype, _ = mimetypes.guess_type(path.name)
    if ctype is None:
        return "application/octet-stream"
    if ctype.startswith("text/") or ctype in ("application/json", "application/javascript", "application/manifest+json"):
        return f"{ctype}; charset=utf-8"
    return ctype


def _etag(stat: os.stat_result) -> str:
    return f'W/"{stat.st_size:x}-{int(stat.st_mtime * 1000):x}"'


def _not_modified(request: Request, etag: str, mtime: float) -> bool:
    if_none_match = request.header("If-None-Match")
    if if_none_match is not None:
        tags = [t.strip() for t in if_none_match.split(",")]
        return "*" in tags or etag in tags

    if_modified_since = request.header("If-Modified-Since")
    if if_modified_since:
        try:
            since = email.utils.parsedate_to_datetime(if_modified_since)
        except (TypeError, ValueError):
            return False
        if since is None:
            return False
        if since.tzinfo is None:
            # "-0000" dates parse as naive; HTTP dates are always UTC.
            since = since.replace(tzinfo=timezone.utc)
        return int(mtime) <= int(since.timestamp())
    return False


class DirectoryStaticFileServer:
    """Serve files below ``root``.

    Filesystem errors while looking up or reading a file (name too long,
    permission denied, symlink loops) are treated as misses.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()

    def resolve(self, url: str) -> Path | None:
        """Map a URL path to a file below root, or ``None``.

        Raises:
            PermissionError: the path escapes root.
            ValueError: the path is malformed.
        """
        path = unquote(urlsplit(url).path)
        if "\0" in path:
            raise ValueError(f"malformed path: {path!r}")

        parts = [p for p in path.split("/") if p]
        if ".." in parts:
            try:
                candidate = (self.root / Path(*parts)).resolve()
            except (OSError, RuntimeError) as exc:
                logger.debug("Cannot resolve %s: %s", path, exc)
                return None
            if candidate != self.root and self.root not in candidate.parents:
                raise PermissionError(path)
            parts = list(candidate.relative_to(self.root).parts)

        if any(p.startswith(".") for p in parts):
            return None

        target = self.root.joinpath(*parts)
        try:
            if not target.is_file():
                return None
        except OSError as exc:
            logger.debug("Cannot stat %s: %s", path, exc)
            return None
        return target

    def serve(self, request: Request) -> Response | None:
        if request.method.upper() not in _SERVABLE_METHODS:
            return None

        try:
            target = self.resolve(request.url)
        except PermissionError:
            return Response(status=403, headers={"Content-Length": "0"})
        except ValueError:
            return Response(status=400, headers={"Content-Length": "0"})

        if target is None:
            return None

        try:
            stat = target.stat()
        except OSError as exc:
            logger.debug("Cannot stat %s: %s", target, exc)
            return None

        etag = _etag(stat)
        headers = {
            "Accept-Ranges": "bytes",
            "Cache-Control": "public, max-age=0",
            "Last-Modified": email.utils.formatdate(stat.st_mtime, usegmt=True),
            "ETag": etag,
        }

        if _not_modified(request, etag, stat.st_mtime):
            return Response(status=304, headers=headers)

        try:
            body = target.read_bytes()
        except OSError as exc:
            # Unreadable, or removed by a rebuild between stat and read.
            logger.debug("Cannot read %s: %s", target, exc)
            return None

        headers["Content-Type"] = guess_content_type(target)
        headers["Content-Length"] = str(len(body))
        if request.method.upper() == "HEAD":
            body = b""
        return Response(status=200, headers=headers, body=body)


__all__ = ["DirectoryStaticFileServer", "StaticFileServer", "guess_content_type"]
