"""Small urllib client used against a live dev server."""
from __future__ import annotations

import ssl
from dataclasses import dataclass
from urllib.error import HTTPError
from urllib.request import Request, urlopen


@dataclass
class FetchResult:
    status: int
    headers: dict[str, str]
    body: bytes


def fetch(url: str, *, method: str = "GET", headers: dict[str, str] | None = None, timeout: float = 5.0) -> FetchResult:
    context = None
    if url.startswith("https://"):
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    req = Request(url, method=method, headers=headers or {})
    try:
        with urlopen(req, timeout=timeout, context=context) as resp:
            return FetchResult(resp.status, dict(resp.headers.items()), resp.read())
    except HTTPError as err:
        # Any HTTP response implies a server answered.
        body = err.read()
        return FetchResult(err.code, dict(err.headers.items()), body)
