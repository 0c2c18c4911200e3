"""Build status as seen by the server.

The bundler owns build state and drives it through :class:`BuildTracker`.
Request handling only ever sees immutable :class:`BuildStatus` snapshots via
the narrow :class:`BuildStatusProvider` interface.

Each build cycle gets one ``concurrent.futures.Future``. It is resolved exactly
once, with the completed status, when the cycle ends; every request waiting on
it resumes on that single resolution. The next cycle starts with a fresh
future.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Callable, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class MainAsset(Protocol):
    """Entry bundle served for app-route fallback."""

    type: str

    def generate_bundle_name(self, with_hash: bool = False) -> str: ...


@dataclass(frozen=True)
class BundleAsset:
    """A bundle produced by the build, addressed by its output filename."""

    type: str
    name: str
    hashed_name: str | None = None

    @classmethod
    def from_entry(cls, entry: str) -> BundleAsset:
        """Describe an already-built entry file (``index.html`` -> type ``html``)."""
        suffix = PurePosixPath(entry).suffix.lstrip(".").lower()
        return cls(type=suffix or "html", name=entry.lstrip("/"))

    def generate_bundle_name(self, with_hash: bool = False) -> str:
        if with_hash and self.hashed_name:
            return self.hashed_name
        return self.name


@dataclass(frozen=True)
class BuildStatus:
    pending: bool = False
    errored: bool = False
    main_asset: Optional[MainAsset] = None
    error: str | None = None


class BuildStatusProvider(Protocol):
    """Read/subscribe view of the bundler's build state."""

    def status(self) -> BuildStatus: ...

    def next_build_complete(self) -> Future[BuildStatus]: ...

    def on_next_build_complete(self, callback: Callable[[BuildStatus], None]) -> None: ...

    def when_ready(self) -> Future[BuildStatus]: ...


class BuildTracker:
    """Thread-safe build state driven by the bundler.

    The bundler calls :meth:`start_build` when it begins compiling and
    :meth:`complete_build` (or :meth:`fail_build`) when it is done. The
    server reads snapshots and waits on :meth:`when_ready`.
    """

    def __init__(self, main_asset: MainAsset | None = None) -> None:
        self._lock = threading.Lock()
        self._pending = False
        self._errored = False
        self._error: str | None = None
        self._main_asset = main_asset
        self._cycle: Future[BuildStatus] | None = None

    def _snapshot(self) -> BuildStatus:
        return BuildStatus(
            pending=self._pending,
            errored=self._errored,
            main_asset=self._main_asset,
            error=self._error,
        )

    def _current_cycle(self) -> Future[BuildStatus]:
        # Caller holds the lock.
        if self._cycle is None or self._cycle.done():
            self._cycle = Future()
        return self._cycle

    # ----- bundler side -----

    def start_build(self) -> None:
        with self._lock:
            if self._pending:
                return
            self._pending = True
            self._current_cycle()
        logger.debug("Build started")

    def complete_build(
        self,
        main_asset: MainAsset | None = None,
        *,
        error: str | None = None,
    ) -> BuildStatus:
        """Finish the current build and wake every request waiting on it."""
        with self._lock:
            self._pending = False
            self._errored = error is not None
            self._error = error
            if main_asset is not None:
                self._main_asset = main_asset
            snapshot = self._snapshot()
            cycle = self._cycle
            self._cycle = None

        if cycle is not None and not cycle.done():
            cycle.set_result(snapshot)
        if snapshot.errored:
            logger.error("Build failed: %s", error)
        else:
            logger.debug("Build finished")
        return snapshot

    def fail_build(self, error: str) -> BuildStatus:
        return self.complete_build(error=error)

    # ----- server side -----

    def status(self) -> BuildStatus:
        with self._lock:
            return self._snapshot()

    def next_build_complete(self) -> Future[BuildStatus]:
        """Future resolved when the current (or next) build finishes."""
        with self._lock:
            return self._current_cycle()

    def on_next_build_complete(self, callback: Callable[[BuildStatus], None]) -> None:
        """Register a one-shot callback for the next build completion."""
        self.next_build_complete().add_done_callback(lambda fut: callback(fut.result()))

    def when_ready(self) -> Future[BuildStatus]:
        """Future resolved with the status once no build is pending.

        The pending check and the subscription happen under one lock, so a
        build finishing concurrently cannot slip between them.
        """
        with self._lock:
            if self._pending:
                return self._current_cycle()
            ready: Future[BuildStatus] = Future()
            ready.set_result(self._snapshot())
            return ready


__all__ = [
    "BuildStatus",
    "BuildStatusProvider",
    "BuildTracker",
    "BundleAsset",
    "MainAsset",
]
