"""Build state shared between the bundler and the dev server."""

from .status import (
    BuildStatus,
    BuildStatusProvider,
    BuildTracker,
    BundleAsset,
    MainAsset,
)

__all__ = [
    "BuildStatus",
    "BuildStatusProvider",
    "BuildTracker",
    "BundleAsset",
    "MainAsset",
]
