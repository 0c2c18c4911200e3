"""
bundlehost - development server for bundler output

Serves a bundler's output directory to the browser, holds requests while a
build is in flight, and falls back to the main HTML bundle for app routes.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
