import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'bundlehost' and tests/ importable for helpers.
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from bundlehost.core.build import BuildTracker, BundleAsset
from bundlehost.core.server.models import ServerConfig
from bundlehost.core.stdlib_logging import reset_logging_for_tests
from helpers.tls import TLSMaterial, write_tls_material

INDEX_HTML = b"<!doctype html><title>app</title><div id=root></div>"
APP_JS = b"console.log('app');\n"


@pytest.fixture(autouse=True)
def _reset_bundlehost_logging():
    yield
    reset_logging_for_tests()


@pytest.fixture(autouse=True)
def _clear_bundlehost_env(monkeypatch: pytest.MonkeyPatch) -> None:
    import os

    for key in list(os.environ):
        if key.startswith("BUNDLEHOST_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    """A build output directory with a hashed HTML entry and a script."""
    root = tmp_path / "dist"
    root.mkdir()
    (root / "index.a1b2.html").write_bytes(INDEX_HTML)
    (root / "app.js").write_bytes(APP_JS)
    (root / "styles.css").write_text("body { margin: 0 }\n", encoding="utf-8")
    (root / "nested").mkdir()
    (root / "nested" / "data.json").write_text('{"ok": true}\n', encoding="utf-8")
    (root / ".secret").write_text("hidden\n", encoding="utf-8")
    return root


@pytest.fixture
def html_asset() -> BundleAsset:
    return BundleAsset(type="html", name="index.html", hashed_name="index.a1b2.html")


@pytest.fixture
def tracker(html_asset: BundleAsset) -> BuildTracker:
    return BuildTracker(main_asset=html_asset)


@pytest.fixture
def server_config(out_dir: Path) -> ServerConfig:
    return ServerConfig(out_dir=out_dir, public_url="/public", port=0, host="127.0.0.1")


@pytest.fixture(scope="session")
def tls_material(tmp_path_factory: pytest.TempPathFactory) -> TLSMaterial:
    return write_tls_material(tmp_path_factory.mktemp("tls"))
