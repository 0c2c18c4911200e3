from __future__ import annotations

from pathlib import Path

import pytest

from bundlehost.core.config import ConfigManager
from bundlehost.core.exceptions import ConfigError
from bundlehost.core.schemas import SchemaValidationError
from bundlehost.core.server.models import KeyCertTLS, PfxTLS, PlainTransport


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_only(tmp_path: Path) -> None:
    manager = ConfigManager(repo_root=tmp_path)

    cfg = manager.load_config()

    assert cfg["server"]["port"] == 1234
    assert cfg["server"]["public_url"] == "/"
    assert cfg["server"]["https"] is False
    assert cfg["logging"]["level"] == "INFO"

    server = manager.server_config(cfg)
    assert server.out_dir == tmp_path.resolve() / "dist"
    assert isinstance(server.tls, PlainTransport)


def test_project_file_overrides_defaults(tmp_path: Path) -> None:
    _write(tmp_path / "bundlehost.yaml", "server:\n  out_dir: build\n  public_url: /static\n  port: 8080\n")
    manager = ConfigManager(repo_root=tmp_path)

    cfg = manager.load_config()

    assert cfg["server"]["out_dir"] == "build"
    assert cfg["server"]["public_url"] == "/static"
    assert cfg["server"]["port"] == 8080
    assert cfg["server"]["entry"] == "index.html"


def test_yml_extension_is_picked_up(tmp_path: Path) -> None:
    _write(tmp_path / "bundlehost.yml", "server:\n  port: 4000\n")

    cfg = ConfigManager(repo_root=tmp_path).load_config()

    assert cfg["server"]["port"] == 4000


def test_explicit_config_paths_resolve_relative_to_its_directory(tmp_path: Path) -> None:
    config = _write(tmp_path / "conf" / "dev.yaml", "server:\n  out_dir: ../public\n")
    manager = ConfigManager(repo_root=tmp_path, config_path=config)

    server = manager.server_config(manager.load_config())

    assert server.out_dir.resolve() == (tmp_path / "public").resolve()


def test_missing_explicit_config_raises(tmp_path: Path) -> None:
    manager = ConfigManager(repo_root=tmp_path, config_path=Path("nope.yaml"))

    with pytest.raises(FileNotFoundError, match="nope.yaml"):
        manager.load_config()


def test_env_overrides_are_coerced(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUNDLEHOST_SERVER__PORT", "9000")
    monkeypatch.setenv("BUNDLEHOST_SERVER__STRICT_PUBLIC_PREFIX", "true")
    monkeypatch.setenv("BUNDLEHOST_SERVER__HTTPS", '{"pfx": "dev.pfx", "passphrase": "pw"}')

    manager = ConfigManager(repo_root=tmp_path)
    cfg = manager.load_config()

    assert cfg["server"]["port"] == 9000
    assert cfg["server"]["strict_public_prefix"] is True
    server = manager.server_config(cfg)
    assert server.tls == PfxTLS(pfx_path=tmp_path.resolve() / "dev.pfx", passphrase="pw")


def test_malformed_env_key_is_rejected(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUNDLEHOST_SERVER____PORT", "1")

    with pytest.raises(ConfigError, match="empty segment"):
        ConfigManager(repo_root=tmp_path).load_config()


def test_overrides_replace_https_wholesale(tmp_path: Path) -> None:
    _write(tmp_path / "bundlehost.yaml", "server:\n  https:\n    pfx: dev.pfx\n")
    manager = ConfigManager(repo_root=tmp_path)

    cfg = manager.load_config({"server": {"https": {"key": "k.pem", "cert": "c.pem"}}})

    assert cfg["server"]["https"] == {"key": "k.pem", "cert": "c.pem"}
    assert isinstance(manager.server_config(cfg).tls, KeyCertTLS)


def test_legacy_keys_are_rejected(tmp_path: Path) -> None:
    _write(tmp_path / "bundlehost.yaml", "server:\n  outDir: build\n")

    with pytest.raises(ConfigError, match="outDir -> server.out_dir"):
        ConfigManager(repo_root=tmp_path).load_config()


def test_schema_violation(tmp_path: Path) -> None:
    _write(tmp_path / "bundlehost.yaml", "server:\n  port: 70000\n")

    with pytest.raises(SchemaValidationError, match="server.port"):
        ConfigManager(repo_root=tmp_path).load_config()


def test_invalid_yaml(tmp_path: Path) -> None:
    _write(tmp_path / "bundlehost.yaml", "server: [unclosed\n")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        ConfigManager(repo_root=tmp_path).load_config()


def test_non_mapping_yaml(tmp_path: Path) -> None:
    _write(tmp_path / "bundlehost.yaml", "- just\n- a list\n")

    with pytest.raises(ConfigError, match="must contain a mapping"):
        ConfigManager(repo_root=tmp_path).load_config()


def test_collect_errors_reports_everything(tmp_path: Path) -> None:
    _write(tmp_path / "bundlehost.yaml", "server:\n  port: -5\n  public_url: static\n")
    manager = ConfigManager(repo_root=tmp_path)

    errors = manager.collect_errors(manager.load_config(validate=False))

    assert len(errors) == 2
    assert any(e.startswith("server.port") for e in errors)
    assert any(e.startswith("server.public_url") for e in errors)


def test_collect_errors_catches_semantic_problems(tmp_path: Path) -> None:
    _write(tmp_path / "bundlehost.yaml", "server:\n  https: true\n")
    manager = ConfigManager(repo_root=tmp_path)

    errors = manager.collect_errors(manager.load_config(validate=False))

    assert len(errors) == 1
    assert "no credentials" in errors[0]


def test_valid_config_has_no_errors(tmp_path: Path) -> None:
    manager = ConfigManager(repo_root=tmp_path)

    assert manager.collect_errors(manager.load_config(validate=False)) == []
