"""
bundlehost configuration management (YAML only).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from bundlehost.core.exceptions import ConfigError
from bundlehost.core.schemas import validate_payload, validate_payload_safe
from bundlehost.core.server.models import ServerConfig, raise_on_legacy_keys
from bundlehost.core.utils.io import read_yaml, resolve_yaml_path
from bundlehost.core.utils.merge import deep_merge
from bundlehost.data import get_data_path

logger = logging.getLogger(__name__)

ENV_PREFIX = "BUNDLEHOST_"
PROJECT_CONFIG_NAME = "bundlehost.yaml"
CONFIG_SCHEMA = "config/config"


class ConfigManager:
    """Load, merge, and validate bundlehost configuration.

    Configuration sources (highest to lowest priority):
    1. Explicit overrides passed to ``load_config`` (CLI flags)
    2. Environment variables: BUNDLEHOST_<section>__<key>
    3. Project config: ``--config`` path, else <repo_root>/bundlehost.yaml (or .yml)
    4. Bundled defaults: bundlehost.data/config/defaults.yaml
    """

    def __init__(self, repo_root: Optional[Path] = None, config_path: Optional[Path] = None) -> None:
        self.repo_root = Path(repo_root or Path.cwd()).expanduser().resolve()
        self.defaults_path = get_data_path("config", "defaults.yaml")
        if config_path is not None:
            path = Path(config_path).expanduser()
            self.project_config_path = path if path.is_absolute() else self.repo_root / path
            self._explicit_config = True
        else:
            self.project_config_path = resolve_yaml_path(self.repo_root / PROJECT_CONFIG_NAME)
            self._explicit_config = False

    @property
    def base_dir(self) -> Path:
        """Directory relative paths in the config resolve against."""
        if self.project_config_path.exists():
            return self.project_config_path.parent.resolve()
        return self.repo_root

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Fail closed: configuration must never silently ignore invalid YAML.
        try:
            data = read_yaml(path, default={}, raise_on_error=True)
        except FileNotFoundError:
            raise
        except Exception as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}", context={"path": str(path)}) from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping", context={"path": str(path)})
        return data

    # ----- environment overrides -----

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _parse_env_key(self, raw: str, *, strict: bool) -> List[str]:
        segs = raw.split("__") if "__" in raw else [raw]
        if any(seg == "" for seg in segs):
            if strict:
                raise ConfigError(f"Malformed {ENV_PREFIX}* key: empty segment in '{raw}'.")
            return []
        return [seg.lower() for seg in segs]

    def iter_env_overrides(self, *, strict: bool = True) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            raw = key[len(ENV_PREFIX):]
            if not raw:
                if strict:
                    raise ConfigError(f"Malformed {ENV_PREFIX}* key")
                continue
            path = self._parse_env_key(raw, strict=strict)
            if path:
                yield path, self._coerce_type(os.environ[key])

    def apply_env_overrides(self, cfg: Dict[str, Any], *, strict: bool = True) -> Dict[str, Any]:
        for path, value in self.iter_env_overrides(strict=strict):
            nested: Any = value
            for part in reversed(path):
                nested = {part: nested}
            cfg = deep_merge(cfg, nested)
        return cfg

    # ----- loading -----

    def load_config(
        self,
        overrides: Optional[Dict[str, Any]] = None,
        *,
        validate: bool = True,
    ) -> Dict[str, Any]:
        """Return the merged configuration dictionary.

        Raises:
            ConfigError: invalid YAML, legacy keys, or schema violations.
            FileNotFoundError: an explicit ``config_path`` does not exist.
        """
        cfg = self.load_yaml(self.defaults_path)

        if self.project_config_path.exists():
            logger.debug("Loading project config %s", self.project_config_path)
            cfg = deep_merge(cfg, self.load_yaml(self.project_config_path))
        elif self._explicit_config:
            raise FileNotFoundError(f"Config file not found: {self.project_config_path}")

        cfg = self.apply_env_overrides(cfg, strict=validate)
        if overrides:
            cfg = deep_merge(cfg, overrides)
            # TLS variants replace each other rather than merging key by key.
            https_override = (overrides.get("server") or {}).get("https")
            if https_override is not None:
                cfg["server"] = {**cfg["server"], "https": https_override}

        if validate:
            server = cfg.get("server")
            if isinstance(server, dict):
                raise_on_legacy_keys(server)
            self.validate_schema(cfg)
        return cfg

    def validate_schema(self, cfg: Dict[str, Any]) -> None:
        validate_payload(cfg, CONFIG_SCHEMA)

    def collect_errors(self, cfg: Dict[str, Any]) -> List[str]:
        """Return every problem found in ``cfg`` (empty when valid)."""
        errors: List[str] = []
        server = cfg.get("server")
        if isinstance(server, dict):
            try:
                raise_on_legacy_keys(server)
            except ConfigError as exc:
                errors.append(str(exc))
        errors.extend(validate_payload_safe(cfg, CONFIG_SCHEMA))
        if not errors:
            try:
                self.server_config(cfg)
            except ConfigError as exc:
                errors.append(str(exc))
        return errors

    def server_config(self, cfg: Dict[str, Any]) -> ServerConfig:
        return ServerConfig.from_raw(cfg.get("server"), base_dir=self.base_dir)


__all__ = ["ConfigManager", "ENV_PREFIX", "PROJECT_CONFIG_NAME"]
