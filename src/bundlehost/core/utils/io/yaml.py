"""YAML I/O utilities."""
from __future__ import annotations

from pathlib import Path
from typing import Any

try:
    import yaml

    HAS_YAML = True
except ImportError:
    HAS_YAML = False


def read_yaml(
    path: Path, default: Any = None, raise_on_error: bool = False
) -> Any:
    """Read YAML with error handling.

    Returns default if file is missing or invalid, unless raise_on_error is True.

    Args:
        path: YAML file path to read
        default: Value to return if file missing or invalid (default: None)
        raise_on_error: If True, propagate exceptions instead of returning default.

    Returns:
        Any: Parsed YAML data, or default if error

    Examples:
        >>> config = read_yaml(Path("bundlehost.yaml"), default={})
        >>> assert isinstance(config, dict)
    """
    if not HAS_YAML:
        if raise_on_error:
            raise RuntimeError("PyYAML is required")
        return default

    path = Path(path)
    if not path.exists():
        if raise_on_error:
            raise FileNotFoundError(f"File not found: {path}")
        return default

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if data is not None else default
    except Exception:
        if raise_on_error:
            raise
        return default


def dump_yaml_string(data: Any, sort_keys: bool = True) -> str:
    """Dump data to YAML string.

    Raises:
        RuntimeError: If PyYAML is not installed
    """
    if not HAS_YAML:
        raise RuntimeError(
            "PyYAML is required for YAML operations. Install with: pip install pyyaml"
        )

    return yaml.safe_dump(
        data,
        default_flow_style=False,
        sort_keys=sort_keys,
        allow_unicode=True,
    )


def resolve_yaml_path(path: Path) -> Path:
    """Resolve a YAML path that may be either ``.yml`` or ``.yaml``.

    Preference is given to ``.yaml`` when both exist. If no existing candidate
    is found, returns ``path`` unchanged.
    """
    p = Path(path)
    base = p.with_suffix("") if p.suffix in {".yml", ".yaml"} else p

    for ext in (".yaml", ".yml"):
        candidate = base.with_suffix(ext)
        if candidate.exists():
            return candidate

    return p


__all__ = [
    "HAS_YAML",
    "read_yaml",
    "dump_yaml_string",
    "resolve_yaml_path",
]
