"""Deep merge used to layer configuration sources.

Mappings merge recursively; any other value, lists included, replaces the
value below it.
"""
from __future__ import annotations

from typing import Any, Dict


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge dictionaries without mutating inputs.

    Example:
        >>> base = {"server": {"port": 1234, "host": ""}}
        >>> override = {"server": {"port": 8080}}
        >>> deep_merge(base, override)
        {'server': {'port': 8080, 'host': ''}}
    """
    result: Dict[str, Any] = dict(base)
    for key, value in (override or {}).items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


__all__ = ["deep_merge"]
