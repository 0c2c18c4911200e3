from __future__ import annotations

from bundlehost.core.utils.merge import deep_merge


def test_nested_mappings_merge() -> None:
    base = {"server": {"port": 1234, "host": ""}, "logging": {"level": "INFO"}}

    merged = deep_merge(base, {"server": {"port": 8080}})

    assert merged == {"server": {"port": 8080, "host": ""}, "logging": {"level": "INFO"}}
    assert base["server"]["port"] == 1234


def test_lists_replace_without_prefix_markers() -> None:
    merged = deep_merge({"items": [1, 2]}, {"items": ["+", 3]})

    assert merged == {"items": ["+", 3]}


def test_mapping_replaces_scalar() -> None:
    merged = deep_merge({"https": False}, {"https": {"pfx": "dev.pfx"}})

    assert merged == {"https": {"pfx": "dev.pfx"}}
