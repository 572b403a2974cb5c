from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml

DEFAULT_TEMPLATE: dict[str, Any] = {
    "title": "Statistical Test Report",
    "sections": {
        "header": "Analysis",
        "omnibus": "Test Result",
        "contingency": "Contingency Table",
        "group_statistics": "Group Statistics",
        "posthoc": "Post-hoc Comparisons (Tukey HSD)",
        "interpretation": "Interpretation",
        "warnings": "Notes",
    },
    "decimals": 4,
    "rule": "=",
    "include_expected_counts": False,
}


def merge_template(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``overrides`` applied; nested sections merge key by key."""
    merged = {
        key: merge_template(value, {}) if isinstance(value, Mapping) else value
        for key, value in base.items()
    }
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = merge_template(current, value)
        else:
            merged[key] = value
    return merged


def load_template(template_path: Path | None) -> dict[str, Any]:
    if template_path is None:
        return merge_template(DEFAULT_TEMPLATE, {})
    if not template_path.exists():
        raise FileNotFoundError(f"Template file not found: {template_path}")

    overrides = yaml.safe_load(template_path.read_text(encoding="utf-8")) or {}
    if not isinstance(overrides, Mapping):
        raise ValueError(f"Template {template_path.name} must be a mapping of report settings.")
    unknown = sorted(set(overrides) - set(DEFAULT_TEMPLATE))
    if unknown:
        raise ValueError(f"Unknown template keys in {template_path.name}: {', '.join(unknown)}")
    return merge_template(DEFAULT_TEMPLATE, overrides)
