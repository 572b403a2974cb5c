from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from stats_dispatch.core.catalog import (
    ALPHA,
    KS_MIN_RECOMMENDED_N,
    MAX_CATEGORICAL_LEVELS,
    SHAPIRO_MAX_N,
)


@dataclass(frozen=True)
class AnalyzerSettings:
    alpha: float = ALPHA
    max_categorical_levels: int = MAX_CATEGORICAL_LEVELS
    shapiro_max_n: int = SHAPIRO_MAX_N
    ks_min_recommended_n: int = KS_MIN_RECOMMENDED_N
    default_delimiter: str = ","
    default_encoding: str = "utf-8"

    @classmethod
    def from_yaml(cls, path: Path | None) -> "AnalyzerSettings":
        """Defaults overridden by a YAML mapping; unknown keys are rejected."""
        if path is None:
            return cls()
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")

        overrides = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(overrides, dict):
            raise ValueError(f"Settings file {path.name} must contain a mapping.")
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ValueError(
                f"Unknown settings in {path.name}: {', '.join(unknown)}. "
                f"Allowed: {', '.join(sorted(known))}"
            )
        return cls(**overrides)
