from __future__ import annotations

import math
from typing import Any, Callable, Mapping

import numpy as np
import pandas as pd

from stats_dispatch.core.errors import ComputationError
from stats_dispatch.core.models import GroupSummary, TestResult, TestSpec

Strategy = Callable[..., TestResult]


def variables_used(spec: TestSpec, bindings: Mapping[str, str]) -> tuple[str, ...]:
    return tuple(bindings[role.name] for role in spec.roles)


def numeric_values(frame: pd.DataFrame, column: str) -> np.ndarray:
    return pd.to_numeric(frame[column]).to_numpy(dtype=float)


def ordered_levels(series: pd.Series) -> list[Any]:
    levels = list(series.unique())
    try:
        return sorted(levels)
    except TypeError:
        return sorted(levels, key=str)


def group_samples(
    spec: TestSpec,
    frame: pd.DataFrame,
    group_column: str,
    value_column: str,
) -> list[tuple[str, np.ndarray]]:
    values = pd.to_numeric(frame[value_column])
    samples: list[tuple[str, np.ndarray]] = []
    for level in ordered_levels(frame[group_column]):
        sample = values[frame[group_column] == level].to_numpy(dtype=float)
        if sample.size == 0:
            raise ComputationError(spec.display_name, f"group '{level}' of '{group_column}' is empty")
        samples.append((str(level), sample))
    return samples


def summarize_groups(samples: list[tuple[str, np.ndarray]]) -> tuple[GroupSummary, ...]:
    return tuple(
        GroupSummary(
            level=label,
            n=int(sample.size),
            mean=float(np.mean(sample)),
            sd=float(np.std(sample, ddof=1)) if sample.size > 1 else float("nan"),
            minimum=float(np.min(sample)),
            maximum=float(np.max(sample)),
        )
        for label, sample in samples
    )


def require_size(spec: TestSpec, label: str, sample: np.ndarray, minimum: int) -> None:
    if sample.size < minimum:
        raise ComputationError(
            spec.display_name,
            f"{label} has {sample.size} observations, at least {minimum} required",
        )


def require_variance(spec: TestSpec, label: str, sample: np.ndarray) -> None:
    if sample.size == 0 or float(np.ptp(sample)) == 0.0:
        raise ComputationError(spec.display_name, f"{label} has zero variance")


def checked(spec: TestSpec, statistic: Any, p_value: Any) -> tuple[float, float]:
    statistic = float(statistic)
    p_value = float(p_value)
    if math.isnan(statistic) or not math.isfinite(p_value):
        raise ComputationError(
            spec.display_name,
            f"test produced a non-finite result (statistic={statistic}, p={p_value})",
        )
    return statistic, min(max(p_value, 0.0), 1.0)


def t_from_correlation(coefficient: float, n: int) -> float:
    if abs(coefficient) >= 1.0:
        return math.copysign(math.inf, coefficient)
    return coefficient * math.sqrt((n - 2) / (1.0 - coefficient**2))
