from __future__ import annotations

from typing import Mapping

import numpy as np
import pandas as pd

from stats_dispatch.core.models import AnalysisOptions, TestResult, TestSpec
from stats_dispatch.modeling.common import (
    checked,
    numeric_values,
    require_size,
    require_variance,
    t_from_correlation,
    variables_used,
)


def _paired_columns(
    spec: TestSpec,
    bindings: Mapping[str, str],
    frame: pd.DataFrame,
) -> tuple[np.ndarray, np.ndarray]:
    x = numeric_values(frame, bindings["x"])
    y = numeric_values(frame, bindings["y"])
    require_size(spec, f"'{bindings['x']}'", x, spec.min_sample_size)
    require_variance(spec, f"'{bindings['x']}'", x)
    require_variance(spec, f"'{bindings['y']}'", y)
    return x, y


def _correlation_result(
    spec: TestSpec,
    bindings: Mapping[str, str],
    method: str,
    coefficient: float,
    p_value: float,
    n: int,
) -> TestResult:
    statistic, p_value = checked(spec, t_from_correlation(coefficient, n), p_value)
    return TestResult(
        test_id=spec.test_id,
        test_name=spec.display_name,
        method=method,
        variables_used=variables_used(spec, bindings),
        statistic=statistic,
        p_value=p_value,
        degrees_of_freedom=(float(n - 2),),
        estimate=float(coefficient),
        n_observations=n,
    )


def run_pearson(
    spec: TestSpec,
    bindings: Mapping[str, str],
    frame: pd.DataFrame,
    options: AnalysisOptions,
) -> TestResult:
    from scipy import stats

    x, y = _paired_columns(spec, bindings, frame)
    coefficient, p_value = stats.pearsonr(x, y)
    return _correlation_result(
        spec,
        bindings,
        "Pearson product-moment correlation",
        float(coefficient),
        p_value,
        int(x.size),
    )


def run_spearman(
    spec: TestSpec,
    bindings: Mapping[str, str],
    frame: pd.DataFrame,
    options: AnalysisOptions,
) -> TestResult:
    from scipy import stats

    x, y = _paired_columns(spec, bindings, frame)
    coefficient, p_value = stats.spearmanr(x, y)
    return _correlation_result(
        spec,
        bindings,
        "Spearman rank correlation",
        float(coefficient),
        p_value,
        int(x.size),
    )


def run_variance_ratio(
    spec: TestSpec,
    bindings: Mapping[str, str],
    frame: pd.DataFrame,
    options: AnalysisOptions,
) -> TestResult:
    from scipy import stats

    x, y = _paired_columns(spec, bindings, frame)
    df_x, df_y = x.size - 1, y.size - 1
    ratio = float(np.var(x, ddof=1) / np.var(y, ddof=1))
    p_value = 2.0 * min(stats.f.cdf(ratio, df_x, df_y), stats.f.sf(ratio, df_x, df_y))
    statistic, p_value = checked(spec, ratio, p_value)
    return TestResult(
        test_id=spec.test_id,
        test_name=spec.display_name,
        method="F test comparing two variances",
        variables_used=variables_used(spec, bindings),
        statistic=statistic,
        p_value=p_value,
        degrees_of_freedom=(float(df_x), float(df_y)),
        estimate=ratio,
        n_observations=int(x.size),
    )
