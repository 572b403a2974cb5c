from __future__ import annotations

import warnings
from typing import Mapping

import numpy as np
import pandas as pd

from stats_dispatch.core.models import (
    AnalysisOptions,
    NormalityProfile,
    TestResult,
    TestSpec,
)
from stats_dispatch.modeling.common import (
    checked,
    numeric_values,
    require_size,
    require_variance,
    variables_used,
)


def _sample(spec: TestSpec, bindings: Mapping[str, str], frame: pd.DataFrame) -> np.ndarray:
    column = bindings["value"]
    values = numeric_values(frame, column)
    require_size(spec, f"'{column}'", values, spec.min_sample_size)
    require_variance(spec, f"'{column}'", values)
    return values


def normality_profile(values: np.ndarray) -> NormalityProfile:
    """QQ-plot and histogram input for a normality test."""
    from scipy import stats

    (theoretical, ordered), (slope, intercept, _) = stats.probplot(values, dist="norm")
    return NormalityProfile(
        sample=tuple(float(value) for value in values),
        theoretical_quantiles=tuple(float(value) for value in theoretical),
        ordered_values=tuple(float(value) for value in ordered),
        line_slope=float(slope),
        line_intercept=float(intercept),
    )


def _result(
    spec: TestSpec,
    bindings: Mapping[str, str],
    values: np.ndarray,
    method: str,
    statistic: float,
    p_value: float,
    **extra: object,
) -> TestResult:
    statistic, p_value = checked(spec, statistic, p_value)
    return TestResult(
        test_id=spec.test_id,
        test_name=spec.display_name,
        method=method,
        variables_used=variables_used(spec, bindings),
        statistic=statistic,
        p_value=p_value,
        n_observations=int(values.size),
        normality_profile=normality_profile(values),
        **extra,
    )


def run_shapiro_wilk(
    spec: TestSpec,
    bindings: Mapping[str, str],
    frame: pd.DataFrame,
    options: AnalysisOptions,
) -> TestResult:
    from scipy import stats

    values = _sample(spec, bindings, frame)
    # scipy warns above 5000 observations; the advisory check reports it instead.
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", UserWarning)
        statistic, p_value = stats.shapiro(values)
    return _result(spec, bindings, values, "Shapiro-Wilk W test", statistic, p_value)


def run_kolmogorov_smirnov(
    spec: TestSpec,
    bindings: Mapping[str, str],
    frame: pd.DataFrame,
    options: AnalysisOptions,
) -> TestResult:
    from scipy import stats

    values = _sample(spec, bindings, frame)
    mean, sd = float(np.mean(values)), float(np.std(values, ddof=1))
    result = stats.kstest(values, "norm", args=(mean, sd))
    return _result(
        spec,
        bindings,
        values,
        f"One-sample Kolmogorov-Smirnov test against N({mean:.4g}, {sd:.4g})",
        result.statistic,
        result.pvalue,
        extras={"fitted_mean": mean, "fitted_sd": sd},
    )


def run_lilliefors(
    spec: TestSpec,
    bindings: Mapping[str, str],
    frame: pd.DataFrame,
    options: AnalysisOptions,
) -> TestResult:
    from statsmodels.stats.diagnostic import lilliefors

    values = _sample(spec, bindings, frame)
    statistic, p_value = lilliefors(values, dist="norm", pvalmethod="table")
    return _result(
        spec,
        bindings,
        values,
        "Lilliefors (Kolmogorov-Smirnov) normality test",
        statistic,
        p_value,
    )


def run_jarque_bera(
    spec: TestSpec,
    bindings: Mapping[str, str],
    frame: pd.DataFrame,
    options: AnalysisOptions,
) -> TestResult:
    from statsmodels.stats.stattools import jarque_bera

    values = _sample(spec, bindings, frame)
    statistic, p_value, skewness, kurtosis = jarque_bera(values)
    return _result(
        spec,
        bindings,
        values,
        "Jarque-Bera test on skewness and kurtosis",
        statistic,
        p_value,
        degrees_of_freedom=(2.0,),
        extras={"skewness": float(skewness), "kurtosis": float(kurtosis)},
    )
