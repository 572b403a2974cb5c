from __future__ import annotations

from itertools import combinations
from typing import Mapping

import numpy as np
import pandas as pd

from stats_dispatch.core.catalog import ALPHA
from stats_dispatch.core.errors import ComputationError
from stats_dispatch.core.models import (
    AnalysisOptions,
    TestResult,
    TestSpec,
    TukeyRow,
    TukeyTable,
)
from stats_dispatch.modeling.common import (
    checked,
    group_samples,
    require_size,
    require_variance,
    summarize_groups,
    variables_used,
)


def _two_samples(
    spec: TestSpec,
    bindings: Mapping[str, str],
    frame: pd.DataFrame,
) -> list[tuple[str, np.ndarray]]:
    samples = group_samples(spec, frame, bindings["group"], bindings["value"])
    if len(samples) != 2:
        raise ComputationError(
            spec.display_name,
            f"'{bindings['group']}' must split '{bindings['value']}' into exactly 2 groups, "
            f"found {len(samples)}",
        )
    return samples


def _require_paired(spec: TestSpec, samples: list[tuple[str, np.ndarray]]) -> np.ndarray:
    (_, first), (_, second) = samples
    if first.size != second.size:
        raise ComputationError(
            spec.display_name,
            f"paired comparison needs groups of equal size, found {first.size} and {second.size}",
        )
    return first - second


def run_t_test(
    spec: TestSpec,
    bindings: Mapping[str, str],
    frame: pd.DataFrame,
    options: AnalysisOptions,
) -> TestResult:
    from scipy import stats

    samples = _two_samples(spec, bindings, frame)
    for label, sample in samples:
        require_size(spec, f"group '{label}'", sample, 2)
    (_, first), (_, second) = samples
    n1, n2 = first.size, second.size

    if options.paired:
        differences = _require_paired(spec, samples)
        require_variance(spec, "the paired differences", differences)
        result = stats.ttest_rel(first, second)
        dof = float(n1 - 1)
        method = "Paired t-test"
    else:
        var1, var2 = float(np.var(first, ddof=1)), float(np.var(second, ddof=1))
        if var1 == 0.0 and var2 == 0.0:
            raise ComputationError(spec.display_name, "both groups have zero variance")
        result = stats.ttest_ind(first, second, equal_var=options.equal_var)
        if options.equal_var:
            dof = float(n1 + n2 - 2)
            method = "Two-sample t-test (pooled variance)"
        else:
            se1, se2 = var1 / n1, var2 / n2
            dof = (se1 + se2) ** 2 / (se1**2 / (n1 - 1) + se2**2 / (n2 - 1))
            method = "Welch two-sample t-test"

    statistic, p_value = checked(spec, result.statistic, result.pvalue)
    return TestResult(
        test_id=spec.test_id,
        test_name=spec.display_name,
        method=method,
        variables_used=variables_used(spec, bindings),
        statistic=statistic,
        p_value=p_value,
        degrees_of_freedom=(dof,),
        estimate=float(np.mean(first) - np.mean(second)),
        n_observations=int(n1 + n2),
        group_summaries=summarize_groups(samples),
    )


def tukey_table(values: pd.Series, groups: pd.Series, alpha: float = ALPHA) -> TukeyTable:
    from statsmodels.stats.multicomp import pairwise_tukeyhsd

    tukey = pairwise_tukeyhsd(endog=values, groups=groups, alpha=alpha)
    rows = tuple(
        TukeyRow(
            group1=str(group1),
            group2=str(group2),
            mean_difference=float(meandiff),
            adjusted_p_value=float(min(max(p_adj, 0.0), 1.0)),
            lower=float(bounds[0]),
            upper=float(bounds[1]),
            reject=bool(reject),
        )
        for (group1, group2), meandiff, p_adj, bounds, reject in zip(
            combinations(tukey.groupsunique, 2),
            tukey.meandiffs,
            tukey.pvalues,
            tukey.confint,
            tukey.reject,
        )
    )
    return TukeyTable(rows=rows, alpha=alpha)


def run_anova(
    spec: TestSpec,
    bindings: Mapping[str, str],
    frame: pd.DataFrame,
    options: AnalysisOptions,
    alpha: float = ALPHA,
) -> TestResult:
    import statsmodels.api as sm
    import statsmodels.formula.api as smf

    samples = group_samples(spec, frame, bindings["group"], bindings["value"])
    if len(samples) < 3:
        raise ComputationError(
            spec.display_name,
            f"at least 3 groups required, found {len(samples)}",
        )

    work = pd.DataFrame(
        {
            "group": np.concatenate([[label] * sample.size for label, sample in samples]),
            "value": np.concatenate([sample for _, sample in samples]),
        }
    )
    model = smf.ols(formula="value ~ C(group)", data=work).fit()
    if model.df_resid <= 0:
        raise ComputationError(
            spec.display_name,
            "residual degrees of freedom are non-positive; groups need more observations",
        )
    if all(float(np.ptp(sample)) == 0.0 for _, sample in samples):
        raise ComputationError(spec.display_name, "zero within-group variance")

    anova_table = sm.stats.anova_lm(model, typ=2)
    statistic, p_value = checked(
        spec,
        anova_table.loc["C(group)", "F"],
        anova_table.loc["C(group)", "PR(>F)"],
    )
    return TestResult(
        test_id=spec.test_id,
        test_name=spec.display_name,
        method="One-way analysis of variance with Tukey HSD post-hoc comparisons",
        variables_used=variables_used(spec, bindings),
        statistic=statistic,
        p_value=p_value,
        degrees_of_freedom=(
            float(anova_table.loc["C(group)", "df"]),
            float(anova_table.loc["Residual", "df"]),
        ),
        n_observations=int(model.nobs),
        auxiliary=tukey_table(work["value"], work["group"], alpha=alpha),
        group_summaries=summarize_groups(samples),
    )


def run_wilcoxon(
    spec: TestSpec,
    bindings: Mapping[str, str],
    frame: pd.DataFrame,
    options: AnalysisOptions,
) -> TestResult:
    from scipy import stats

    samples = _two_samples(spec, bindings, frame)
    (_, first), (_, second) = samples

    if options.paired:
        differences = _require_paired(spec, samples)
        if not np.any(differences != 0):
            raise ComputationError(spec.display_name, "all paired differences are zero")
        result = stats.wilcoxon(first, second)
        method = "Wilcoxon signed-rank test"
    else:
        result = stats.mannwhitneyu(first, second, alternative="two-sided")
        method = "Wilcoxon rank-sum test (Mann-Whitney U)"

    statistic, p_value = checked(spec, result.statistic, result.pvalue)
    return TestResult(
        test_id=spec.test_id,
        test_name=spec.display_name,
        method=method,
        variables_used=variables_used(spec, bindings),
        statistic=statistic,
        p_value=p_value,
        estimate=float(np.median(first) - np.median(second)),
        n_observations=int(first.size + second.size),
        group_summaries=summarize_groups(samples),
    )
