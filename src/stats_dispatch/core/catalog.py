"""Static registry of the supported hypothesis tests.

Each entry lists the variable roles a test needs, the cardinality limits on
categorical roles, and the wording used when its result is interpreted.
Conclusion templates are formatted with the bound column names (keyed by
role name) and ``p``.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from stats_dispatch.core.models import RoleSpec, TestId, TestSpec, VariableKind

ALPHA = 0.05
MAX_CATEGORICAL_LEVELS = 10
SHAPIRO_MAX_N = 5000
KS_MIN_RECOMMENDED_N = 50

CATEGORICAL = VariableKind.CATEGORICAL
NUMERIC = VariableKind.NUMERIC

_GROUP_TWO = RoleSpec("group", CATEGORICAL, "grouping variable", min_levels=2, max_levels=2)
_VALUE = RoleSpec("value", NUMERIC, "numeric variable")
_X = RoleSpec("x", NUMERIC, "first numeric variable")
_Y = RoleSpec("y", NUMERIC, "second numeric variable")

_NORMALITY_SIGNIFICANT = (
    "'{value}' is not normally distributed (p = {p}): the null hypothesis of normality is rejected."
)
_NORMALITY_NOT_SIGNIFICANT = (
    "There is no evidence against normality for '{value}' (p = {p}): "
    "the null hypothesis of normality is not rejected."
)
_NORMALITY_NULL = "The sample was drawn from a normal distribution."


def _normality_spec(test_id: TestId, display_name: str, min_sample_size: int) -> TestSpec:
    return TestSpec(
        test_id=test_id,
        display_name=display_name,
        family="normality",
        roles=(_VALUE,),
        null_hypothesis=_NORMALITY_NULL,
        significant_text=_NORMALITY_SIGNIFICANT,
        not_significant_text=_NORMALITY_NOT_SIGNIFICANT,
        min_sample_size=min_sample_size,
    )


_SPECS = (
    TestSpec(
        test_id=TestId.CHI_SQUARE,
        display_name="Chi-square test of independence",
        family="categorical",
        roles=(
            RoleSpec("row", CATEGORICAL, "row variable", min_levels=2),
            RoleSpec("column", CATEGORICAL, "column variable", min_levels=2),
        ),
        null_hypothesis="The two categorical variables are independent.",
        significant_text=(
            "'{row}' and '{column}' are associated (p = {p}): "
            "the null hypothesis of independence is rejected."
        ),
        not_significant_text=(
            "There is no evidence of an association between '{row}' and '{column}' (p = {p}): "
            "the variables may be independent."
        ),
    ),
    TestSpec(
        test_id=TestId.MCNEMAR,
        display_name="McNemar test",
        family="categorical",
        roles=(
            RoleSpec("first", CATEGORICAL, "first paired variable"),
            RoleSpec("second", CATEGORICAL, "second paired variable"),
        ),
        null_hypothesis="The marginal proportions of the paired 2x2 table are equal.",
        significant_text=(
            "The paired proportions of '{first}' and '{second}' differ (p = {p}): "
            "the null hypothesis of marginal homogeneity is rejected."
        ),
        not_significant_text=(
            "There is no evidence that the paired proportions of '{first}' and '{second}' "
            "differ (p = {p})."
        ),
        square_dichotomous=True,
    ),
    TestSpec(
        test_id=TestId.T_TEST,
        display_name="Student t-test",
        family="parametric",
        roles=(_GROUP_TWO, _VALUE),
        null_hypothesis="The means of '{value}' are equal in both groups.",
        significant_text=(
            "The mean of '{value}' differs between the groups of '{group}' (p = {p}): "
            "the groups differ."
        ),
        not_significant_text=(
            "There is no evidence that the mean of '{value}' differs between the groups "
            "of '{group}' (p = {p})."
        ),
        options=("paired", "equal_var"),
    ),
    TestSpec(
        test_id=TestId.ANOVA,
        display_name="One-way ANOVA",
        family="parametric",
        roles=(RoleSpec("group", CATEGORICAL, "grouping variable", min_levels=3), _VALUE),
        null_hypothesis="The means of '{value}' are equal across all groups.",
        significant_text=(
            "The mean of '{value}' differs across the groups of '{group}' (p = {p}): "
            "at least one group differs."
        ),
        not_significant_text=(
            "There is no evidence that the mean of '{value}' differs across the groups "
            "of '{group}' (p = {p})."
        ),
        supports_posthoc=True,
    ),
    TestSpec(
        test_id=TestId.WILCOXON,
        display_name="Wilcoxon test",
        family="non-parametric",
        roles=(_GROUP_TWO, _VALUE),
        null_hypothesis="The distributions of '{value}' are the same in both groups.",
        significant_text=(
            "The distribution of '{value}' differs between the groups of '{group}' (p = {p}): "
            "the groups differ."
        ),
        not_significant_text=(
            "There is no evidence that the distribution of '{value}' differs between the "
            "groups of '{group}' (p = {p})."
        ),
        options=("paired",),
    ),
    TestSpec(
        test_id=TestId.PEARSON,
        display_name="Pearson correlation",
        family="parametric",
        roles=(_X, _Y),
        null_hypothesis="There is no linear correlation between the two variables.",
        significant_text=(
            "'{x}' and '{y}' are linearly correlated (p = {p}): "
            "the null hypothesis of zero correlation is rejected."
        ),
        not_significant_text=(
            "There is no evidence of a linear correlation between '{x}' and '{y}' (p = {p})."
        ),
        min_sample_size=3,
    ),
    TestSpec(
        test_id=TestId.SPEARMAN,
        display_name="Spearman rank correlation",
        family="non-parametric",
        roles=(_X, _Y),
        null_hypothesis="There is no monotonic association between the two variables.",
        significant_text=(
            "'{x}' and '{y}' are monotonically associated (p = {p}): "
            "the null hypothesis of zero rank correlation is rejected."
        ),
        not_significant_text=(
            "There is no evidence of a monotonic association between '{x}' and '{y}' (p = {p})."
        ),
        min_sample_size=3,
    ),
    TestSpec(
        test_id=TestId.VARIANCE_RATIO,
        display_name="F test for equality of variances",
        family="parametric",
        roles=(_X, _Y),
        null_hypothesis="The variances of the two variables are equal.",
        significant_text=(
            "The variances of '{x}' and '{y}' differ (p = {p}): "
            "the null hypothesis of equal variances is rejected."
        ),
        not_significant_text=(
            "There is no evidence that the variances of '{x}' and '{y}' differ (p = {p})."
        ),
    ),
    _normality_spec(TestId.SHAPIRO_WILK, "Shapiro-Wilk normality test", 3),
    _normality_spec(TestId.KOLMOGOROV_SMIRNOV, "Kolmogorov-Smirnov normality test", 2),
    _normality_spec(TestId.LILLIEFORS, "Lilliefors normality test", 4),
    _normality_spec(TestId.JARQUE_BERA, "Jarque-Bera normality test", 3),
)

CATALOG: Mapping[TestId, TestSpec] = MappingProxyType({spec.test_id: spec for spec in _SPECS})


def get_spec(test_id: TestId | str) -> TestSpec:
    if isinstance(test_id, TestId):
        return CATALOG[test_id]

    key = str(test_id).strip().lower().replace("-", "_").replace(" ", "_")
    for spec in CATALOG.values():
        if key in {spec.test_id.value, spec.display_name.lower().replace("-", "_").replace(" ", "_")}:
            return spec
    available = ", ".join(item.value for item in TestId)
    raise KeyError(f"Unknown test: {test_id}. Available: {available}")


def list_specs() -> list[TestSpec]:
    return list(CATALOG.values())
