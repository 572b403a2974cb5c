from __future__ import annotations

from typing import Mapping

import pandas as pd

from stats_dispatch.core.errors import ComputationError
from stats_dispatch.core.models import (
    AnalysisOptions,
    ContingencyTable,
    Flag,
    TestResult,
    TestSpec,
)
from stats_dispatch.modeling.common import checked, variables_used


def cross_tabulate(frame: pd.DataFrame, row: str, column: str) -> pd.DataFrame:
    return pd.crosstab(frame[row], frame[column])


def _as_table(
    table: pd.DataFrame,
    row: str,
    column: str,
    expected: object = None,
) -> ContingencyTable:
    return ContingencyTable(
        row_variable=row,
        column_variable=column,
        row_labels=tuple(str(label) for label in table.index),
        column_labels=tuple(str(label) for label in table.columns),
        observed=tuple(tuple(int(count) for count in counts) for counts in table.to_numpy()),
        expected=(
            None
            if expected is None
            else tuple(tuple(float(count) for count in counts) for counts in expected)
        ),
    )


def run_chi_square(
    spec: TestSpec,
    bindings: Mapping[str, str],
    frame: pd.DataFrame,
    options: AnalysisOptions,
) -> TestResult:
    from scipy import stats

    row, column = bindings["row"], bindings["column"]
    table = cross_tabulate(frame, row, column)
    if min(table.shape) < 2:
        raise ComputationError(
            spec.display_name,
            f"contingency table is {table.shape[0]}x{table.shape[1]}; "
            "both variables need at least 2 observed levels",
        )

    statistic, p_value, dof, expected = stats.chi2_contingency(table.to_numpy(), correction=True)
    statistic, p_value = checked(spec, statistic, p_value)

    warnings: list[Flag] = []
    low_cells = int((expected < 5).sum())
    if low_cells:
        warnings.append(
            Flag(
                code="low_expected_counts",
                message=(
                    f"{low_cells} of {expected.size} cells have expected counts below 5; "
                    "the chi-square approximation may be inaccurate."
                ),
                severity="WARN",
                stage="execution",
                variables=(row, column),
                recommendation="Collapse sparse levels or use an exact test.",
            )
        )

    yates = table.shape == (2, 2)
    return TestResult(
        test_id=spec.test_id,
        test_name=spec.display_name,
        method=(
            "Pearson chi-square test with Yates continuity correction"
            if yates
            else "Pearson chi-square test"
        ),
        variables_used=variables_used(spec, bindings),
        statistic=statistic,
        p_value=p_value,
        degrees_of_freedom=(float(dof),),
        n_observations=int(table.to_numpy().sum()),
        auxiliary=_as_table(table, row, column, expected),
        warnings=tuple(warnings),
    )


def run_mcnemar(
    spec: TestSpec,
    bindings: Mapping[str, str],
    frame: pd.DataFrame,
    options: AnalysisOptions,
) -> TestResult:
    from statsmodels.stats.contingency_tables import mcnemar

    first, second = bindings["first"], bindings["second"]
    table = cross_tabulate(frame, first, second)
    if table.shape != (2, 2):
        raise ComputationError(
            spec.display_name,
            f"contingency table must be 2x2, found {table.shape[0]}x{table.shape[1]}",
        )

    bunch = mcnemar(table.to_numpy(), exact=True)
    statistic, p_value = checked(spec, bunch.statistic, bunch.pvalue)
    return TestResult(
        test_id=spec.test_id,
        test_name=spec.display_name,
        method="Exact McNemar test (binomial on discordant pairs)",
        variables_used=variables_used(spec, bindings),
        statistic=statistic,
        p_value=p_value,
        n_observations=int(table.to_numpy().sum()),
        auxiliary=_as_table(table, first, second),
    )
