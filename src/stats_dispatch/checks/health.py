from __future__ import annotations

from typing import Any

from stats_dispatch.checks.base import BaseCheck
from stats_dispatch.core.models import AnalysisRequest, Flag, TestSpec


class DataHealthChecker(BaseCheck):
    name = "data-health"
    assumptions = [
        "Rows with a missing value in any bound column are excluded listwise.",
        "Each bound column keeps enough observations after exclusion to run the test.",
    ]

    def run(self, dataset: Any, spec: TestSpec, request: AnalysisRequest) -> list[Flag]:
        flags: list[Flag] = []
        columns = self.bound_columns(spec, request)
        row_count = int(len(dataset))
        if row_count == 0:
            flags.append(
                Flag(
                    code="empty_dataset",
                    message="Dataset has zero rows.",
                    severity="ERROR",
                    stage="health",
                    recommendation="Provide a non-empty dataset.",
                )
            )
            return flags

        incomplete = int(dataset[columns].isna().any(axis=1).sum())
        if incomplete > 0:
            per_column = [
                f"{column}={int(dataset[column].isna().sum())}"
                for column in columns
                if int(dataset[column].isna().sum()) > 0
            ]
            flags.append(
                Flag(
                    code="missing_values_excluded",
                    message=(
                        f"{incomplete} of {row_count} rows excluded for missing values "
                        f"({', '.join(per_column)})."
                    ),
                    severity="WARN",
                    stage="health",
                    variables=tuple(columns),
                    recommendation="Review missingness before relying on the result.",
                )
            )

        remaining = row_count - incomplete
        if remaining < spec.min_sample_size:
            flags.append(
                Flag(
                    code="insufficient_observations",
                    message=(
                        f"{remaining} complete rows remain; {spec.display_name} needs at least "
                        f"{spec.min_sample_size}."
                    ),
                    severity="ERROR",
                    stage="health",
                    variables=tuple(columns),
                    recommendation="Choose columns with fewer missing values or add data.",
                )
            )
        return flags
