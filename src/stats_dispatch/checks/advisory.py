from __future__ import annotations

from typing import Any

from stats_dispatch.checks.base import BaseCheck
from stats_dispatch.config.settings import AnalyzerSettings
from stats_dispatch.core.models import AnalysisRequest, Flag, TestId, TestSpec


class SampleSizeAdvisor(BaseCheck):
    name = "sample-size-advisory"
    assumptions = [
        "Shapiro-Wilk p-values lose accuracy beyond 5000 observations.",
        "Kolmogorov-Smirnov with fitted parameters is intended for large samples.",
    ]

    def __init__(self, settings: AnalyzerSettings | None = None) -> None:
        self.settings = settings or AnalyzerSettings()

    def run(self, dataset: Any, spec: TestSpec, request: AnalysisRequest) -> list[Flag]:
        columns = self.bound_columns(spec, request)
        n = int(dataset[columns].dropna().shape[0])

        if spec.test_id == TestId.SHAPIRO_WILK and n > self.settings.shapiro_max_n:
            return [
                Flag(
                    code="shapiro_sample_size",
                    message=(
                        f"Shapiro-Wilk p-value may be inaccurate for n={n} "
                        f"(above {self.settings.shapiro_max_n})."
                    ),
                    severity="WARN",
                    stage="advisory",
                    variables=tuple(columns),
                    recommendation="Consider Lilliefors or Jarque-Bera for large samples.",
                )
            ]

        if spec.test_id == TestId.KOLMOGOROV_SMIRNOV and n < self.settings.ks_min_recommended_n:
            return [
                Flag(
                    code="ks_small_sample",
                    message=(
                        f"Kolmogorov-Smirnov is intended for large samples; n={n} is below "
                        f"{self.settings.ks_min_recommended_n}."
                    ),
                    severity="WARN",
                    stage="advisory",
                    variables=tuple(columns),
                    recommendation="Consider Shapiro-Wilk or Lilliefors for small samples.",
                )
            ]
        return []
