from __future__ import annotations

import logging
import warnings
from dataclasses import replace
from types import MappingProxyType
from typing import Any, Mapping

import numpy as np

from stats_dispatch.checks.advisory import SampleSizeAdvisor
from stats_dispatch.checks.health import DataHealthChecker
from stats_dispatch.config.settings import AnalyzerSettings
from stats_dispatch.core.errors import ComputationError
from stats_dispatch.core.models import AnalysisRequest, TestId, TestResult, TestSpec
from stats_dispatch.modeling.association import run_pearson, run_spearman, run_variance_ratio
from stats_dispatch.modeling.common import Strategy
from stats_dispatch.modeling.contingency import run_chi_square, run_mcnemar
from stats_dispatch.modeling.group_tests import run_anova, run_t_test, run_wilcoxon
from stats_dispatch.modeling.normality import (
    run_jarque_bera,
    run_kolmogorov_smirnov,
    run_lilliefors,
    run_shapiro_wilk,
)

log = logging.getLogger(__name__)

STRATEGIES: Mapping[TestId, Strategy] = MappingProxyType(
    {
        TestId.CHI_SQUARE: run_chi_square,
        TestId.MCNEMAR: run_mcnemar,
        TestId.T_TEST: run_t_test,
        TestId.ANOVA: run_anova,
        TestId.WILCOXON: run_wilcoxon,
        TestId.PEARSON: run_pearson,
        TestId.SPEARMAN: run_spearman,
        TestId.VARIANCE_RATIO: run_variance_ratio,
        TestId.SHAPIRO_WILK: run_shapiro_wilk,
        TestId.KOLMOGOROV_SMIRNOV: run_kolmogorov_smirnov,
        TestId.LILLIEFORS: run_lilliefors,
        TestId.JARQUE_BERA: run_jarque_bera,
    }
)


class TestExecutor:
    """Run the strategy registered for a test on the bound, complete-case data."""

    __test__ = False

    def __init__(
        self,
        settings: AnalyzerSettings | None = None,
        health_checker: DataHealthChecker | None = None,
        advisor: SampleSizeAdvisor | None = None,
    ) -> None:
        self.settings = settings or AnalyzerSettings()
        self.health_checker = health_checker or DataHealthChecker()
        self.advisor = advisor or SampleSizeAdvisor(self.settings)

    def execute(self, spec: TestSpec, request: AnalysisRequest, dataset: Any) -> TestResult:
        strategy = STRATEGIES[spec.test_id]
        columns = self.health_checker.bound_columns(spec, request)

        flags = self.health_checker.run(dataset, spec, request)
        blocking = [flag for flag in flags if flag.severity == "ERROR"]
        if blocking:
            raise ComputationError(spec.display_name, blocking[0].message)

        advisories = self.advisor.run(dataset, spec, request)
        for flag in advisories:
            log.warning("%s: %s", spec.display_name, flag.message)
        flags.extend(advisories)

        frame = dataset[columns].dropna()
        log.info(
            "Running %s on %s (n=%d, options=%s)",
            spec.display_name,
            ", ".join(columns),
            len(frame),
            request.options,
        )
        # Post-hoc rows are rejected at the same alpha the interpreter applies.
        extra = {"alpha": self.settings.alpha} if spec.supports_posthoc else {}
        try:
            with warnings.catch_warnings(), np.errstate(divide="ignore", invalid="ignore"):
                warnings.simplefilter("ignore", RuntimeWarning)
                result = strategy(spec, request.role_bindings, frame, request.options, **extra)
        except (ValueError, ZeroDivisionError, np.linalg.LinAlgError) as exc:
            raise ComputationError(spec.display_name, str(exc)) from exc

        return replace(result, warnings=tuple(flags) + result.warnings)
