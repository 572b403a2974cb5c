from __future__ import annotations

from stats_dispatch.core.models import (
    AnalysisReport,
    AnalysisRequest,
    Interpretation,
    TestResult,
    TestSpec,
    VariableSummary,
)
from stats_dispatch.pipeline.context import AnalysisContext


class ReportAssembler:
    """Combine classification, result and interpretation into one record."""

    def assemble(
        self,
        context: AnalysisContext,
        spec: TestSpec,
        request: AnalysisRequest,
        result: TestResult,
        interpretation: Interpretation,
    ) -> AnalysisReport:
        variables = tuple(
            VariableSummary(
                name=variable.name,
                kind=variable.kind,
                distinct_count=variable.distinct_count,
                missing_count=variable.missing_count,
            )
            for variable in context.variables.values()
        )
        return AnalysisReport(
            test_id=spec.test_id,
            test_name=spec.display_name,
            family=spec.family,
            null_hypothesis=spec.null_hypothesis.format(**request.role_bindings),
            request=request,
            variables=variables,
            result=result,
            interpretation=interpretation,
            source=context.source,
        )
