from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from stats_dispatch.config.settings import AnalyzerSettings
from stats_dispatch.core.catalog import get_spec
from stats_dispatch.core.errors import ComputationError, ValidationError
from stats_dispatch.core.models import AnalysisFailure, AnalysisReport, AnalysisRequest
from stats_dispatch.data.classifier import VariableClassifier
from stats_dispatch.data.loader import DataLoader
from stats_dispatch.modeling.executor import TestExecutor
from stats_dispatch.pipeline.context import AnalysisContext
from stats_dispatch.reporting.assembler import ReportAssembler
from stats_dispatch.reporting.interpreter import ResultInterpreter
from stats_dispatch.validation.preconditions import PreconditionValidator

log = logging.getLogger(__name__)


class AnalysisPipeline:
    """Classify, validate, execute, interpret and assemble one analysis request."""

    def __init__(
        self,
        settings: AnalyzerSettings | None = None,
        loader: DataLoader | None = None,
        classifier: VariableClassifier | None = None,
        validator: PreconditionValidator | None = None,
        executor: TestExecutor | None = None,
        interpreter: ResultInterpreter | None = None,
        assembler: ReportAssembler | None = None,
    ) -> None:
        self.settings = settings or AnalyzerSettings()
        self.loader = loader or DataLoader(self.settings)
        self.classifier = classifier or VariableClassifier(self.settings)
        self.validator = validator or PreconditionValidator()
        self.executor = executor or TestExecutor(self.settings)
        self.interpreter = interpreter or ResultInterpreter(self.settings.alpha)
        self.assembler = assembler or ReportAssembler()

    def load(
        self,
        path: Path,
        delimiter: str | None = None,
        encoding: str | None = None,
    ) -> AnalysisContext:
        dataset = self.loader.load(path, delimiter=delimiter, encoding=encoding)
        return self.prepare(dataset, source=str(path))

    def prepare(self, dataset: Any, source: str | None = None) -> AnalysisContext:
        dataset = self.loader.clean(dataset.copy())
        return AnalysisContext.create(dataset, self.classifier.classify(dataset), source=source)

    def run(self, context: AnalysisContext, request: AnalysisRequest) -> AnalysisReport | AnalysisFailure:
        spec = get_spec(request.test_id)

        outcome = self.validator.validate(spec, request, context.variables)
        if not outcome.passed:
            log.warning("%s rejected: %s", spec.display_name, outcome.reason)
            return AnalysisFailure(
                kind="validation",
                test_id=spec.test_id,
                test_name=spec.display_name,
                message=outcome.reason,
                validation=outcome,
            )

        try:
            result = self.executor.execute(spec, request, context.dataset)
        except ComputationError as exc:
            log.warning("%s failed: %s", spec.display_name, exc.cause)
            return AnalysisFailure(
                kind="computation",
                test_id=spec.test_id,
                test_name=spec.display_name,
                message=exc.cause,
            )

        interpretation = self.interpreter.interpret(result, spec)
        return self.assembler.assemble(context, spec, request, result, interpretation)

    def run_or_raise(self, context: AnalysisContext, request: AnalysisRequest) -> AnalysisReport:
        outcome = self.run(context, request)
        if isinstance(outcome, AnalysisReport):
            return outcome
        if outcome.validation is not None:
            raise ValidationError(outcome.validation)
        raise ComputationError(outcome.test_name, outcome.message)
