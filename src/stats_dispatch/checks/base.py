from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from stats_dispatch.core.models import AnalysisRequest, Flag, TestSpec


class BaseCheck(ABC):
    name = "base-check"
    assumptions: list[str] = []

    @abstractmethod
    def run(self, dataset: Any, spec: TestSpec, request: AnalysisRequest) -> list[Flag]:
        raise NotImplementedError

    def describe(self) -> str:
        lines = [f"Check: {self.name}", "Assumptions:"]
        lines.extend(f"- {entry}" for entry in self.assumptions)
        return "\n".join(lines)

    def bound_columns(self, spec: TestSpec, request: AnalysisRequest) -> list[str]:
        columns: list[str] = []
        for role in spec.roles:
            column = request.role_bindings.get(role.name)
            if column and column not in columns:
                columns.append(column)
        return columns
