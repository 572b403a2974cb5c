from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from stats_dispatch.core.models import Variable, VariableKind


@dataclass(frozen=True)
class AnalysisContext:
    """Dataset and its classified variables, owned by the caller.

    A new upload produces a new context; an existing one is never updated.
    """

    dataset: Any
    variables: Mapping[str, Variable]
    source: str | None = None

    @classmethod
    def create(
        cls,
        dataset: Any,
        variables: Mapping[str, Variable],
        source: str | None = None,
    ) -> "AnalysisContext":
        return cls(dataset=dataset.copy(), variables=MappingProxyType(dict(variables)), source=source)

    def columns_of_kind(self, kind: VariableKind) -> list[str]:
        return [name for name, variable in self.variables.items() if variable.kind == kind]
