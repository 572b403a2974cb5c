from __future__ import annotations

from typing import Mapping

from stats_dispatch.core.catalog import ALPHA
from stats_dispatch.core.models import (
    Interpretation,
    SignificantPair,
    TestResult,
    TestSpec,
    TukeyTable,
)


def format_p(p_value: float) -> str:
    return "< 0.0001" if p_value < 1e-4 else f"{p_value:.4g}"


class ResultInterpreter:
    """Turn a test result into a plain-language conclusion at a fixed alpha."""

    def __init__(self, alpha: float = ALPHA) -> None:
        self.alpha = alpha

    def interpret(self, result: TestResult, spec: TestSpec) -> Interpretation:
        significant = result.p_value < self.alpha
        bindings = self._bindings(result, spec)
        template = spec.significant_text if significant else spec.not_significant_text
        conclusion = template.format(p=format_p(result.p_value), **bindings)

        pairs: tuple[SignificantPair, ...] = ()
        if spec.supports_posthoc and isinstance(result.auxiliary, TukeyTable):
            pairs = self.significant_pairs(result.auxiliary)
            conclusion = f"{conclusion} {self._posthoc_text(significant, pairs, bindings)}".strip()

        return Interpretation(
            conclusion_text=conclusion,
            significant=significant,
            significant_pairs=pairs,
            alpha=self.alpha,
        )

    def significant_pairs(self, table: TukeyTable) -> tuple[SignificantPair, ...]:
        surviving = [row for row in table.rows if row.adjusted_p_value < self.alpha]
        surviving.sort(key=lambda row: row.adjusted_p_value)
        return tuple(SignificantPair(label=row.label, adjusted_p_value=row.adjusted_p_value) for row in surviving)

    def _posthoc_text(
        self,
        significant: bool,
        pairs: tuple[SignificantPair, ...],
        bindings: Mapping[str, str],
    ) -> str:
        if pairs:
            listed = "; ".join(f"{pair.label} (adjusted p = {format_p(pair.adjusted_p_value)})" for pair in pairs)
            return f"Tukey HSD finds significant pairwise differences: {listed}."
        if significant:
            return (
                f"An overall effect of '{bindings.get('group', 'the grouping variable')}' was detected, "
                "but the Tukey HSD post-hoc comparisons cannot localize it to any specific pair of groups."
            )
        return ""

    def _bindings(self, result: TestResult, spec: TestSpec) -> dict[str, str]:
        return {role.name: column for role, column in zip(spec.roles, result.variables_used)}
