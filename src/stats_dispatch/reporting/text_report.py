from __future__ import annotations

import math
from numbers import Real
from pathlib import Path
from typing import Any

import pandas as pd

from stats_dispatch.core.models import AnalysisReport, ContingencyTable, TukeyTable
from stats_dispatch.reporting.interpreter import format_p
from stats_dispatch.reporting.template_engine import DEFAULT_TEMPLATE, load_template


class TextReportRenderer:
    """Render an analysis report as plain text for download.

    Sections always appear in the same order: header, test result, group
    statistics, post-hoc table, interpretation. Optional sections are left
    out when the test does not produce them.
    """

    def __init__(self, template: dict[str, Any] | None = None) -> None:
        self.template = template or DEFAULT_TEMPLATE

    @classmethod
    def from_template_file(cls, template_path: Path | None) -> "TextReportRenderer":
        return cls(load_template(template_path))

    def render(self, report: AnalysisReport) -> str:
        blocks = [
            self._header(report),
            self._omnibus(report),
            self._group_statistics(report),
            self._posthoc(report),
            self._interpretation(report),
        ]
        return "\n\n".join(block for block in blocks if block) + "\n"

    def _format_value(self, value: Any) -> str:
        if value is None:
            return "-"
        if isinstance(value, bool):
            return str(value)
        if isinstance(value, Real):
            numeric = float(value)
            if math.isfinite(numeric):
                return f"{numeric:.{int(self.template['decimals'])}g}"
            return str(numeric)
        return str(value)

    def _section(self, key: str, body: str) -> str:
        title = self.template["sections"][key]
        return f"{title}\n{'-' * len(title)}\n{body}"

    def _frame(self, frame: pd.DataFrame) -> str:
        return frame.to_string(index=False)

    def _header(self, report: AnalysisReport) -> str:
        title = self.template["title"]
        bindings = ", ".join(f"{role}={column}" for role, column in report.request.role_bindings.items())
        lines = [
            title,
            str(self.template["rule"]) * len(title),
            f"Test: {report.test_name} ({report.family})",
            f"Variables: {bindings}",
            f"Null hypothesis: {report.null_hypothesis}",
            f"Run at: {report.result.timestamp.isoformat(timespec='seconds')}",
        ]
        if report.source:
            lines.append(f"Dataset: {report.source}")
        return "\n".join(lines)

    def _omnibus(self, report: AnalysisReport) -> str:
        result = report.result
        lines = [
            f"Method: {result.method}",
            f"Statistic: {self._format_value(result.statistic)}",
        ]
        if result.degrees_of_freedom is not None:
            lines.append(
                "Degrees of freedom: "
                + ", ".join(self._format_value(value) for value in result.degrees_of_freedom)
            )
        lines.append(f"p-value: {format_p(result.p_value)}")
        if result.estimate is not None:
            lines.append(f"Estimate: {self._format_value(result.estimate)}")
        for key, value in result.extras.items():
            lines.append(f"{key.replace('_', ' ').capitalize()}: {self._format_value(value)}")
        lines.append(f"Observations: {result.n_observations}")

        body = "\n".join(lines)
        if isinstance(result.auxiliary, ContingencyTable):
            body = f"{body}\n\n{self._section('contingency', self._contingency(result.auxiliary))}"
        return self._section("omnibus", body)

    def _contingency(self, table: ContingencyTable) -> str:
        frame = pd.DataFrame(
            list(table.observed),
            index=pd.Index(table.row_labels, name=table.row_variable),
            columns=list(table.column_labels),
        )
        text = frame.to_string()
        if self.template.get("include_expected_counts") and table.expected is not None:
            expected = pd.DataFrame(
                [[self._format_value(value) for value in row] for row in table.expected],
                index=pd.Index(table.row_labels, name=table.row_variable),
                columns=list(table.column_labels),
            )
            text = f"{text}\n\nExpected counts:\n{expected.to_string()}"
        return text

    def _group_statistics(self, report: AnalysisReport) -> str:
        summaries = report.result.group_summaries
        if not summaries:
            return ""
        frame = pd.DataFrame(
            [
                {
                    "group": summary.level,
                    "n": summary.n,
                    "mean": self._format_value(summary.mean),
                    "sd": self._format_value(summary.sd),
                    "min": self._format_value(summary.minimum),
                    "max": self._format_value(summary.maximum),
                }
                for summary in summaries
            ]
        )
        return self._section("group_statistics", self._frame(frame))

    def _posthoc(self, report: AnalysisReport) -> str:
        table = report.result.auxiliary
        if not isinstance(table, TukeyTable):
            return ""
        frame = pd.DataFrame(
            [
                {
                    "group1": row.group1,
                    "group2": row.group2,
                    "meandiff": self._format_value(row.mean_difference),
                    "p-adj": format_p(row.adjusted_p_value),
                    "lower": self._format_value(row.lower),
                    "upper": self._format_value(row.upper),
                    "reject": row.reject,
                }
                for row in table.rows
            ]
        )
        return self._section("posthoc", self._frame(frame))

    def _interpretation(self, report: AnalysisReport) -> str:
        interpretation = report.interpretation
        lines = [
            interpretation.conclusion_text,
            f"Significance level: {self._format_value(interpretation.alpha)}",
        ]
        body = "\n".join(lines)
        warnings = report.result.warnings
        if warnings:
            notes = "\n".join(f"- [{flag.severity}] {flag.message}" for flag in warnings)
            body = f"{body}\n\n{self._section('warnings', notes)}"
        return self._section("interpretation", body)
