from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

from stats_dispatch.cli.help_text import EXPLANATIONS
from stats_dispatch.config.settings import AnalyzerSettings
from stats_dispatch.core.catalog import list_specs
from stats_dispatch.core.errors import InputError
from stats_dispatch.core.models import AnalysisFailure, AnalysisOptions, AnalysisRequest, TestId
from stats_dispatch.pipeline.orchestrator import AnalysisPipeline
from stats_dispatch.reporting.text_report import TextReportRenderer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stats-dispatch",
        description="Run one of twelve hypothesis tests on a tabular dataset.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging verbosity.",
    )
    subparsers = parser.add_subparsers(dest="command")

    classify = subparsers.add_parser("classify", help="Classify dataset columns by statistical kind.")
    _add_dataset_arguments(classify)

    tests = subparsers.add_parser("tests", help="List supported tests and their variable roles.")
    tests.add_argument("--explain", action="store_true", help="Show method context.")

    run = subparsers.add_parser("run", help="Validate, execute and interpret one test.")
    _add_dataset_arguments(run)
    run.add_argument(
        "--test",
        required=True,
        choices=[test_id.value for test_id in TestId],
        help="Test to run.",
    )
    run.add_argument(
        "--bind",
        action="append",
        default=[],
        metavar="ROLE=COLUMN",
        help="Bind a test role to a dataset column. Repeat for every role.",
    )
    run.add_argument("--paired", action="store_true", help="Use the paired form (t-test, Wilcoxon).")
    run.add_argument(
        "--equal-var",
        action="store_true",
        help="Assume equal variances (pooled t-test instead of Welch).",
    )
    run.add_argument(
        "--format",
        choices=["json", "text"],
        default="json",
        help="Output format for the result.",
    )
    run.add_argument("--output", type=str, help="Write the result to this file instead of stdout.")
    run.add_argument("--template", type=str, help="Path to a report template YAML for text output.")

    return parser


def _add_dataset_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", type=str, help="Path to input dataset.")
    parser.add_argument("--delimiter", type=str, default=None, help="Field delimiter for text files.")
    parser.add_argument("--encoding", type=str, default=None, help="Text encoding of the input file.")
    parser.add_argument("--config", type=str, help="Path to analyzer settings YAML.")
    parser.add_argument("--explain", action="store_true", help="Show method context.")


def parse_bindings(entries: list[str]) -> dict[str, str]:
    bindings: dict[str, str] = {}
    for entry in entries:
        role, separator, column = entry.partition("=")
        if not separator or not role.strip() or not column.strip():
            raise ValueError(f"Invalid binding '{entry}'; expected ROLE=COLUMN.")
        bindings[role.strip()] = column.strip()
    return bindings


def _build_request(args: argparse.Namespace) -> AnalysisRequest:
    return AnalysisRequest(
        test_id=TestId(args.test),
        role_bindings=parse_bindings(args.bind),
        options=AnalysisOptions(paired=args.paired, equal_var=args.equal_var),
    )


def _print_json(payload: dict[str, Any] | list[Any]) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _emit(text: str, output: str | None) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
    else:
        print(text, end="" if text.endswith("\n") else "\n")


def _print_explain(command: str | None) -> bool:
    if not command:
        return False
    explanation = EXPLANATIONS.get(command)
    if explanation is None:
        return False
    print(explanation)
    return True


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    if args.command is None:
        parser.print_help()
        return 1

    if args.explain:
        _print_explain(args.command)
        return 0

    if args.command == "tests":
        _print_json(
            [
                {
                    "id": spec.test_id.value,
                    "name": spec.display_name,
                    "family": spec.family,
                    "roles": [asdict(role) for role in spec.roles],
                    "options": list(spec.options),
                }
                for spec in list_specs()
            ]
        )
        return 0

    try:
        settings = AnalyzerSettings.from_yaml(Path(args.config) if args.config else None)
    except (FileNotFoundError, ValueError) as exc:
        _print_json({"kind": "input", "message": str(exc)})
        return 1
    pipeline = AnalysisPipeline(settings=settings)
    try:
        context = pipeline.load(Path(args.input), delimiter=args.delimiter, encoding=args.encoding)
    except InputError as exc:
        _print_json({"kind": "input", "message": str(exc)})
        return 1

    if args.command == "classify":
        _print_json(
            {
                name: {
                    "kind": variable.kind.value,
                    "distinct_count": variable.distinct_count,
                    "missing_count": variable.missing_count,
                }
                for name, variable in context.variables.items()
            }
        )
        return 0

    if args.command == "run":
        try:
            request = _build_request(args)
        except ValueError as exc:
            parser.error(str(exc))
        outcome = pipeline.run(context, request)
        if isinstance(outcome, AnalysisFailure):
            _print_json(outcome.to_dict())
            return 1

        if args.format == "text":
            try:
                renderer = TextReportRenderer.from_template_file(Path(args.template) if args.template else None)
            except (FileNotFoundError, ValueError) as exc:
                _print_json({"kind": "input", "message": str(exc)})
                return 1
            _emit(renderer.render(outcome), args.output)
        else:
            _emit(json.dumps(outcome.to_dict(), indent=2, default=str), args.output)
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
