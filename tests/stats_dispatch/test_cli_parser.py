from __future__ import annotations

import json

import pytest

from stats_dispatch.cli.main import build_parser, main, parse_bindings


def _write_scores(tmp_path):
    path = tmp_path / "scores.csv"
    rows = ["arm,score"]
    rows += [f"A,{value}" for value in (10.1, 11.4, 9.8, 12.0, 10.7, 11.1)]
    rows += [f"B,{value}" for value in (13.2, 14.8, 12.9, 15.1, 13.7, 14.3)]
    path.write_text("\n".join(rows) + "\n", encoding="utf-8")
    return path


def test_parse_run_command() -> None:
    parser = build_parser()
    args = parser.parse_args(
        [
            "run",
            "sample.csv",
            "--test",
            "t_test",
            "--bind",
            "group=arm",
            "--bind",
            "value=score",
            "--paired",
            "--format",
            "text",
        ]
    )

    assert args.command == "run"
    assert args.input == "sample.csv"
    assert args.test == "t_test"
    assert args.bind == ["group=arm", "value=score"]
    assert args.paired is True
    assert args.equal_var is False
    assert args.format == "text"
    assert args.delimiter is None


def test_parse_explain_flag() -> None:
    parser = build_parser()
    args = parser.parse_args(["classify", "sample.csv", "--explain"])

    assert args.command == "classify"
    assert args.explain is True


def test_unknown_test_is_rejected_by_parser() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["run", "sample.csv", "--test", "kruskal"])


def test_parse_bindings() -> None:
    assert parse_bindings(["x = height", "y=weight"]) == {"x": "height", "y": "weight"}
    with pytest.raises(ValueError, match="ROLE=COLUMN"):
        parse_bindings(["height"])


def test_classify_prints_kinds(tmp_path, capsys) -> None:
    path = _write_scores(tmp_path)

    assert main(["classify", str(path)]) == 0
    payload = json.loads(capsys.readouterr().out)

    assert payload["arm"]["kind"] == "categorical"
    assert payload["score"]["kind"] == "numeric"


def test_run_writes_json_result(tmp_path, capsys) -> None:
    path = _write_scores(tmp_path)

    code = main(["run", str(path), "--test", "t_test", "--bind", "group=arm", "--bind", "value=score"])
    payload = json.loads(capsys.readouterr().out)

    assert code == 0
    assert payload["test_id"] == "t_test"
    assert payload["interpretation"]["significant"] is True


def test_run_writes_text_report_to_file(tmp_path) -> None:
    path = _write_scores(tmp_path)
    output = tmp_path / "report.txt"

    code = main(
        [
            "run",
            str(path),
            "--test",
            "wilcoxon",
            "--bind",
            "group=arm",
            "--bind",
            "value=score",
            "--format",
            "text",
            "--output",
            str(output),
        ]
    )

    assert code == 0
    assert "Wilcoxon rank-sum test" in output.read_text(encoding="utf-8")


def test_run_validation_failure_exits_with_status_one(tmp_path, capsys) -> None:
    path = _write_scores(tmp_path)

    code = main(["run", str(path), "--test", "anova", "--bind", "group=arm", "--bind", "value=score"])
    payload = json.loads(capsys.readouterr().out)

    assert code == 1
    assert payload["kind"] == "validation"
    assert payload["validation"]["code"] == "level_count_min"


def test_missing_input_file_is_reported(tmp_path, capsys) -> None:
    code = main(["classify", str(tmp_path / "absent.csv")])
    payload = json.loads(capsys.readouterr().out)

    assert code == 1
    assert payload["kind"] == "input"


def test_tests_command_lists_catalog(capsys) -> None:
    assert main(["tests"]) == 0
    payload = json.loads(capsys.readouterr().out)

    assert len(payload) == 12
    assert payload[0]["id"] == "chi_square"
    assert [role["name"] for role in payload[0]["roles"]] == ["row", "column"]


def test_bad_settings_file_is_reported_as_input_failure(tmp_path, capsys) -> None:
    path = _write_scores(tmp_path)
    config = tmp_path / "settings.yaml"
    config.write_text("alpah: 0.01\n", encoding="utf-8")

    code = main(["classify", str(path), "--config", str(config)])
    payload = json.loads(capsys.readouterr().out)

    assert code == 1
    assert payload["kind"] == "input"
    assert "alpah" in payload["message"]
