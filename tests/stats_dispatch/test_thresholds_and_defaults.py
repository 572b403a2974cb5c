from __future__ import annotations

import pandas as pd
import pytest

from stats_dispatch.config.settings import AnalyzerSettings
from stats_dispatch.core.catalog import (
    ALPHA,
    KS_MIN_RECOMMENDED_N,
    MAX_CATEGORICAL_LEVELS,
    SHAPIRO_MAX_N,
    get_spec,
    list_specs,
)
from stats_dispatch.core.errors import InputError
from stats_dispatch.core.models import TestId
from stats_dispatch.data.loader import DataLoader
from stats_dispatch.reporting.template_engine import DEFAULT_TEMPLATE, load_template, merge_template


def test_fixed_thresholds() -> None:
    assert ALPHA == 0.05
    assert MAX_CATEGORICAL_LEVELS == 10
    assert SHAPIRO_MAX_N == 5000
    assert KS_MIN_RECOMMENDED_N == 50

    settings = AnalyzerSettings()
    assert settings.alpha == ALPHA
    assert settings.max_categorical_levels == MAX_CATEGORICAL_LEVELS


def test_settings_from_yaml(tmp_path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("alpha: 0.01\nmax_categorical_levels: 5\n", encoding="utf-8")

    settings = AnalyzerSettings.from_yaml(path)

    assert settings.alpha == 0.01
    assert settings.max_categorical_levels == 5
    assert settings.shapiro_max_n == SHAPIRO_MAX_N


def test_settings_missing_file_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        AnalyzerSettings.from_yaml(tmp_path / "absent.yaml")


def test_settings_reject_unknown_keys_and_non_mappings(tmp_path) -> None:
    typo = tmp_path / "typo.yaml"
    typo.write_text("alpah: 0.01\n", encoding="utf-8")
    listing = tmp_path / "listing.yaml"
    listing.write_text("- 0.01\n- 5\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Unknown settings in typo.yaml: alpah"):
        AnalyzerSettings.from_yaml(typo)
    with pytest.raises(ValueError, match="must contain a mapping"):
        AnalyzerSettings.from_yaml(listing)


def test_catalog_lookup_by_id_and_name() -> None:
    assert len(list_specs()) == len(TestId)
    assert get_spec("t-test").test_id == TestId.T_TEST
    assert get_spec("One-way ANOVA").test_id == TestId.ANOVA
    assert get_spec(TestId.MCNEMAR).square_dichotomous is True
    with pytest.raises(KeyError, match="Available"):
        get_spec("kruskal")


def test_template_merge_keeps_defaults(tmp_path) -> None:
    path = tmp_path / "template.yaml"
    path.write_text("decimals: 2\nsections:\n  posthoc: Pairwise\n", encoding="utf-8")

    template = load_template(path)

    assert template["decimals"] == 2
    assert template["sections"]["posthoc"] == "Pairwise"
    assert template["sections"]["header"] == DEFAULT_TEMPLATE["sections"]["header"]
    assert DEFAULT_TEMPLATE["sections"]["posthoc"] != "Pairwise"


def test_template_merge_copies_nested_sections() -> None:
    merged = merge_template(DEFAULT_TEMPLATE, {"rule": "-"})
    merged["sections"]["header"] = "Changed"

    assert merged["rule"] == "-"
    assert DEFAULT_TEMPLATE["sections"]["header"] == "Analysis"
    assert load_template(None) == DEFAULT_TEMPLATE


def test_template_rejects_unknown_keys(tmp_path) -> None:
    path = tmp_path / "template.yaml"
    path.write_text("colour: blue\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Unknown template keys in template.yaml: colour"):
        load_template(path)


def test_loader_honours_delimiter_and_encoding(tmp_path) -> None:
    path = tmp_path / "data.csv"
    path.write_bytes("ville;valeur\nMontréal;1\nQuébec;2\n".encode("latin-1"))

    frame = DataLoader().load(path, delimiter=";", encoding="latin-1")

    assert list(frame.columns) == ["ville", "valeur"]
    assert frame["ville"].tolist() == ["Montréal", "Québec"]


def test_loader_reads_tsv_with_tab_default(tmp_path) -> None:
    path = tmp_path / "data.tsv"
    path.write_text("a\tb\n1\t2\n", encoding="utf-8")

    frame = DataLoader().load(path)

    assert list(frame.columns) == ["a", "b"]


def test_loader_drops_all_missing_columns(tmp_path) -> None:
    path = tmp_path / "data.csv"
    path.write_text("a,empty\n1,\n2,\n", encoding="utf-8")

    frame = DataLoader().load(path)

    assert list(frame.columns) == ["a"]


def test_loader_rejects_bad_inputs(tmp_path) -> None:
    unsupported = tmp_path / "data.json"
    unsupported.write_text("{}", encoding="utf-8")

    with pytest.raises(InputError, match="not found"):
        DataLoader().load(tmp_path / "absent.csv")
    with pytest.raises(InputError, match="Unsupported"):
        DataLoader().load(unsupported)
    with pytest.raises(InputError, match="no usable columns"):
        DataLoader().clean(pd.DataFrame({"empty": [None, None]}))


def test_loader_wraps_reader_failures(tmp_path) -> None:
    text = tmp_path / "data.csv"
    text.write_text("a,b\n1,2\n", encoding="utf-8")
    workbook = tmp_path / "data.xlsx"
    workbook.write_bytes(b"this is not a spreadsheet")

    with pytest.raises(InputError, match="Could not read data.csv"):
        DataLoader().load(text, encoding="no-such-codec")
    with pytest.raises(InputError, match="Could not read data.xlsx"):
        DataLoader().load(workbook)
