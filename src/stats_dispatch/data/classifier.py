from __future__ import annotations

from typing import Any

import pandas as pd

from stats_dispatch.config.settings import AnalyzerSettings
from stats_dispatch.core.models import Variable, VariableKind


class VariableClassifier:
    """Label each dataset column as categorical or numeric.

    A column is categorical when its values are not numeric or when it holds
    at most ``max_categorical_levels`` distinct values, so small integer codes
    and Likert scales are treated as factors.
    """

    def __init__(self, settings: AnalyzerSettings | None = None) -> None:
        self.settings = settings or AnalyzerSettings()

    def classify(self, dataset: Any) -> dict[str, Variable]:
        return {str(column): self.classify_column(str(column), dataset[column]) for column in dataset.columns}

    def classify_column(self, name: str, series: Any) -> Variable:
        present = series.dropna()
        distinct_count = int(present.nunique())
        if self.is_numeric(series) and distinct_count > self.settings.max_categorical_levels:
            kind = VariableKind.NUMERIC
        else:
            kind = VariableKind.CATEGORICAL

        values = tuple(None if pd.isna(value) else value for value in series.tolist())
        return Variable(
            name=name,
            kind=kind,
            distinct_count=distinct_count,
            values=values,
            missing_count=int(series.isna().sum()),
        )

    def is_numeric(self, series: Any) -> bool:
        if pd.api.types.is_bool_dtype(series):
            return False
        if pd.api.types.is_numeric_dtype(series):
            return True
        present = series.dropna()
        if present.empty or present.map(lambda value: isinstance(value, bool)).any():
            return False
        return bool(pd.to_numeric(present, errors="coerce").notna().all())

