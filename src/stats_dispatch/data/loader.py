from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Any

from stats_dispatch.config.settings import AnalyzerSettings
from stats_dispatch.core.errors import InputError

log = logging.getLogger(__name__)

TEXT_SUFFIXES = {".csv", ".tsv", ".txt"}


class DataLoader:
    """Read tabular datasets from disk."""

    def __init__(self, settings: AnalyzerSettings | None = None) -> None:
        self.settings = settings or AnalyzerSettings()

    def load(
        self,
        path: Path,
        delimiter: str | None = None,
        encoding: str | None = None,
    ) -> Any:
        import pandas as pd

        if not path.exists():
            raise InputError(f"Input dataset not found: {path}")

        suffix = path.suffix.lower()
        try:
            if suffix in TEXT_SUFFIXES:
                if delimiter is None:
                    delimiter = "\t" if suffix == ".tsv" else self.settings.default_delimiter
                frame = pd.read_csv(
                    path,
                    sep=delimiter,
                    encoding=encoding or self.settings.default_encoding,
                )
            elif suffix in {".parquet", ".pq"}:
                frame = pd.read_parquet(path)
            elif suffix in {".xlsx", ".xls"}:
                frame = pd.read_excel(path)
            else:
                raise InputError(f"Unsupported dataset extension: {suffix}")
        except (LookupError, ValueError, OSError, ImportError, zipfile.BadZipFile) as exc:
            raise InputError(f"Could not read {path.name}: {exc}") from exc

        return self.clean(frame)

    def clean(self, frame: Any) -> Any:
        empty_columns = [column for column in frame.columns if frame[column].isna().all()]
        if empty_columns:
            log.info("Dropping all-missing columns: %s", ", ".join(map(str, empty_columns)))
            frame = frame.drop(columns=empty_columns)
        if frame.shape[1] == 0:
            raise InputError("Dataset has no usable columns.")
        frame.columns = [str(column) for column in frame.columns]
        return frame
