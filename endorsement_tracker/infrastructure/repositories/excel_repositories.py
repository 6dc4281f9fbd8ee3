"""Upload-backed repositories for case files and weekly workbooks."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Sequence

from endorsement_tracker.domain.models import CaseRecord
from endorsement_tracker.domain.repositories import (
    CaseRepository,
    WeeklyImport,
    WeeklyWorkbookRepository,
)
from endorsement_tracker.infrastructure.parsing.cases import case_file_to_records
from endorsement_tracker.infrastructure.parsing.utils import ensure_bytes, kind_from_filename
from endorsement_tracker.infrastructure.parsing.weekly import weekly_workbook_to_import


def _source_name(source: BytesIO | Path | bytes, filename: str | None) -> str | None:
    if filename:
        return filename
    if isinstance(source, Path):
        return source.name
    return None


class CaseFileRepository(CaseRepository):
    def __init__(
        self,
        source: BytesIO | Path | bytes,
        filename: str | None = None,
        kind: str | None = None,
    ) -> None:
        self._source = ensure_bytes(source)
        self._filename = _source_name(source, filename)
        self._kind = kind or kind_from_filename(self._filename)

    def list_case_records(self) -> Sequence[CaseRecord]:
        return case_file_to_records(self._source, self._kind, self._filename or "case file")


class WeeklyExcelRepository(WeeklyWorkbookRepository):
    def __init__(self, source: BytesIO | Path | bytes, filename: str | None = None) -> None:
        self._source = ensure_bytes(source)
        self._filename = _source_name(source, filename)

    def load_week(self) -> WeeklyImport:
        return weekly_workbook_to_import(self._source, self._filename or "weekly workbook")
