"""Shared parsing utilities for spreadsheet and CSV ingestion."""
from __future__ import annotations

import re
from io import BytesIO
from pathlib import Path

import pandas as pd

from endorsement_tracker.errors import ParseFailed

KIND_CSV = "csv"
KIND_EXCEL = "excel"

_EXTENSION_KINDS = {
    ".csv": KIND_CSV,
    ".txt": KIND_CSV,
    ".xlsx": KIND_EXCEL,
    ".xlsm": KIND_EXCEL,
    ".xls": KIND_EXCEL,
}

_OLE_MAGIC = b"\xd0\xcf\x11\xe0"
_LEADING_INT = re.compile(r"^\s*(-?\d+)")


def ensure_bytes(source: BytesIO | Path | bytes) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, BytesIO):
        return source.getvalue()
    if isinstance(source, Path):
        return source.read_bytes()
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def kind_from_filename(filename: str | None, default: str = KIND_CSV) -> str:
    if not filename:
        return default
    return _EXTENSION_KINDS.get(Path(filename).suffix.lower(), default)


def cell_text(value: object) -> str:
    if value is None:
        return ""
    s = str(value).strip()
    if s.upper() in {"NAN", "NAT", "NONE"}:
        return ""
    return s


def parse_int_cell(value: object, default: int = 0) -> int:
    """Lenient integer read for spreadsheet cells (``"3"``, ``"3.0"``, ``"3 fixes"``)."""
    s = cell_text(value)
    if not s:
        return default
    try:
        return int(float(s))
    except (ValueError, OverflowError):
        match = _LEADING_INT.match(s)
        return int(match.group(1)) if match else default


def _engines_for(data: bytes) -> list[str]:
    # Legacy .xls files are OLE containers; everything else goes to openpyxl first.
    if data[:4] == _OLE_MAGIC:
        return ["xlrd", "openpyxl"]
    return ["openpyxl", "xlrd"]


def read_first_sheet(data: bytes, source_name: str, **kwargs) -> pd.DataFrame:
    """Read the first worksheet, trying each Excel engine in turn."""
    if not data:
        raise ParseFailed(source_name, "file is empty")
    last_error: Exception | None = None
    for engine in _engines_for(data):
        try:
            return pd.read_excel(BytesIO(data), sheet_name=0, engine=engine, **kwargs)
        except Exception as exc:  # each engine fails differently on foreign formats
            last_error = exc
            continue
    raise ParseFailed(source_name, f"not a readable workbook ({last_error})")
