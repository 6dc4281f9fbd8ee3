"""Case file parser (CSV or workbook) producing canonical case records."""
from __future__ import annotations

import logging
from io import BytesIO
from typing import Mapping, Sequence

import pandas as pd

from endorsement_tracker.domain.models import CaseRecord, CertificateRef
from endorsement_tracker.errors import ParseFailed
from endorsement_tracker.infrastructure.parsing.dates import normalize_date
from endorsement_tracker.infrastructure.parsing.utils import (
    KIND_CSV,
    KIND_EXCEL,
    cell_text,
    read_first_sheet,
)

logger = logging.getLogger(__name__)

# Candidate headers per field, matched case-insensitively in this order.
KNOWN_SRA_EXPIRY_COLUMNS = ["SRA Expiry date", "SRA Expiry Date", "SRA Expiry", "SRA Exp. Date"]
KNOWN_PAID_COLUMNS = ["Case paid to BMAR", "Paid to BMAR", "Case Paid"]
KNOWN_SHIP_COLUMNS = ["Ship", "Ship Name", "Vessel"]
KNOWN_NAME_COLUMNS = ["Name", "Seafarer", "Seafarer Name"]
KNOWN_INVOICE_COLUMNS = ["Invoice Address", "Company"]

KNOWN_CERTIFICATE_COLUMNS = {
    "COC": ["COC Number", "COC No", "COC"],
    "GOC": ["GOC Number", "GOC No", "GOC"],
    "COP-1": ["COP - 1 Number", "COP-1 Number", "COP 1 Number"],
    "COP-2": ["COP - 2 Number", "COP-2 Number", "COP 2 Number"],
}

UNPAID_MARKERS = {"no", "n", "false", "0", "unpaid"}

CSV_ENCODINGS = ("utf-8-sig", "cp1252")


def _read_csv(data: bytes, source_name: str) -> pd.DataFrame:
    last_error: Exception | None = None
    for encoding in CSV_ENCODINGS:
        try:
            return pd.read_csv(
                BytesIO(data),
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                # rows with a trailing delimiter must not shift into the index
                index_col=False,
                encoding=encoding,
            )
        except pd.errors.EmptyDataError:
            return pd.DataFrame()
        except UnicodeDecodeError as exc:
            last_error = exc
            continue
        except (pd.errors.ParserError, ValueError) as exc:
            raise ParseFailed(source_name, str(exc)) from exc
    raise ParseFailed(source_name, f"unsupported text encoding ({last_error})")


def read_case_frame(data: bytes, kind: str, source_name: str = "case file") -> pd.DataFrame:
    if kind == KIND_CSV:
        frame = _read_csv(data, source_name)
    elif kind == KIND_EXCEL:
        frame = read_first_sheet(data, source_name, dtype=str, keep_default_na=False)
    else:
        raise ValueError(f"Unsupported case file kind: {kind!r}")
    frame.columns = [str(column).strip() for column in frame.columns]
    return frame.fillna("")


def parse_rows(data: bytes, kind: str, source_name: str = "case file") -> list[dict[str, str]]:
    """Rows keyed by header name; every header is present in every row.

    Fully blank rows are dropped. A file with a header and no data yields an
    empty list.
    """
    frame = read_case_frame(data, kind, source_name)
    headers = list(frame.columns)
    rows: list[dict[str, str]] = []
    for values in frame.itertuples(index=False, name=None):
        row = {header: cell_text(value) for header, value in zip(headers, values)}
        if any(row.values()):
            rows.append(row)
    return rows


def resolve_column(headers: Sequence[str], candidates: Sequence[str]) -> str | None:
    lower_map: dict[str, str] = {}
    for header in headers:
        lower_map.setdefault(header.strip().casefold(), header)
    for candidate in candidates:
        match = lower_map.get(candidate.casefold())
        if match is not None:
            return match
    return None


def _is_paid(value: str) -> bool:
    value = value.strip()
    return bool(value) and value.casefold() not in UNPAID_MARKERS


def rows_to_case_records(rows: Sequence[Mapping[str, str]]) -> list[CaseRecord]:
    if not rows:
        return []
    headers = list(rows[0].keys())
    expiry_col = resolve_column(headers, KNOWN_SRA_EXPIRY_COLUMNS)
    paid_col = resolve_column(headers, KNOWN_PAID_COLUMNS)
    ship_col = resolve_column(headers, KNOWN_SHIP_COLUMNS)
    name_col = resolve_column(headers, KNOWN_NAME_COLUMNS)
    invoice_col = resolve_column(headers, KNOWN_INVOICE_COLUMNS)
    certificate_cols = [
        (kind, resolve_column(headers, candidates))
        for kind, candidates in KNOWN_CERTIFICATE_COLUMNS.items()
    ]
    if expiry_col is None:
        logger.warning("No SRA expiry column among headers %s", headers)

    def get(row: Mapping[str, str], column: str | None) -> str:
        return (row.get(column) or "").strip() if column else ""

    records: list[CaseRecord] = []
    unparseable = 0
    for row in rows:
        raw_expiry = get(row, expiry_col)
        expiry = normalize_date(raw_expiry)
        if raw_expiry and expiry is None:
            unparseable += 1
        refs = tuple(
            CertificateRef(kind=kind, value=get(row, column))
            for kind, column in certificate_cols
            if get(row, column)
        )
        records.append(
            CaseRecord(
                sra_expiry=expiry,
                certificate_refs=refs,
                paid=_is_paid(get(row, paid_col)),
                ship=get(row, ship_col),
                name=get(row, name_col),
                invoice_address=get(row, invoice_col),
            )
        )
    if unparseable:
        logger.info("Skipped %d unparseable SRA expiry dates", unparseable)
    return records


def case_file_to_records(data: bytes, kind: str, source_name: str = "case file") -> list[CaseRecord]:
    rows = parse_rows(data, kind, source_name)
    records = rows_to_case_records(rows)
    logger.info("Parsed %d case records from %s", len(records), source_name)
    return records
