"""Domain services deriving summaries from uploaded case records."""
from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Sequence

from .models import CaseRecord, NextExpiring, OutstandingEntry, month_label


class CaseAggregator:
    """Derives outstanding-by-month counts and the next expiring case."""

    def outstanding_by_month(self, records: Sequence[CaseRecord]) -> list[OutstandingEntry]:
        # Counted per certificate reference, not per record.
        counts: dict[tuple[int, int], list[int]] = defaultdict(lambda: [0, 0])
        for record in records:
            if record.sra_expiry is None:
                continue
            bucket = counts[(record.sra_expiry.year, record.sra_expiry.month)]
            for _ref in record.certificate_refs:
                bucket[0] += 1
                if record.paid:
                    bucket[1] += 1

        return [
            OutstandingEntry(month=month_label(year, month), all_cases=all_cases, can_be_issued=can_be_issued)
            for (year, month), (all_cases, can_be_issued) in sorted(counts.items())
            if all_cases > 0
        ]

    def next_expiring(self, records: Sequence[CaseRecord], today: date) -> NextExpiring | None:
        best: CaseRecord | None = None
        for record in records:
            expiry = record.sra_expiry
            if expiry is None or expiry <= today:
                continue
            if best is None or expiry < best.sra_expiry:
                best = record
        if best is None:
            return None
        return NextExpiring(
            date=best.sra_expiry.isoformat(),
            ship=best.ship,
            name=best.name,
            company=best.invoice_address or "-",
        )
