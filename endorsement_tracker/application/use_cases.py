"""Application services orchestrating the tracker workflows."""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime

from endorsement_tracker.application.dto import IngestResult, TrackerSession
from endorsement_tracker.config import SETTINGS
from endorsement_tracker.domain import rollup
from endorsement_tracker.domain.history import CONFLICT_EXISTS, CONFLICT_NONE, build_snapshot, week_year, snapshot_key
from endorsement_tracker.domain.models import WeeklySnapshot
from endorsement_tracker.domain.repositories import CaseRepository, WeeklyWorkbookRepository
from endorsement_tracker.domain.results import ReportModel, assemble_report
from endorsement_tracker.domain.services import CaseAggregator
from endorsement_tracker.domain.weekly import blank_week, compute_totals, current_week_number
from endorsement_tracker.errors import DuplicateHistoryKey

logger = logging.getLogger(__name__)


class IngestCaseFileUseCase:
    """Replace the session's case records with a fresh upload.

    The file is parsed completely before anything on the session changes, so
    a ``ParseFailed`` leaves the previous records and summaries in place.
    """

    def __init__(self, session: TrackerSession, aggregator: CaseAggregator | None = None) -> None:
        self._session = session
        self._aggregator = aggregator or CaseAggregator()

    def execute(self, repository: CaseRepository, today: date | None = None) -> IngestResult:
        today = today or date.today()
        records = tuple(repository.list_case_records())
        outstanding = tuple(self._aggregator.outstanding_by_month(records))
        next_expiring = self._aggregator.next_expiring(records, today)

        self._session.case_records = records
        self._session.outstanding = outstanding
        self._session.next_expiring = next_expiring
        self._session.touch()
        return IngestResult(
            records=len(records),
            dated=sum(1 for record in records if record.sra_expiry is not None),
            outstanding=outstanding,
            next_expiring=next_expiring,
        )


class ImportWeeklyWorkbookUseCase:
    """Load the five weekdays' counters from a weekly workbook; notes are kept."""

    def __init__(self, session: TrackerSession) -> None:
        self._session = session

    def execute(self, repository: WeeklyWorkbookRepository, today: date | None = None) -> None:
        imported = repository.load_week()
        week_number = imported.week_number or current_week_number(today)
        self._session.weekly_data = replace(
            self._session.weekly_data,
            week_number=week_number,
            days=dict(imported.days),
        )
        self._session.touch()
        logger.info("Imported weekly workbook for week %d", week_number)


class SaveWeekToHistoryUseCase:
    """Finalize the current week into the snapshot ledger.

    Callers first ask ``check_conflict``; an existing key is only replaced
    when ``confirm_overwrite`` is set, otherwise ``DuplicateHistoryKey`` is
    raised and nothing is written.
    """

    def __init__(self, session: TrackerSession) -> None:
        self._session = session

    def key_for(self, explicit_month: tuple[int, int] | None = None, today: date | None = None) -> str:
        week_number = self._session.weekly_data.week_number
        return snapshot_key(week_year(week_number, today), week_number, explicit_month)

    def check_conflict(self, explicit_month: tuple[int, int] | None = None, today: date | None = None) -> str:
        return self._session.history.check_conflict(self.key_for(explicit_month, today))

    def execute(
        self,
        explicit_month: tuple[int, int] | None = None,
        confirm_overwrite: bool = False,
        today: date | None = None,
        now: datetime | None = None,
        endorsements: int | None = None,
        seafarers: int | None = None,
        certificates: int | None = None,
    ) -> tuple[str, WeeklySnapshot]:
        weekly = self._session.weekly_data
        key, snapshot = build_snapshot(
            weekly.week_number,
            compute_totals(weekly),
            explicit_month=explicit_month,
            today=today,
            saved_at=now,
            endorsements=endorsements,
            seafarers=seafarers,
            certificates=certificates,
        )
        if self._session.history.check_conflict(key) == CONFLICT_EXISTS:
            if not confirm_overwrite:
                raise DuplicateHistoryKey(key)
            logger.info("Overwriting saved week %s", key)
        self._session.history.put(key, snapshot)
        self._session.touch(now)
        return key, snapshot


class DeleteWeekFromHistoryUseCase:
    def __init__(self, session: TrackerSession) -> None:
        self._session = session

    def execute(self, key: str) -> None:
        self._session.history.delete(key)
        self._session.touch()


class ResetWeekUseCase:
    """Start a new week: blank crewboard, cleared case summaries, history kept."""

    def __init__(self, session: TrackerSession) -> None:
        self._session = session

    def check_conflict(self) -> str:
        return CONFLICT_NONE if self._session.weekly_data.is_blank() else CONFLICT_EXISTS

    def execute(self, confirm_discard: bool = False, today: date | None = None) -> bool:
        if self.check_conflict() == CONFLICT_EXISTS and not confirm_discard:
            logger.info("Week reset not confirmed; current week kept")
            return False
        self._session.weekly_data = blank_week(today=today)
        self._session.case_records = ()
        self._session.outstanding = None
        self._session.next_expiring = None
        self._session.touch()
        return True


class BuildReportUseCase:
    def __init__(self, session: TrackerSession, history_weeks: int | None = None) -> None:
        self._session = session
        self._history_weeks = SETTINGS.report_history_weeks if history_weeks is None else history_weeks

    def execute(self, today: date | None = None) -> ReportModel:
        today = today or date.today()
        weekly = self._session.weekly_data
        snapshots = self._session.history.snapshots()

        current = (week_year(weekly.week_number, today), weekly.week_number)
        previous = [week for week in rollup.weekly_totals(snapshots) if (week.year, week.week_number) != current]
        previous = previous[-self._history_weeks:] if self._history_weeks else []

        monthly = rollup.with_baseline(rollup.compute(snapshots), self._session.monthly_baseline)
        return assemble_report(
            report_date=today,
            week_number=weekly.week_number,
            totals=compute_totals(weekly),
            previous_weeks=previous,
            note_templates=self._session.report_notes,
            next_expiring=self._session.next_expiring,
            outstanding=self._session.outstanding,
            monthly=rollup.rows(monthly),
        )
