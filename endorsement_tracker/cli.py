"""Command-line entrypoint for the endorsement tracker."""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from endorsement_tracker.application.dto import TrackerSession
from endorsement_tracker.application.use_cases import (
    BuildReportUseCase,
    DeleteWeekFromHistoryUseCase,
    ImportWeeklyWorkbookUseCase,
    IngestCaseFileUseCase,
    SaveWeekToHistoryUseCase,
)
from endorsement_tracker.config import SETTINGS
from endorsement_tracker.domain import rollup
from endorsement_tracker.domain.history import CONFLICT_NONE
from endorsement_tracker.errors import DuplicateHistoryKey, ParseFailed
from endorsement_tracker.infrastructure.repositories.excel_repositories import (
    CaseFileRepository,
    WeeklyExcelRepository,
)
from endorsement_tracker.infrastructure.storage.state_store import JsonFileStateRepository
from endorsement_tracker.presentation.report_html import render_html
from endorsement_tracker.presentation.weekly_workbook import build_weekly_workbook, workbook_filename

logger = logging.getLogger("endorsement_tracker")


def _month(value: str) -> tuple[int, int]:
    try:
        year, month = value.split("-")
        return int(year), int(month)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected YYYY-MM, got {value!r}") from exc


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Weekly endorsement workload tracker")
    parser.add_argument("--state", type=Path, default=SETTINGS.state_path, help="Path to the state JSON file")
    parser.add_argument("--today", type=date.fromisoformat, help="Override today's date (YYYY-MM-DD)")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    sub = parser.add_subparsers(dest="command", required=True)

    report = sub.add_parser("report", help="Generate the printable HTML report")
    report.add_argument("--cases", type=Path, help="Case file (CSV or Excel)")
    report.add_argument("--week", type=Path, help="Weekly crewboard workbook")
    report.add_argument("--output", type=Path, help="Where to write the HTML (default: report dir)")

    export = sub.add_parser("export-week", help="Write the current week as a crewboard workbook")
    export.add_argument("--output", type=Path, help="Target .xlsx path")

    save = sub.add_parser("save-week", help="Save the current week to history")
    save.add_argument("--week", type=Path, help="Import this weekly workbook first")
    save.add_argument("--month", type=_month, help="Book the week against this month (YYYY-MM)")
    save.add_argument("--endorsements", type=int)
    save.add_argument("--certificates", type=int)
    save.add_argument("--yes", action="store_true", help="Overwrite an existing entry without asking")

    history = sub.add_parser("history", help="Show saved weeks and the monthly rollup")
    history.add_argument("--delete", metavar="KEY", help="Delete a saved week")
    return parser.parse_args(argv)


def _configure_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")


def _load_session(repo: JsonFileStateRepository, today: date | None) -> TrackerSession:
    state = repo.load()
    return TrackerSession.from_state(state) if state else TrackerSession.new(today)


def _confirm(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _cmd_report(args: argparse.Namespace, session: TrackerSession, today: date) -> int:
    if args.cases:
        result = IngestCaseFileUseCase(session).execute(CaseFileRepository(args.cases), today=today)
        print(f"Case records: {result.records} ({result.dated} with an SRA expiry date)")
    if args.week:
        ImportWeeklyWorkbookUseCase(session).execute(WeeklyExcelRepository(args.week), today=today)
    report = BuildReportUseCase(session).execute(today=today)
    output = args.output or SETTINGS.report_dir / f"{report.title.replace(' ', '_')}.html"
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(render_html(report), encoding="utf-8")
    if report.totals.malformed:
        print(f"Malformed counters (counted as 0): {', '.join(report.totals.malformed)}")
    print(f"Report written to {output}")
    return 0


def _cmd_export(args: argparse.Namespace, session: TrackerSession) -> int:
    output = args.output or Path(workbook_filename(session.weekly_data))
    output.write_bytes(build_weekly_workbook(session.weekly_data))
    print(f"Workbook written to {output}")
    return 0


def _cmd_save(args: argparse.Namespace, session: TrackerSession, today: date) -> int:
    if args.week:
        ImportWeeklyWorkbookUseCase(session).execute(WeeklyExcelRepository(args.week), today=today)
    use_case = SaveWeekToHistoryUseCase(session)
    confirm = args.yes
    key = use_case.key_for(args.month, today)
    if use_case.check_conflict(args.month, today) != CONFLICT_NONE and not confirm:
        confirm = _confirm(f"Week {key} is already saved. Overwrite?")
    try:
        key, snapshot = use_case.execute(
            explicit_month=args.month,
            confirm_overwrite=confirm,
            today=today,
            endorsements=args.endorsements,
            certificates=args.certificates,
        )
    except DuplicateHistoryKey as exc:
        print(f"{exc}; nothing saved.")
        return 1
    print(f"Saved {key}: {snapshot.endorsements} endorsements, {snapshot.certificates} certificates")
    return 0


def _cmd_history(args: argparse.Namespace, session: TrackerSession) -> int:
    if args.delete:
        DeleteWeekFromHistoryUseCase(session).execute(args.delete)
        print(f"Deleted {args.delete}")
    for key, snap in session.history.items():
        print(f"{key}: endorsements={snap.endorsements} certificates={snap.certificates} month={snap.period}")
    print("\nMonthly rollup")
    print("==============")
    for row in rollup.rows(rollup.compute(session.history.snapshots())):
        print(
            f"{row.label}: endorsements={row.endorsements} certificates={row.certificates} "
            f"rate={row.processing_rate}% net={row.net_flow}"
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    _configure_logging(args.verbose)
    today = args.today or date.today()

    repo = JsonFileStateRepository(args.state)
    session = _load_session(repo, today)
    try:
        if args.command == "report":
            code = _cmd_report(args, session, today)
        elif args.command == "export-week":
            code = _cmd_export(args, session)
        elif args.command == "save-week":
            code = _cmd_save(args, session, today)
        else:
            code = _cmd_history(args, session)
    except ParseFailed as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    repo.save(session.to_state())
    logger.info("State saved to %s", repo.path)
    return code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
