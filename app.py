"""Streamlit front-end for the endorsement tracker."""
from __future__ import annotations

from dataclasses import replace
from datetime import date
from io import BytesIO

import pandas as pd
import streamlit as st

from endorsement_tracker import (
    BuildReportUseCase,
    CaseFileRepository,
    ImportWeeklyWorkbookUseCase,
    IngestCaseFileUseCase,
    ResetWeekUseCase,
    SaveWeekToHistoryUseCase,
    TrackerSession,
    WeeklyExcelRepository,
)
from endorsement_tracker.application.use_cases import DeleteWeekFromHistoryUseCase
from endorsement_tracker.config import SETTINGS
from endorsement_tracker.domain import rollup
from endorsement_tracker.domain.history import CONFLICT_EXISTS
from endorsement_tracker.domain.models import DAILY_FIELD_LABELS, WEEKDAYS, pair_or_zero
from endorsement_tracker.domain.weekly import (
    add_correction_note,
    compute_totals,
    delete_correction_note,
    toggle_correction_note,
    update_day,
)
from endorsement_tracker.errors import DuplicateHistoryKey, ParseFailed
from endorsement_tracker.infrastructure.parsing.utils import parse_int_cell
from endorsement_tracker.infrastructure.storage.state_store import (
    JsonFileStateRepository,
    SharedFolderStateRepository,
)
from endorsement_tracker.infrastructure.storage.sync import SyncedStateStore
from endorsement_tracker.presentation.report_html import render_html
from endorsement_tracker.presentation.weekly_workbook import build_weekly_workbook, workbook_filename


st.set_page_config(page_title="Seafarers Status Dashboard", layout="wide")
st.title("Seafarers Status Dashboard")


def build_store() -> SyncedStateStore:
    local = JsonFileStateRepository(SETTINGS.state_path)
    if SETTINGS.shared_state_path is None:
        return SyncedStateStore(remote=local, local=local)
    return SyncedStateStore(remote=SharedFolderStateRepository(SETTINGS.shared_state_path), local=local)


if "store" not in st.session_state:
    st.session_state["store"] = build_store()
if "session" not in st.session_state:
    state = st.session_state["store"].load()
    st.session_state["session"] = TrackerSession.from_state(state) if state else TrackerSession.new()

store: SyncedStateStore = st.session_state["store"]
session: TrackerSession = st.session_state["session"]


def persist() -> None:
    session.touch()
    store.schedule_save(session.to_state())


if store.degraded:
    st.warning("Shared store unreachable - working from the local cache.")
if session.updated_at:
    st.caption(f"Saved: {session.updated_at:%H:%M:%S}")

tabs = st.tabs(["Dashboard", "Crewboard", "History"])

with tabs[0]:
    col1, col2 = st.columns(2)
    with col1:
        case_file = st.file_uploader("Upload case file", type=["csv", "xlsx", "xls"])
        if case_file is not None and st.button("Load case file"):
            try:
                result = IngestCaseFileUseCase(session).execute(
                    CaseFileRepository(BytesIO(case_file.getvalue()), filename=case_file.name)
                )
            except ParseFailed as exc:
                st.error(str(exc))
            else:
                st.success(f"{result.records} records loaded")
                persist()
    with col2:
        week_file = st.file_uploader("Upload weekly workbook", type=["xlsx", "xls"])
        if week_file is not None and st.button("Load weekly workbook"):
            try:
                ImportWeeklyWorkbookUseCase(session).execute(
                    WeeklyExcelRepository(BytesIO(week_file.getvalue()), filename=week_file.name)
                )
            except ParseFailed as exc:
                st.error(str(exc))
            else:
                persist()

    totals = compute_totals(session.weekly_data)
    metric_cols = st.columns(4)
    metric_cols[0].metric(f"Week {session.weekly_data.week_number} Endorsements", totals.per_endorsement)
    metric_cols[1].metric("Applications", totals.app_seafarer)
    metric_cols[2].metric("Certificates", totals.app_cert)
    outstanding_total = sum(entry.all_cases for entry in session.outstanding) if session.outstanding else "-"
    metric_cols[3].metric("Outstanding", outstanding_total)
    if totals.malformed:
        st.warning(f"Unreadable counters (shown as 0): {', '.join(totals.malformed)}")

    if session.next_expiring:
        st.subheader("Next SRA Expiring")
        st.table(pd.DataFrame([vars(session.next_expiring)]))
    if session.outstanding:
        st.subheader("Outstanding End")
        st.dataframe(pd.DataFrame([vars(entry) for entry in session.outstanding]), hide_index=True)

    with st.expander("Report notes"):
        notes_text = st.text_area("One note per line", "\n".join(session.report_notes))
        if st.button("Save notes"):
            session.report_notes = tuple(line for line in notes_text.splitlines() if line.strip())
            persist()

    report = BuildReportUseCase(session).execute()
    st.download_button(
        "Generate Weekly Report",
        data=render_html(report).encode("utf-8"),
        file_name=f"{report.title}.html",
        mime="text/html",
    )

with tabs[1]:
    weekly = session.weekly_data
    week_number = st.number_input("Week Number", min_value=1, max_value=53, value=weekly.week_number)
    if week_number != weekly.week_number:
        session.weekly_data = weekly = replace(weekly, week_number=int(week_number))
        persist()

    grid = pd.DataFrame(
        {day.capitalize(): [getattr(weekly.days[day], name) for name in DAILY_FIELD_LABELS] for day in WEEKDAYS},
        index=list(DAILY_FIELD_LABELS.values()),
    ).astype(str)
    edited = st.data_editor(grid, key="crewboard_editor", use_container_width=True)
    if st.button("Apply changes"):
        updated = session.weekly_data
        for day in WEEKDAYS:
            for name, label in DAILY_FIELD_LABELS.items():
                value = edited.loc[label, day.capitalize()]
                if name == "corrections":
                    value = parse_int_cell(value)
                updated = update_day(updated, day, name, value)
        session.weekly_data = updated
        persist()
        st.rerun()

    totals = compute_totals(session.weekly_data)
    total_cols = st.columns(4)
    total_cols[0].metric("Per Seafarer", totals.per_seafarer)
    total_cols[1].metric("Per Endorsement", totals.per_endorsement)
    total_cols[2].metric("Applications", totals.app_seafarer)
    total_cols[3].metric("Certificates", totals.app_cert)
    daily = pd.DataFrame(
        {
            "endorsements": [pair_or_zero(session.weekly_data.days[day].endorsements_received).second for day in WEEKDAYS],
            "applications": [pair_or_zero(session.weekly_data.days[day].applications_received).first for day in WEEKDAYS],
        },
        index=[day.capitalize() for day in WEEKDAYS],
    )
    st.bar_chart(daily)

    st.subheader("Correction Notes")
    new_note = st.text_input("Write a correction note...")
    if st.button("+ Add") and new_note.strip():
        session.weekly_data = add_correction_note(session.weekly_data, new_note)
        persist()
        st.rerun()
    for note in session.weekly_data.correction_notes:
        note_cols = st.columns([1, 8, 1])
        if note_cols[0].checkbox("done", value=note.completed, key=f"note_{note.id}", label_visibility="collapsed") != note.completed:
            session.weekly_data = toggle_correction_note(session.weekly_data, note.id)
            persist()
            st.rerun()
        note_cols[1].markdown(f"~~{note.text}~~" if note.completed else note.text)
        if note_cols[2].button("✕", key=f"delete_note_{note.id}"):
            session.weekly_data = delete_correction_note(session.weekly_data, note.id)
            persist()
            st.rerun()

    col_reset, col_download = st.columns(2)
    with col_reset:
        reset = ResetWeekUseCase(session)
        confirm_reset = st.checkbox("I want to clear this week", disabled=reset.check_conflict() != CONFLICT_EXISTS)
        if st.button("New Week"):
            if reset.execute(confirm_discard=confirm_reset):
                persist()
                st.rerun()
            else:
                st.warning("Tick the confirmation box to clear the current week.")
    with col_download:
        st.download_button(
            "Download Excel",
            data=build_weekly_workbook(session.weekly_data),
            file_name=workbook_filename(session.weekly_data),
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

with tabs[2]:
    save_use_case = SaveWeekToHistoryUseCase(session)
    split = st.checkbox("Book this week against a specific month")
    explicit_month = None
    if split:
        picked = st.date_input("Month", value=date.today())
        explicit_month = (picked.year, picked.month)
    conflict = save_use_case.check_conflict(explicit_month) == CONFLICT_EXISTS
    confirm_overwrite = False
    if conflict:
        confirm_overwrite = st.checkbox(f"{save_use_case.key_for(explicit_month)} already saved - overwrite it")
    if st.button("Save week to history"):
        try:
            key, _snapshot = save_use_case.execute(explicit_month=explicit_month, confirm_overwrite=confirm_overwrite)
        except DuplicateHistoryKey as exc:
            st.warning(str(exc))
        else:
            st.success(f"Saved {key}")
            persist()

    history_rows = [
        {"key": key, **vars(snapshot)} for key, snapshot in session.history.items()
    ]
    if history_rows:
        st.dataframe(pd.DataFrame(history_rows), hide_index=True)
        to_delete = st.selectbox("Delete saved week", ["-"] + [row["key"] for row in history_rows])
        if to_delete != "-" and st.button("Delete"):
            DeleteWeekFromHistoryUseCase(session).execute(to_delete)
            persist()
            st.rerun()

    monthly = rollup.compute(session.history.snapshots())
    if monthly:
        st.subheader("Monthly rollup")
        st.dataframe(pd.DataFrame([vars(row) for row in rollup.rows(monthly, descending=True)]), hide_index=True)
        backlog = pd.DataFrame(rollup.backlog_series(monthly), columns=["month", "backlog"]).set_index("month")
        st.line_chart(backlog)
