import json
from datetime import datetime

import pytest

from endorsement_tracker.domain.models import NextExpiring, OutstandingEntry, WeeklySnapshot
from endorsement_tracker.domain.repositories import PersistedState
from endorsement_tracker.domain.weekly import add_correction_note, blank_week, update_day
from endorsement_tracker.errors import SyncUnavailable
from endorsement_tracker.infrastructure.storage.state_store import (
    JsonFileStateRepository,
    SharedFolderStateRepository,
    state_from_document,
    state_to_document,
)
from endorsement_tracker.infrastructure.storage.sync import SyncedStateStore


class FakeTimer:
    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.callback()


class RecordingTimers:
    def __init__(self):
        self.started = []

    def __call__(self, interval, callback):
        timer = FakeTimer(interval, callback)
        self.started.append(timer)
        return timer


class MemoryRepository:
    def __init__(self, state=None, fail=False):
        self.state = state
        self.fail = fail
        self.saves = []

    def load(self):
        if self.fail:
            raise SyncUnavailable("offline")
        return self.state

    def save(self, state):
        if self.fail:
            raise SyncUnavailable("offline")
        self.state = state
        self.saves.append(state)


def make_state(week_number: int = 46, endorsements: str = "3/5") -> PersistedState:
    weekly = update_day(blank_week(week_number), "monday", "endorsements_received", endorsements)
    weekly = add_correction_note(weekly, "Fix COC", now=datetime(2025, 11, 10, 9, 0))
    snapshot = WeeklySnapshot(45, 2025, 11, 2025, 20, 8, 12, datetime(2025, 11, 7, 17, 30))
    return PersistedState(
        weekly_data=weekly,
        outstanding_end=(OutstandingEntry("November 2025", 2, 1),),
        next_sra=NextExpiring("2025-11-20", "Nordic", "Jane", "-"),
        weekly_history={"2025-W45": snapshot},
        report_notes=("Note {endorsements}",),
        updated_at=datetime(2025, 11, 10, 9, 1),
    )


def test_document_uses_camel_case_keys():
    doc = state_to_document(make_state())

    assert set(doc) == {"weeklyData", "outstandingEnd", "nextSRA", "weeklyHistory", "reportNotes", "updatedAt"}
    assert doc["weeklyData"]["days"]["monday"]["endorsementsReceived"] == "3/5"
    assert doc["outstandingEnd"] == [{"month": "November 2025", "allCases": 2, "canBeIssued": 1}]
    assert doc["weeklyHistory"]["2025-W45"]["monthYear"] == 2025
    assert state_from_document(doc) == make_state()


def test_json_repository_save_and_load(tmp_path):
    repo = JsonFileStateRepository(tmp_path / "nested" / "state.json")

    assert repo.load() is None
    repo.save(make_state())

    assert repo.load() == make_state()
    assert not (tmp_path / "nested" / "state.json.tmp").exists()


def test_corrupt_file_loads_as_empty(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")

    assert JsonFileStateRepository(path).load() is None

    path.write_text(json.dumps([1, 2]), encoding="utf-8")
    assert JsonFileStateRepository(path).load() is None


def test_undecodable_file_loads_as_empty(tmp_path):
    path = tmp_path / "state.json"
    path.write_bytes(b"\xff\xfe\x00garbage")

    assert JsonFileStateRepository(path).load() is None


def test_misshapen_document_falls_back_to_defaults(tmp_path):
    path = tmp_path / "state.json"
    doc = {
        "weeklyData": {
            "weekNumber": -3,
            "days": [],
            "correctionNotes": ["oops", {"id": "abc", "text": "bad id"}, {"id": 7, "text": "kept"}],
        },
        "outstandingEnd": ["oops", {"month": "November 2025", "allCases": 2, "canBeIssued": 1}],
        "nextSRA": "soon",
        "weeklyHistory": [],
        "reportNotes": "not a list",
        "updatedAt": 12,
    }
    path.write_text(json.dumps(doc), encoding="utf-8")

    state = JsonFileStateRepository(path).load()

    assert state.weekly_data.week_number == 1
    assert state.weekly_data.days["monday"].endorsements_received == "0/0"
    assert [note.text for note in state.weekly_data.correction_notes] == ["kept"]
    assert state.outstanding_end == (OutstandingEntry("November 2025", 2, 1),)
    assert state.next_sra is None
    assert state.weekly_history == {}
    assert state.report_notes
    assert state.updated_at is None


def test_non_object_weekly_data_is_replaced_by_a_blank_week():
    state = state_from_document({"weeklyData": ["x"], "outstandingEnd": None})

    assert state.weekly_data.is_blank()
    assert state.outstanding_end is None


def test_partial_document_gets_defaults():
    state = state_from_document({"weeklyData": {"weekNumber": "12", "days": {"monday": {"corrections": "2"}}}})

    assert state.weekly_data.week_number == 12
    assert state.weekly_data.days["monday"].corrections == 2
    assert state.weekly_data.days["monday"].endorsements_received == "0/0"
    assert state.outstanding_end is None
    assert state.weekly_history == {}
    assert state.report_notes


def test_shared_folder_maps_os_errors(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a folder", encoding="utf-8")
    repo = SharedFolderStateRepository(blocker / "state.json")

    with pytest.raises(SyncUnavailable):
        repo.save(make_state())


def test_debounced_saves_coalesce_into_one_remote_write():
    remote, local, timers = MemoryRepository(), MemoryRepository(), RecordingTimers()
    store = SyncedStateStore(remote, local, debounce_seconds=1.0, timer_factory=timers)

    store.schedule_save(make_state(endorsements="1/1"))
    store.schedule_save(make_state(endorsements="2/2"))
    store.schedule_save(make_state(endorsements="3/3"))

    assert len(local.saves) == 3
    assert remote.saves == []
    assert [t.cancelled for t in timers.started] == [True, True, False]

    for timer in timers.started:
        timer.fire()

    assert remote.saves == [make_state(endorsements="3/3")]


def test_unreachable_remote_falls_back_to_local_cache():
    local = MemoryRepository(make_state(week_number=44))
    remote = MemoryRepository(fail=True)
    timers = RecordingTimers()
    store = SyncedStateStore(remote, local, timer_factory=timers)

    assert store.load().weekly_data.week_number == 44
    assert store.degraded

    store.schedule_save(make_state(week_number=45))
    timers.started[-1].fire()

    assert store.degraded
    assert local.state.weekly_data.week_number == 45

    remote.fail = False
    store.schedule_save(make_state(week_number=46))
    assert store.flush()
    assert not store.degraded
    assert remote.state.weekly_data.week_number == 46


def test_load_prefers_remote_and_refreshes_cache():
    remote = MemoryRepository(make_state(week_number=47))
    local = MemoryRepository(make_state(week_number=40))
    store = SyncedStateStore(remote, local, timer_factory=RecordingTimers())

    assert store.load().weekly_data.week_number == 47
    assert local.state.weekly_data.week_number == 47


def test_remote_change_replaces_pending_local_write():
    remote, local, timers = MemoryRepository(), MemoryRepository(), RecordingTimers()
    store = SyncedStateStore(remote, local, timer_factory=timers)
    store.schedule_save(make_state(week_number=46))

    incoming = make_state(week_number=48)
    assert store.apply_remote(incoming) == incoming

    timers.started[0].fire()
    assert remote.saves == []
    assert local.state == incoming
    assert store.flush()
