"""Weekly endorsement workload tracker: ingestion, aggregation and reporting."""
from endorsement_tracker.application.dto import TrackerSession
from endorsement_tracker.application.use_cases import (
    BuildReportUseCase,
    ImportWeeklyWorkbookUseCase,
    IngestCaseFileUseCase,
    ResetWeekUseCase,
    SaveWeekToHistoryUseCase,
)
from endorsement_tracker.domain.services import CaseAggregator
from endorsement_tracker.infrastructure.repositories.excel_repositories import (
    CaseFileRepository,
    WeeklyExcelRepository,
)

__all__ = [
    "TrackerSession",
    "BuildReportUseCase",
    "ImportWeeklyWorkbookUseCase",
    "IngestCaseFileUseCase",
    "ResetWeekUseCase",
    "SaveWeekToHistoryUseCase",
    "CaseAggregator",
    "CaseFileRepository",
    "WeeklyExcelRepository",
]
