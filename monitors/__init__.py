"""
Broken Files Creator v1.0 - Monitors
진행 상황 및 처리 결과 모니터링
"""

from .progress import (
    PROGRESS_INTERVAL,
    CopyOutcome,
    FileReport,
    FileState,
    ProgressCounter,
    RunReport,
    report,
)

__all__ = [
    "ProgressCounter",
    "FileState",
    "CopyOutcome",
    "FileReport",
    "RunReport",
    "report",
    "PROGRESS_INTERVAL",
]
