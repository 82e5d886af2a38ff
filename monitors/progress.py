"""
Broken Files Creator v1.0 - Progress Monitoring
진행 카운터, 파일/복사본 처리 결과 및 콘솔 출력
"""

import threading
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional

PROGRESS_INTERVAL = 100  # N 개 파일마다 진행 상황 출력

_print_lock = threading.Lock()


def report(message: str):
    """여러 워커의 출력이 섞이지 않도록 한 줄씩 출력"""
    with _print_lock:
        print(message, flush=True)


class FileState(Enum):
    """원본 파일 처리 상태"""

    DISCOVERED = auto()
    READ = auto()
    SKIPPED_NO_EXTENSION = auto()
    SKIPPED_READ_ERROR = auto()
    DONE = auto()


class CopyOutcome(Enum):
    """복사본 하나의 결과"""

    WRITTEN = auto()
    SKIPPED_WRITE_ERROR = auto()
    ABORTED_EMPTY = auto()  # 뮤테이션 후 빈 내용 (에러 아님)


class ProgressCounter:
    """
    완료된 파일 수 카운터

    워커 간 공유되는 유일한 가변 상태. 진행 표시에만 쓰인다.
    """

    def __init__(self, total: int = 0, interval: int = PROGRESS_INTERVAL):
        self.total = total
        self.interval = interval
        self._value = 0
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def increment(self) -> int:
        """1 증가 후 새 값 반환, interval 배수마다 진행 상황 출력"""
        with self._lock:
            self._value += 1
            current = self._value
        if self.interval and current % self.interval == 0:
            report(f"[*] Processed {current}/{self.total} files")
        return current


@dataclass
class FileReport:
    """원본 파일 하나의 처리 결과"""

    path: str
    state: FileState = FileState.DISCOVERED
    outcomes: List[CopyOutcome] = field(default_factory=list)
    written: List[str] = field(default_factory=list)
    error: Optional[str] = None

    def count(self, outcome: CopyOutcome) -> int:
        return sum(1 for o in self.outcomes if o is outcome)


@dataclass
class RunReport:
    """실행 전체 결과 (메인 스레드에서 집계)"""

    files: List[FileReport] = field(default_factory=list)
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None
    mutation_stats: Dict[str, int] = field(default_factory=dict)  # 연산자별 적용 횟수

    @property
    def elapsed(self) -> float:
        end = self.end_time if self.end_time is not None else time.time()
        return end - self.start_time

    @property
    def written_paths(self) -> List[str]:
        return [p for f in self.files for p in f.written]

    def file_states(self) -> Dict[str, int]:
        counts = {state.name: 0 for state in FileState}
        for f in self.files:
            counts[f.state.name] += 1
        return counts

    def copy_outcomes(self) -> Dict[str, int]:
        counts = {outcome.name: 0 for outcome in CopyOutcome}
        for f in self.files:
            for outcome in f.outcomes:
                counts[outcome.name] += 1
        return counts

    @property
    def errors(self) -> int:
        """보고 대상 실패 수 (파일 단위 실패 + 쓰기 실패)"""
        failed_files = sum(1 for f in self.files if f.error is not None)
        return failed_files + self.copy_outcomes()[CopyOutcome.SKIPPED_WRITE_ERROR.name]

    def print_summary(self):
        """최종 리포트 출력"""
        states = self.file_states()
        outcomes = self.copy_outcomes()

        print("\n" + "=" * 60)
        print(" BROKEN FILES FINAL STATISTICS")
        print("=" * 60)
        print(f"  Source files:        {len(self.files):,}")
        print(f"  Processed:           {states[FileState.DONE.name]:,}")
        print(f"  Skipped (no ext):    {states[FileState.SKIPPED_NO_EXTENSION.name]:,}")
        print(f"  Skipped (read err):  {states[FileState.SKIPPED_READ_ERROR.name]:,}")
        print(f"  Variants written:    {outcomes[CopyOutcome.WRITTEN.name]:,}")
        print(f"  Empty (not saved):   {outcomes[CopyOutcome.ABORTED_EMPTY.name]:,}")
        print(f"  Write failures:      {outcomes[CopyOutcome.SKIPPED_WRITE_ERROR.name]:,}")
        print(f"  Elapsed:             {self.elapsed:.1f}s")
        if self.mutation_stats:
            print("-" * 60)
            print("  Mutations applied:")
            for name, count in self.mutation_stats.items():
                print(f"    {name + ':':<18} {count:,}")
        print("=" * 60)
