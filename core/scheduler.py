"""
Broken Files Creator v1.0 - Fan-out Scheduler
(입력 파일 × 복사본 수) 를 스레드 풀로 분배

파일 하나당 작업 하나, 작업 안에서 복사본은 순차 생성.
작업 간 공유 가변 상태는 진행 카운터뿐이다.
"""

import os
import random
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence, Union

from monitors.progress import CopyOutcome, FileReport, FileState, ProgressCounter, RunReport, report
from mutators.mutator_engine import MutationEngine

from .config import Mode, MutationConfig
from .namer import MissingExtensionError, VariantNamer, split_name


class SourceFile:
    """원본 파일 (내용은 한 번만 읽고 이후 불변)"""

    def __init__(self, path: str, mode: Mode = Mode.BYTE):
        self.path = os.path.abspath(path)
        self.mode = mode
        self._content: Optional[Union[bytes, str]] = None

    @property
    def content(self) -> Union[bytes, str]:
        """
        지연 로드된 내용 (바이트 모드: bytes, 문자 모드: str)

        Raises:
            OSError: 파일 읽기 실패
            UnicodeDecodeError: 문자 모드에서 UTF-8 이 아닐 때
        """
        if self._content is None:
            with open(self.path, "rb") as f:
                data = f.read()
            self._content = data.decode("utf-8") if self.mode is Mode.CHARACTER else data
        return self._content


class FanOutScheduler:
    """
    깨진 파일 생성 스케줄러

    각 작업은 자신만의 난수 생성기를 가지며, seed 가 설정되면
    파일 경로에서 파생된 시드를 사용해 내용이 재현 가능하다.
    파일 이름 접미사는 별도 생성기에서 뽑으므로 내용에 영향을 주지 않는다.
    """

    def __init__(self, config: MutationConfig, files: Sequence[str], engine: Optional[MutationEngine] = None):
        self.config = config
        self.files = tuple(os.path.abspath(f) for f in files)
        self.engine = engine or MutationEngine(
            kind=config.mode.value,
            chances=config.chances,
            special_words=config.special_words,
            splice_files=self.files,
            splice=config.splice,
            exclude_self=config.exclude_self,
        )
        self.namer = VariantNamer(config.output_dir, config.max_name_attempts)
        self.progress = ProgressCounter(total=len(self.files))

    def _make_rng(self, path: str) -> random.Random:
        if self.config.seed is None:
            return random.Random()
        return random.Random(f"{self.config.seed}:{path}")

    def process_file(self, path: str) -> FileReport:
        """원본 파일 하나에 대해 복사본 N 개 생성"""
        file_report = FileReport(path=path)

        try:
            stem, ext = split_name(path)
        except MissingExtensionError as e:
            report(f"[!] {e}")
            file_report.state = FileState.SKIPPED_NO_EXTENSION
            file_report.error = str(e)
            return file_report

        source = SourceFile(path, self.config.mode)
        try:
            content = source.content
        except (OSError, UnicodeDecodeError) as e:
            report(f"[!] Failed to read data from file {path}: {e}")
            file_report.state = FileState.SKIPPED_READ_ERROR
            file_report.error = str(e)
            return file_report
        file_report.state = FileState.READ

        rng = self._make_rng(path)
        name_rng = random.Random()

        for copy_index in range(self.config.copies):
            data, _ = self.engine.generate(content, rng, source_path=path)
            if data is None:
                file_report.outcomes.append(CopyOutcome.ABORTED_EMPTY)
                continue

            try:
                written = self.namer.write_variant(stem, ext, copy_index, data, name_rng)
            except OSError as e:
                report(f"[!] Failed to save data to file for {path} (copy {copy_index}): {e}")
                file_report.outcomes.append(CopyOutcome.SKIPPED_WRITE_ERROR)
                continue

            file_report.outcomes.append(CopyOutcome.WRITTEN)
            file_report.written.append(written)

        file_report.state = FileState.DONE
        return file_report

    def _run_task(self, path: str) -> FileReport:
        """개별 파일 작업 (스레드)"""
        try:
            return self.process_file(path)
        finally:
            self.progress.increment()

    def run(self) -> RunReport:
        """모든 파일 처리 후 결과 집계"""
        run_report = RunReport()

        with ThreadPoolExecutor(max_workers=self.config.workers, thread_name_prefix="broken-files") as executor:
            futures = [executor.submit(self._run_task, path) for path in self.files]
            for path, future in zip(self.files, futures):
                try:
                    run_report.files.append(future.result())
                except Exception as e:
                    report(f"[!] Worker error on {path}: {e}")
                    run_report.files.append(FileReport(path=path, error=str(e)))

        run_report.end_time = time.time()
        run_report.mutation_stats = self.engine.get_stats()
        return run_report
