"""
Broken Files Creator v1.0 - Main Controller
명령행 인자/설정 파일 처리 후 스케줄러 실행
"""

import argparse
import sys
from typing import List, Optional, Sequence

from monitors.progress import RunReport

from .config import ConfigError, Mode, MutationConfig, load_config
from .discovery import MAX_DEPTH, collect_files
from .scheduler import FanOutScheduler


class BrokenFilesController:
    """
    실행 컨트롤러

    설정 로드 → 입력 파일 수집 → 스케줄러 실행 → 최종 리포트.
    """

    def __init__(self, config: MutationConfig, files: Sequence[str]):
        self.config = config
        self.files = list(files)
        self.scheduler: Optional[FanOutScheduler] = None

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "BrokenFilesController":
        """
        설정 파일 + 명령행 인자로 컨트롤러 생성

        Raises:
            ConfigError: 경로/값 검증 실패
        """
        config = load_config(args.config)

        # 커맨드라인 인자로 설정 오버라이드
        if args.output_path is not None:
            config["output_dir"] = args.output_path
        if args.number_of_broken_files is not None:
            config["copies"] = args.number_of_broken_files
        if args.character_mode is not None:
            config["mode"] = Mode.CHARACTER.value if args.character_mode else Mode.BYTE.value
        if args.special_words:
            config["special_words"] = args.special_words
        if args.splice:
            config["splice"] = True
        if args.exclude_self:
            config["exclude_self"] = True
        if args.seed is not None:
            config["seed"] = args.seed
        if args.workers is not None:
            config["workers"] = args.workers

        mutation_config = MutationConfig.from_dict(config)

        if args.max_depth < 1:
            raise ConfigError(f"Max depth must be at least 1: {args.max_depth}")

        try:
            files = collect_files(args.input_path, args.max_depth)
        except FileNotFoundError as e:
            raise ConfigError(str(e)) from None
        if not files:
            raise ConfigError("No files to check")

        return cls(mutation_config, files)

    def run(self) -> RunReport:
        self._print_banner()
        self.scheduler = FanOutScheduler(self.config, self.files)
        run_report = self.scheduler.run()
        run_report.print_summary()
        return run_report

    def _print_banner(self):
        """시작 정보 출력"""
        print("\n[+] Starting broken files creator")
        print(f"    Source files: {len(self.files):,}")
        print(f"    Copies per file: {self.config.copies:,}")
        print(f"    Mode: {self.config.mode.value}")
        print(f"    Output: {self.config.output_dir}")
        if self.config.special_words:
            print(f"    Special words: {len(self.config.special_words)}")
        if self.config.splice:
            print(f"    Splicing: enabled{' (excluding self)' if self.config.exclude_self else ''}")
        if self.config.seed is not None:
            print(f"    Seed: {self.config.seed}")
        print()


def str_to_bool(value: str) -> bool:
    """'-c true' / '-c false' 형식의 값 파싱"""
    lowered = value.lower()
    if lowered in ("true", "yes", "1"):
        return True
    if lowered in ("false", "no", "0"):
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="broken-files",
        description="Creates broken files from provided ones, to e.g. check parsers",
    )
    parser.add_argument(
        "-i",
        "--input-path",
        required=True,
        help="File or folder taken as input to create broken files",
    )
    parser.add_argument("-o", "--output-path", help="Folder to which broken files will be saved")
    parser.add_argument(
        "-n",
        "--number-of-broken-files",
        type=int,
        help="Number of broken files that will be created for each found file",
    )
    parser.add_argument(
        "-c",
        "--character-mode",
        nargs="?",
        const=True,
        type=str_to_bool,
        metavar="BOOL",
        help="Mutate unicode characters instead of bytes, so output stays utf-8 if input is (-c or -c true)",
    )
    parser.add_argument(
        "-s",
        "--special-words",
        nargs="+",
        metavar="WORD",
        help="Items randomly added to files in character mode (keywords, symbols like new, let, ;, ?)",
    )
    parser.add_argument("--splice", action="store_true", help="Append content of other input files")
    parser.add_argument("--exclude-self", action="store_true", help="Never splice a file into its own copies")
    parser.add_argument("--seed", type=int, help="Seed for reproducible content")
    parser.add_argument("--workers", type=int, help="Number of worker threads")
    parser.add_argument("--max-depth", type=int, default=MAX_DEPTH, help="Folder traversal depth")
    parser.add_argument("--config", type=str, help="YAML config file path")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """메인 함수"""
    args = build_parser().parse_args(argv)

    try:
        controller = BrokenFilesController.from_args(args)
    except ConfigError as e:
        print(f"[!] {e}")
        return 1

    controller.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
