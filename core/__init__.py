"""
Broken Files Creator v1.0 - Core Module
핵심 모듈 (설정, 이름 생성, 스케줄러, 컨트롤러)
"""

from .config import DEFAULTS, ConfigError, Mode, MutationConfig, load_config
from .controller import BrokenFilesController, build_parser, main
from .discovery import collect_files
from .namer import MissingExtensionError, NameAttemptsExhaustedError, VariantNamer, split_name
from .scheduler import FanOutScheduler, SourceFile

__all__ = [
    "BrokenFilesController",
    "build_parser",
    "main",
    # Config
    "DEFAULTS",
    "ConfigError",
    "Mode",
    "MutationConfig",
    "load_config",
    # Discovery
    "collect_files",
    # Namer
    "VariantNamer",
    "split_name",
    "MissingExtensionError",
    "NameAttemptsExhaustedError",
    # Scheduler
    "FanOutScheduler",
    "SourceFile",
]
