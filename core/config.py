"""
Broken Files Creator v1.0 - Configuration
기본 설정 + YAML 설정 파일 + 명령행 인자 병합
"""

import copy
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import yaml

from mutators.mutator_engine import DEFAULT_CHANCES


class ConfigError(ValueError):
    """잘못된 실행 설정 (CLI 에서 종료 코드 1로 처리)"""


class Mode(Enum):
    """콘텐츠 단위 모드 (실행 시작 시 한 번 선택)"""

    BYTE = "byte"
    CHARACTER = "character"


# 기본 설정
DEFAULTS: Dict[str, Any] = {
    "output_dir": None,
    "copies": 1,
    "mode": Mode.BYTE.value,
    "special_words": [],
    "splice": False,
    "exclude_self": False,
    "seed": None,
    "workers": None,  # None 이면 ThreadPoolExecutor 기본값
    "max_name_attempts": None,  # None 이면 빈 이름을 찾을 때까지 무한 재시도
    "chances": {},
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """설정 파일 로드 (없으면 기본 설정)"""
    config = copy.deepcopy(DEFAULTS)
    if config_path:
        if not os.path.exists(config_path):
            raise ConfigError(f"Config file doesn't exist: {config_path}")
        with open(config_path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file must contain a mapping: {config_path}")
        unknown = set(loaded) - set(DEFAULTS)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        config.update(loaded)
    return config


@dataclass(frozen=True)
class MutationConfig:
    """실행 전체에서 불변인 뮤테이션 설정"""

    output_dir: str
    copies: int = 1
    mode: Mode = Mode.BYTE
    special_words: Tuple[str, ...] = ()
    splice: bool = False
    exclude_self: bool = False
    seed: Optional[int] = None
    workers: Optional[int] = None
    max_name_attempts: Optional[int] = None
    chances: Dict[str, float] = field(default_factory=dict)

    @property
    def character_mode(self) -> bool:
        return self.mode is Mode.CHARACTER

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "MutationConfig":
        """설정 dict 검증 후 불변 설정 생성"""
        output_dir = config.get("output_dir")
        if not output_dir or not os.path.isdir(output_dir):
            raise ConfigError(f"Output path must be an existing folder: {output_dir}")

        copies = config.get("copies", 1)
        if isinstance(copies, bool) or not isinstance(copies, int) or copies < 0:
            raise ConfigError(f"Number of broken files must be a non-negative integer: {copies}")

        try:
            mode = Mode(config.get("mode", Mode.BYTE.value))
        except ValueError:
            raise ConfigError(f"Unknown mode: {config.get('mode')}") from None

        words = tuple(config.get("special_words") or ())
        if any(not isinstance(w, str) or not w for w in words):
            raise ConfigError("Special words must be non-empty strings")

        chances = dict(config.get("chances") or {})
        for name, value in chances.items():
            if name not in DEFAULT_CHANCES:
                raise ConfigError(f"Unknown chance: {name}")
            if not isinstance(value, (int, float)) or not 0.0 <= value <= 1.0:
                raise ConfigError(f"Chance {name} must be between 0 and 1: {value}")

        for key in ("splice", "exclude_self"):
            if not isinstance(config.get(key, False), bool):
                raise ConfigError(f"{key} must be true or false: {config.get(key)!r}")

        for key in ("workers", "max_name_attempts"):
            value = config.get(key)
            if value is not None and (not isinstance(value, int) or value < 1):
                raise ConfigError(f"{key} must be a positive integer: {value}")

        return cls(
            output_dir=os.path.abspath(output_dir),
            copies=copies,
            mode=mode,
            special_words=words,
            splice=config.get("splice", False),
            exclude_self=config.get("exclude_self", False),
            seed=config.get("seed"),
            workers=config.get("workers"),
            max_name_attempts=config.get("max_name_attempts"),
            chances=chances,
        )
