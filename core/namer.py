"""
Broken Files Creator v1.0 - Variant Namer
충돌 없는 출력 파일 이름 생성

이름 형식: {output_dir}/{stem}_IDX_{copy_index}_RAND_{u64}.{ext}
"""

import os
import random
from typing import Optional, Tuple


class MissingExtensionError(ValueError):
    """파일 이름에 확장자(.)가 없음"""


class NameAttemptsExhaustedError(OSError):
    """제한된 시도 횟수 안에 빈 이름을 찾지 못함 (쓰기 실패로 취급)"""


def split_name(path: str) -> Tuple[str, str]:
    """
    경로의 마지막 구성요소를 마지막 '.' 기준으로 (stem, ext) 분리

    Raises:
        MissingExtensionError: 파일 이름에 '.' 이 없을 때
    """
    name = os.path.basename(path)
    stem, dot, ext = name.rpartition(".")
    if not dot:
        raise MissingExtensionError(f"File {path} doesn't contain a required dot")
    return stem, ext


class VariantNamer:
    """출력 디렉토리 안의 빈 경로 탐색기"""

    def __init__(self, output_dir: str, max_attempts: Optional[int] = None):
        """
        Args:
            output_dir: 출력 디렉토리
            max_attempts: 최대 탐색 횟수 (None 이면 무한)
        """
        self.output_dir = output_dir
        self.max_attempts = max_attempts

    def format_path(self, stem: str, ext: str, copy_index: int, suffix: int) -> str:
        return os.path.join(self.output_dir, f"{stem}_IDX_{copy_index}_RAND_{suffix}.{ext}")

    def free_path(self, stem: str, ext: str, copy_index: int, rng: random.Random) -> str:
        """존재하지 않는 경로가 나올 때까지 64비트 랜덤 접미사를 새로 뽑음"""
        attempts = 0
        while self.max_attempts is None or attempts < self.max_attempts:
            attempts += 1
            path = self.format_path(stem, ext, copy_index, rng.getrandbits(64))
            if not os.path.exists(path):
                return path
        raise NameAttemptsExhaustedError(
            f"No free name for {stem}_IDX_{copy_index}.{ext} after {attempts} attempts"
        )

    def write_variant(self, stem: str, ext: str, copy_index: int, data: bytes, rng: random.Random) -> str:
        """
        빈 이름을 찾아 배타적 생성("xb")으로 저장

        다른 워커가 같은 이름을 먼저 만들면 이름을 다시 탐색한다.

        Returns:
            저장된 경로
        """
        while True:
            path = self.free_path(stem, ext, copy_index, rng)
            try:
                f = open(path, "xb")
            except FileExistsError:
                continue
            try:
                with f:
                    f.write(data)
            except OSError:
                # 반쯤 쓰인 파일은 남기지 않음
                os.remove(path)
                raise
            return path
