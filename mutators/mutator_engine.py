"""
Broken Files Creator v1.0 - Mutation Engine
확률 게이트 기반 뮤테이션 연산자와 고정 순서 파이프라인
"""

import random
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Type, Union

from .element_sequence import ElementSequence, sequence_class_for

# ============================================================
# 연산자별 적용 확률 (경험적 튜닝 값, 설정으로 덮어쓰기 가능)
# ============================================================
TRUNCATE_CHANCE = 0.2
DELETE_CHANCE = 0.5
REPLACE_CHANCE = 0.5
SPLICE_CHANCE = 0.1
INSERT_TOKEN_CHANCE = 0.5

# 특수 단어 장식 확률
LEADING_SPACE_CHANCE = 0.1
LEADING_TAB_CHANCE = 0.01
LEADING_NEWLINE_CHANCE = 0.01
TRAILING_SPACE_CHANCE = 0.3

# 삭제/교체 개수 r 의 범위 [1, 6), 스플라이스 파일 수, 삽입 단어 수
SUBSET_COUNT_RANGE = (1, 6)
SPLICE_FILES_RANGE = (1, 7)
INSERT_WORDS_RANGE = (1, 4)

DEFAULT_CHANCES: Dict[str, float] = {
    "truncate": TRUNCATE_CHANCE,
    "delete": DELETE_CHANCE,
    "replace": REPLACE_CHANCE,
    "splice": SPLICE_CHANCE,
    "insert_token": INSERT_TOKEN_CHANCE,
    "leading_space": LEADING_SPACE_CHANCE,
    "leading_tab": LEADING_TAB_CHANCE,
    "leading_newline": LEADING_NEWLINE_CHANCE,
    "trailing_space": TRAILING_SPACE_CHANCE,
}


@dataclass
class MutationOp:
    """뮤테이션 연산 기록"""

    name: str
    offset: int
    size: int

    def __repr__(self):
        return f"MutationOp({self.name}@{self.offset}, {self.size})"


class BaseMutator(ABC):
    """뮤테이터 베이스 클래스"""

    name: str = "base"
    chance: float = 1.0  # 적용 확률 (게이트)

    def __init__(self, chance: Optional[float] = None):
        if chance is not None:
            self.chance = chance

    def gate(self, rng: random.Random) -> bool:
        """확률 게이트 통과 여부"""
        return rng.random() < self.chance

    @abstractmethod
    def mutate(
        self, seq: ElementSequence, rng: random.Random, source_path: Optional[str] = None
    ) -> Optional[MutationOp]:
        """
        시퀀스를 제자리에서 뮤테이션

        Returns:
            적용된 연산 기록, 게이트 실패 또는 할 일이 없으면 None
        """
        pass


def subset_count(seq: ElementSequence, rng: random.Random) -> int:
    """삭제/교체할 원소 수: min(len // 5, r), r 은 [1, 6) 에서 균등 추출"""
    r = rng.randrange(*SUBSET_COUNT_RANGE)
    return min(len(seq) // 5, r)


class TruncateMutator(BaseMutator):
    """랜덤 위치에서 잘라내기 (앞부분만 남김)"""

    name = "truncate"
    chance = TRUNCATE_CHANCE

    def mutate(self, seq, rng, source_path=None):
        if not seq or not self.gate(rng):
            return None

        pos = seq.random_index(rng)
        removed = len(seq) - pos
        seq.truncate(pos)

        return MutationOp(name=self.name, offset=pos, size=removed)


class DeleteMutator(BaseMutator):
    """랜덤 위치의 원소 여러 개 삭제"""

    name = "delete"
    chance = DELETE_CHANCE

    def mutate(self, seq, rng, source_path=None):
        if not seq or not self.gate(rng):
            return None

        count = subset_count(seq, rng)
        if count == 0:
            return None

        first = None
        for _ in range(count):
            # 삭제 후 길이가 줄어드므로 매번 다시 샘플링
            pos = seq.random_index(rng)
            seq.remove(pos)
            if first is None:
                first = pos

        return MutationOp(name=self.name, offset=first, size=count)


class ReplaceMutator(BaseMutator):
    """랜덤 위치의 원소 여러 개를 랜덤 값으로 교체"""

    name = "replace"
    chance = REPLACE_CHANCE

    def mutate(self, seq, rng, source_path=None):
        if not seq or not self.gate(rng):
            return None

        count = subset_count(seq, rng)
        if count == 0:
            return None

        first = None
        for _ in range(count):
            pos = seq.random_index(rng)
            seq.replace(pos, rng)
            if first is None:
                first = pos

        return MutationOp(name=self.name, offset=first, size=count)


class SpliceMutator(BaseMutator):
    """다른 입력 파일들의 내용을 이어 붙이기 (Cross-file mixing)"""

    name = "splice"
    chance = SPLICE_CHANCE

    def __init__(
        self,
        files: Sequence[str] = (),
        chance: Optional[float] = None,
        exclude_self: bool = False,
        files_range: Tuple[int, int] = SPLICE_FILES_RANGE,
    ):
        super().__init__(chance)
        self.files = tuple(files)
        self.exclude_self = exclude_self
        self.files_range = files_range

    def candidates(self, source_path: Optional[str]) -> List[str]:
        if self.exclude_self and source_path is not None:
            return [f for f in self.files if f != source_path]
        return list(self.files)

    @staticmethod
    def read_external(path: str) -> bytes:
        """읽기 실패한 파일은 아무것도 기여하지 않음"""
        try:
            return Path(path).read_bytes()
        except OSError:
            return b""

    def mutate(self, seq, rng, source_path=None):
        pool = self.candidates(source_path)
        if len(self.files) <= 1 or not pool or not self.gate(rng):
            return None

        count = min(rng.randint(*self.files_range), len(pool))
        chosen = rng.sample(pool, count)

        data = b"".join(self.read_external(p) for p in chosen)
        offset = len(seq)
        seq.extend_raw(data)

        return MutationOp(name=self.name, offset=offset, size=len(seq) - offset)


class InsertTokenMutator(BaseMutator):
    """특수 단어(키워드, 기호 등)를 랜덤 위치에 삽입"""

    name = "insert_token"
    chance = INSERT_TOKEN_CHANCE

    def __init__(
        self,
        words: Sequence[str] = (),
        chance: Optional[float] = None,
        words_range: Tuple[int, int] = INSERT_WORDS_RANGE,
        leading_space: float = LEADING_SPACE_CHANCE,
        leading_tab: float = LEADING_TAB_CHANCE,
        leading_newline: float = LEADING_NEWLINE_CHANCE,
        trailing_space: float = TRAILING_SPACE_CHANCE,
    ):
        super().__init__(chance)
        self.words = tuple(words)
        self.words_range = words_range
        self.leading_space = leading_space
        self.leading_tab = leading_tab
        self.leading_newline = leading_newline
        self.trailing_space = trailing_space

    def embellish(self, word: str, rng: random.Random) -> str:
        """앞뒤 공백류를 확률적으로 덧붙임 (탭과 개행은 둘 중 하나만, 최대 3글자)"""
        prefix = ""
        if rng.random() < self.leading_space:
            prefix += " "
        if rng.random() < self.leading_tab:
            prefix += "\t"
        elif rng.random() < self.leading_newline:
            prefix += "\n"
        suffix = " " if rng.random() < self.trailing_space else ""
        return prefix + word + suffix

    def mutate(self, seq, rng, source_path=None):
        if not self.words or not seq or not self.gate(rng):
            return None

        count = rng.randint(*self.words_range)
        first = None
        added = 0
        for _ in range(count):
            word = self.embellish(rng.choice(self.words), rng)
            pos = seq.random_index(rng)
            units = seq.units_from_text(word)
            seq.insert(pos, units)
            added += len(units)
            if first is None:
                first = pos

        return MutationOp(name=self.name, offset=first, size=added)


# ============================================================
# 뮤테이션 파이프라인
# ============================================================


class MutationEngine:
    """
    고정 순서 뮤테이션 파이프라인

    잘라내기 → 삭제 → (스플라이스) → 교체 → (단어 삽입) 순서로 적용.
    줄어드는 단계 뒤에서만 빈 시퀀스 검사를 하고, 비면 해당 복사본은 포기.
    엔진은 모든 워커가 공유하며 난수 생성기는 호출자가 넘긴다.
    """

    def __init__(
        self,
        kind: str = "byte",
        chances: Optional[Dict[str, float]] = None,
        special_words: Sequence[str] = (),
        splice_files: Sequence[str] = (),
        splice: bool = False,
        exclude_self: bool = False,
    ):
        """
        Args:
            kind: "byte" 또는 "character"
            chances: 연산자별 확률 덮어쓰기 (DEFAULT_CHANCES 키)
            special_words: 삽입할 특수 단어 목록
            splice_files: 스플라이스에 쓸 전체 입력 파일 목록
            splice: 파일 간 스플라이스 사용 여부
            exclude_self: 스플라이스 후보에서 현재 파일 제외
        """
        self.sequence_class: Type[ElementSequence] = sequence_class_for(kind)
        self.kind = kind
        self.chances = dict(DEFAULT_CHANCES)
        if chances:
            unknown = set(chances) - set(DEFAULT_CHANCES)
            if unknown:
                raise ValueError(f"Unknown chance keys: {', '.join(sorted(unknown))}")
            self.chances.update(chances)

        self.truncate = TruncateMutator(self.chances["truncate"])
        self.delete = DeleteMutator(self.chances["delete"])
        self.replace = ReplaceMutator(self.chances["replace"])
        self.splice = SpliceMutator(splice_files, self.chances["splice"], exclude_self=exclude_self) if splice else None
        self.insert_token = (
            InsertTokenMutator(
                special_words,
                self.chances["insert_token"],
                leading_space=self.chances["leading_space"],
                leading_tab=self.chances["leading_tab"],
                leading_newline=self.chances["leading_newline"],
                trailing_space=self.chances["trailing_space"],
            )
            if kind == "character" and special_words
            else None
        )

        # 통계 (워커 간 공유되므로 락 사용)
        self._stats_lock = threading.Lock()
        self.stats = {name: 0 for name in ("truncate", "delete", "splice", "replace", "insert_token", "aborted")}

    def _record(self, ops: List[MutationOp], op: Optional[MutationOp]):
        if op:
            ops.append(op)

    def _count(self, ops: List[MutationOp], aborted: bool):
        with self._stats_lock:
            for op in ops:
                self.stats[op.name] += 1
            if aborted:
                self.stats["aborted"] += 1

    def generate(
        self, content: Union[bytes, str], rng: random.Random, source_path: Optional[str] = None
    ) -> Tuple[Optional[bytes], List[MutationOp]]:
        """
        복사본 하나 생성

        Args:
            content: 원본 내용 (변경되지 않음)
            rng: 워커 소유 난수 생성기
            source_path: 원본 파일 경로 (스플라이스 자기 제외용)

        Returns:
            (저장할 바이트 또는 빈 결과면 None, 뮤테이션 이력)
        """
        ops: List[MutationOp] = []
        seq = self.sequence_class(content)
        if not seq:
            self._count(ops, aborted=True)
            return None, ops

        for mutator in (self.truncate, self.delete):
            self._record(ops, mutator.mutate(seq, rng, source_path))
            if not seq:
                self._count(ops, aborted=True)
                return None, ops

        if self.splice is not None:
            self._record(ops, self.splice.mutate(seq, rng, source_path))

        self._record(ops, self.replace.mutate(seq, rng, source_path))

        if self.insert_token is not None:
            self._record(ops, self.insert_token.mutate(seq, rng, source_path))

        self._count(ops, aborted=False)
        return seq.serialize(), ops

    def get_stats(self) -> Dict[str, int]:
        """뮤테이션 통계 반환"""
        with self._stats_lock:
            return self.stats.copy()

    def reset_stats(self):
        """통계 초기화"""
        with self._stats_lock:
            for key in self.stats:
                self.stats[key] = 0
