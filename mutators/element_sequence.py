"""
Broken Files Creator v1.0 - Element Sequence
바이트/문자(코드포인트) 단위를 동일하게 다루는 시퀀스 추상화

모든 뮤테이터는 이 인터페이스만 사용하므로 바이트 모드와
문자 모드가 같은 뮤테이션 로직을 공유한다.
"""

import random
from abc import ABC, abstractmethod
from typing import Any, List, Sequence, Type, Union


class ElementSequence(ABC):
    """콘텐츠 단위(unit)의 가변 시퀀스"""

    kind: str = "base"

    def __init__(self, units):
        self.units = units

    def __len__(self) -> int:
        return len(self.units)

    def __bool__(self) -> bool:
        return len(self.units) > 0

    # ========== 공통 연산 ==========

    def random_index(self, rng: random.Random) -> int:
        """[0, len) 구간의 균등 랜덤 인덱스 (빈 시퀀스에서는 호출 금지)"""
        if not self.units:
            raise IndexError("cannot sample an index from an empty sequence")
        return rng.randrange(len(self.units))

    def truncate(self, index: int):
        """[0, index) 만 남김"""
        del self.units[index:]

    def remove(self, index: int):
        del self.units[index]

    def replace(self, index: int, rng: random.Random) -> Any:
        """index 위치를 새로 샘플링한 단위로 덮어쓰고 이전 값을 반환"""
        old = self.units[index]
        self.units[index] = self.sample_unit(rng)
        return old

    def insert(self, index: int, units: Sequence):
        self.units[index:index] = units

    # ========== 단위별 구현 ==========

    @abstractmethod
    def sample_unit(self, rng: random.Random) -> Any:
        """랜덤 단위 하나 생성"""
        pass

    @abstractmethod
    def units_from_text(self, text: str) -> Sequence:
        """텍스트(특수 단어)를 이 시퀀스의 단위 열로 변환"""
        pass

    @abstractmethod
    def extend_raw(self, data: bytes):
        """다른 파일의 원시 바이트를 뒤에 덧붙임"""
        pass

    @abstractmethod
    def serialize(self) -> bytes:
        """파일로 저장할 바이트 반환"""
        pass


class ByteSequence(ElementSequence):
    """바이트 단위 시퀀스 (bytearray 기반)"""

    kind = "byte"

    def __init__(self, data: Union[bytes, bytearray] = b""):
        super().__init__(bytearray(data))

    def sample_unit(self, rng: random.Random) -> int:
        return rng.randint(0, 255)

    def units_from_text(self, text: str) -> bytes:
        return text.encode("utf-8")

    def extend_raw(self, data: bytes):
        self.units.extend(data)

    def serialize(self) -> bytes:
        return bytes(self.units)


class CharSequence(ElementSequence):
    """
    유니코드 코드포인트 단위 시퀀스

    저장 시 코드포인트를 다시 문자열로 합쳐 UTF-8로 인코딩하므로
    입력이 올바른 UTF-8 이면 출력도 올바른 UTF-8 이다.
    """

    kind = "character"

    def __init__(self, text: str = ""):
        super().__init__(list(text))

    def sample_unit(self, rng: random.Random) -> str:
        # 0..255 값을 문자로 캐스팅 (항상 유효한 코드포인트)
        return chr(rng.randint(0, 255))

    def units_from_text(self, text: str) -> List[str]:
        return list(text)

    def extend_raw(self, data: bytes):
        # 다른 파일은 UTF-8 이 아닐 수 있으므로 손실 허용 디코딩
        self.units.extend(data.decode("utf-8", errors="replace"))

    def serialize(self) -> bytes:
        return "".join(self.units).encode("utf-8")


def sequence_class_for(kind: str) -> Type[ElementSequence]:
    """모드 이름("byte" / "character")에 해당하는 시퀀스 클래스"""
    for cls in (ByteSequence, CharSequence):
        if cls.kind == kind:
            return cls
    raise ValueError(f"Unknown element kind: {kind}")
