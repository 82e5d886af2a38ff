"""
Broken Files Creator v1.0 - Mutators
요소 시퀀스 추상화, 뮤테이션 연산자 및 파이프라인
"""

from .element_sequence import ByteSequence, CharSequence, ElementSequence, sequence_class_for
from .mutator_engine import (
    DEFAULT_CHANCES,
    DELETE_CHANCE,
    INSERT_TOKEN_CHANCE,
    REPLACE_CHANCE,
    SPLICE_CHANCE,
    TRUNCATE_CHANCE,
    BaseMutator,
    DeleteMutator,
    InsertTokenMutator,
    MutationEngine,
    MutationOp,
    ReplaceMutator,
    SpliceMutator,
    TruncateMutator,
    subset_count,
)

__all__ = [
    "ElementSequence",
    "ByteSequence",
    "CharSequence",
    "sequence_class_for",
    "MutationEngine",
    "MutationOp",
    "BaseMutator",
    "TruncateMutator",
    "DeleteMutator",
    "ReplaceMutator",
    "SpliceMutator",
    "InsertTokenMutator",
    "subset_count",
    "DEFAULT_CHANCES",
    "TRUNCATE_CHANCE",
    "DELETE_CHANCE",
    "REPLACE_CHANCE",
    "SPLICE_CHANCE",
    "INSERT_TOKEN_CHANCE",
]
