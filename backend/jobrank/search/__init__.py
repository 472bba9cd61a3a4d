"""
搜索核心模块
分词、加权拼接、倒排索引存储契约、BM25 打分
"""

from .tokenizer import (
    BASE_STOP_WORDS,
    CANDIDATE_STOP_WORDS,
    TermVector,
    Tokenizer,
    tokenize,
)
from .composer import (
    CandidateContentComposer,
    JobContentComposer,
    JobQueryComposer,
    strip_tags,
)
from .store import CorpusStatistics, IndexEntry, IndexStore, InMemoryIndexStore
from .bm25 import BM25Scorer, bm25_term_score, rank

__all__ = [
    "BASE_STOP_WORDS",
    "CANDIDATE_STOP_WORDS",
    "TermVector",
    "Tokenizer",
    "tokenize",
    "CandidateContentComposer",
    "JobContentComposer",
    "JobQueryComposer",
    "strip_tags",
    "CorpusStatistics",
    "IndexEntry",
    "IndexStore",
    "InMemoryIndexStore",
    "BM25Scorer",
    "bm25_term_score",
    "rank",
]
