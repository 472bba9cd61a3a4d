"""
分词器
把原始文本规范化为索引词项序列：小写、非 [A-Za-z0-9_] 字符替换为空格、
按空白切分、丢弃长度小于 2 的词、去除停用词。
"""

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional

# 基础停用词（职位索引、职位搜索、候选人排名查询使用）
BASE_STOP_WORDS: FrozenSet[str] = frozenset({
    "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
})

# 候选人索引使用的扩展停用词：额外去掉常见助动词
CANDIDATE_STOP_WORDS: FrozenSet[str] = BASE_STOP_WORDS | frozenset({
    "is", "are", "was", "were", "be", "been", "have", "has", "had",
    "do", "does", "did", "will", "would", "could", "should",
})

MIN_TERM_LENGTH = 2

_NON_WORD = re.compile(r"[^A-Za-z0-9_\s]")


@dataclass
class TermVector:
    """
    一个文档的词频向量

    doc_length 恒等于 term_freqs 的值之和
    """
    term_freqs: Dict[str, int] = field(default_factory=dict)

    @property
    def doc_length(self) -> int:
        return sum(self.term_freqs.values())

    @property
    def is_empty(self) -> bool:
        return self.doc_length == 0

    @property
    def terms(self) -> FrozenSet[str]:
        return frozenset(self.term_freqs)

    @classmethod
    def from_terms(cls, terms: Iterable[str]) -> "TermVector":
        return cls(term_freqs=dict(Counter(terms)))


class Tokenizer:
    """
    分词器，停用词表在构造时传入

    使用示例：
        tokenizer = Tokenizer(CANDIDATE_STOP_WORDS)
        tokenizer.tokenize("Go developer, was at Google")  # ["go", "developer", "google"]
    """

    def __init__(self, stop_words: Optional[Iterable[str]] = None):
        self.stop_words = frozenset(BASE_STOP_WORDS if stop_words is None else stop_words)

    def tokenize(self, text: Optional[str]) -> List[str]:
        """
        分词

        Args:
            text: 原始文本（None 视为空串）

        Returns:
            词项列表；空文本或全部被过滤时返回空列表
        """
        if not text:
            return []
        normalized = _NON_WORD.sub(" ", text.lower())
        return [
            token for token in normalized.split()
            if len(token) >= MIN_TERM_LENGTH and token not in self.stop_words
        ]

    def count(self, text: Optional[str]) -> TermVector:
        """分词并统计词频"""
        return TermVector.from_terms(self.tokenize(text))


def tokenize(text: Optional[str], stop_words: Iterable[str] = BASE_STOP_WORDS) -> List[str]:
    """函数式入口，等价于 Tokenizer(stop_words).tokenize(text)"""
    return Tokenizer(stop_words).tokenize(text)
