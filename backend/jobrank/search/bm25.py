"""
BM25 打分器

对查询中的每个词项 t 与索引条目 (t, doc)：

    idf(t)  = ln( (N - df + 0.5) / (df + 0.5) + 1 )
    tf(doc) = tf * (k1 + 1) / (tf + k1 * (1 - b + b * dl / avgdl))
    score  += idf(t) * tf(doc)

同一词项在查询中出现 n 次就累加 n 次。退化输入不会产生 NaN/Inf：
df 截断到 [0, N] 区间的分子，N 或 avgdl 非正时直接返回空结果。
"""

import math
from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple

from jobrank.search.store import IndexStore
from jobrank.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_K1 = 1.2
DEFAULT_B = 0.75


def _validate_parameters(k1: float, b: float) -> None:
    if k1 < 0 or not math.isfinite(k1):
        raise ValueError(f"k1 must be a finite non-negative number, got {k1}")
    if not 0 <= b <= 1:
        raise ValueError(f"b must be within [0, 1], got {b}")


def inverse_document_frequency(doc_freq: int, total_docs: int) -> float:
    """IDF，恒为正数"""
    doc_freq = max(doc_freq, 0)
    numerator = max(total_docs - doc_freq, 0) + 0.5
    return math.log(numerator / (doc_freq + 0.5) + 1)


def bm25_term_score(
    term_freq: int,
    doc_length: int,
    doc_freq: int,
    total_docs: int,
    avg_doc_length: float,
    k1: float = DEFAULT_K1,
    b: float = DEFAULT_B,
) -> float:
    """单个 (词项, 文档) 的 BM25 得分，纯函数"""
    if term_freq <= 0 or avg_doc_length <= 0:
        return 0.0
    idf = inverse_document_frequency(doc_freq, total_docs)
    norm = 1 - b + b * (max(doc_length, 0) / avg_doc_length)
    tf = (term_freq * (k1 + 1)) / (term_freq + k1 * norm)
    return idf * tf


def rank(scores: Dict[int, float]) -> List[Tuple[int, float]]:
    """按得分降序排序，得分相同按文档 ID 升序，保证分页稳定"""
    return sorted(scores.items(), key=lambda item: (-item[1], item[0]))


class BM25Scorer:
    """
    BM25 打分器

    读取一个 IndexStore；k1、b 在构造时传入，也可以运行时调整。

    使用示例：
        scorer = BM25Scorer(store, k1=1.2, b=0.75)
        scores = scorer.score(["python", "developer"], total_docs=120, avg_doc_length=85.3)
    """

    def __init__(self, store: IndexStore, k1: float = DEFAULT_K1, b: float = DEFAULT_B):
        _validate_parameters(k1, b)
        self.store = store
        self.k1 = k1
        self.b = b

    def set_parameters(self, k1: Optional[float] = None, b: Optional[float] = None) -> None:
        """调整 BM25 参数，None 表示保持不变

        Raises:
            ValueError: 参数越界
        """
        new_k1 = self.k1 if k1 is None else k1
        new_b = self.b if b is None else b
        _validate_parameters(new_k1, new_b)
        self.k1, self.b = new_k1, new_b

    def get_parameters(self) -> Dict[str, float]:
        return {"k1": self.k1, "b": self.b}

    def score(
        self,
        query_terms: Iterable[str],
        total_docs: int,
        avg_doc_length: float,
    ) -> Dict[int, float]:
        """
        计算查询对每个命中文档的得分

        Args:
            query_terms: 分词后的查询词（允许重复）
            total_docs: 语料文档总数
            avg_doc_length: 平均文档长度

        Returns:
            document_id -> 得分；未命中任何词项的文档不出现
        """
        if total_docs <= 0 or avg_doc_length <= 0:
            logger.warning(
                "BM25 scorer called with degenerate corpus (total_docs=%s, avg_doc_length=%s)",
                total_docs, avg_doc_length,
            )
            return {}

        multiplicity = Counter(query_terms)
        if not multiplicity:
            return {}

        results: Dict[int, float] = {}
        for entry in self.store.entries_for_terms(multiplicity.keys()):
            term_score = bm25_term_score(
                term_freq=entry.term_freq,
                doc_length=entry.doc_length,
                doc_freq=entry.doc_freq,
                total_docs=total_docs,
                avg_doc_length=avg_doc_length,
                k1=self.k1,
                b=self.b,
            )
            results[entry.document_id] = (
                results.get(entry.document_id, 0.0) + term_score * multiplicity[entry.term]
            )
        return results

    def ranked(
        self,
        query_terms: Iterable[str],
        total_docs: int,
        avg_doc_length: float,
    ) -> List[Tuple[int, float]]:
        """score() 的排序版本"""
        return rank(self.score(query_terms, total_docs, avg_doc_length))
