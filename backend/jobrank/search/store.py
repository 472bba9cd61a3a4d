"""
倒排索引存储抽象

IndexStore 定义索引的读写契约，打分器和编排层只依赖这个契约：
- SearchIndexRepository：关系数据库实现（jobrank.repositories）
- InMemoryIndexStore：内存实现，用于单元测试和离线实验
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Set, Tuple


@dataclass
class IndexEntry:
    """一条倒排索引记录"""
    document_id: int
    term: str
    term_freq: int
    doc_length: int
    doc_freq: int = 0


@dataclass(frozen=True)
class CorpusStatistics:
    """
    语料统计

    avg_doc_length 按文档平均（每个文档计一次），不是按索引行平均
    """
    total_docs: int
    avg_doc_length: float
    unique_terms: int = 0
    total_entries: int = 0

    @property
    def is_degenerate(self) -> bool:
        """无文档或平均长度为 0 时 BM25 无意义，调用方应走回退路径"""
        return self.total_docs <= 0 or self.avg_doc_length <= 0


class IndexStore(Protocol):
    """倒排索引存储契约"""

    def replace(self, document_id: int, term_freqs: Mapping[str, int], doc_length: int) -> Set[str]:
        """删除文档的全部旧条目后插入新条目（doc_freq 占位为 0），返回需要重算 doc_freq 的词项"""

    def remove(self, document_id: int) -> Set[str]:
        """删除文档的全部条目，返回被删除的词项"""

    def recompute_doc_frequencies(self, terms: Optional[Iterable[str]] = None) -> int:
        """重算给定词项（None 表示全部词项）的 doc_freq，返回涉及的词项数"""

    def truncate(self) -> None:
        """清空整个索引"""

    def entries_for_terms(self, terms: Iterable[str]) -> List[IndexEntry]:
        """一次性取出所有给定词项的条目"""

    def entries_for_document(self, document_id: int) -> List[IndexEntry]:
        """取出某个文档的全部条目"""

    def document_ids(self) -> Set[int]:
        """索引中出现过的全部文档 ID"""

    def corpus_statistics(self) -> CorpusStatistics:
        """文档数、平均文档长度、唯一词项数、条目总数"""


def validate_term_vector(term_freqs: Mapping[str, int], doc_length: int) -> None:
    """
    校验写入索引的词频向量

    Raises:
        ValueError: 词频非正，或 doc_length 不等于词频之和
    """
    if any(freq <= 0 for freq in term_freqs.values()):
        raise ValueError("term frequencies must be positive")
    if doc_length != sum(term_freqs.values()):
        raise ValueError(
            f"doc_length {doc_length} does not match the sum of term frequencies "
            f"{sum(term_freqs.values())}"
        )


class InMemoryIndexStore:
    """内存版倒排索引，语义与数据库实现一致"""

    def __init__(self):
        self._entries: Dict[Tuple[str, int], IndexEntry] = {}
        self._terms_by_document: Dict[int, Set[str]] = {}
        # 词项 -> 包含它的文档集合
        self._documents_by_term: Dict[str, Set[int]] = {}

    def replace(self, document_id: int, term_freqs: Mapping[str, int], doc_length: int) -> Set[str]:
        validate_term_vector(term_freqs, doc_length)
        dirty = self.remove(document_id)
        for term, freq in term_freqs.items():
            self._entries[(term, document_id)] = IndexEntry(
                document_id=document_id,
                term=term,
                term_freq=freq,
                doc_length=doc_length,
            )
            self._documents_by_term.setdefault(term, set()).add(document_id)
        if term_freqs:
            self._terms_by_document[document_id] = set(term_freqs)
        return dirty | set(term_freqs)

    def remove(self, document_id: int) -> Set[str]:
        terms = self._terms_by_document.pop(document_id, set())
        for term in terms:
            self._entries.pop((term, document_id), None)
            postings = self._documents_by_term.get(term)
            if postings is not None:
                postings.discard(document_id)
                if not postings:
                    del self._documents_by_term[term]
        return set(terms)

    def recompute_doc_frequencies(self, terms: Optional[Iterable[str]] = None) -> int:
        targets = set(self._documents_by_term) if terms is None else set(terms)
        for term in targets:
            documents = self._documents_by_term.get(term, set())
            for document_id in documents:
                self._entries[(term, document_id)].doc_freq = len(documents)
        return len(targets)

    def truncate(self) -> None:
        self._entries.clear()
        self._terms_by_document.clear()
        self._documents_by_term.clear()

    def entries_for_terms(self, terms: Iterable[str]) -> List[IndexEntry]:
        return [
            self._entries[(term, document_id)]
            for term in set(terms)
            for document_id in sorted(self._documents_by_term.get(term, ()))
        ]

    def entries_for_document(self, document_id: int) -> List[IndexEntry]:
        return [
            self._entries[(term, document_id)]
            for term in sorted(self._terms_by_document.get(document_id, ()))
        ]

    def document_ids(self) -> Set[int]:
        return set(self._terms_by_document)

    def corpus_statistics(self) -> CorpusStatistics:
        lengths = {entry.document_id: entry.doc_length for entry in self._entries.values()}
        total_docs = len(lengths)
        avg = sum(lengths.values()) / total_docs if total_docs else 0.0
        return CorpusStatistics(
            total_docs=total_docs,
            avg_doc_length=avg,
            unique_terms=len(self._documents_by_term),
            total_entries=len(self._entries),
        )
