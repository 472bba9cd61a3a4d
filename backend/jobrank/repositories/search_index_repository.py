"""
倒排索引 Repository
IndexStore 契约的关系数据库实现，职位索引和候选人索引共用

事务约定：本类只 flush 不 commit，由 IndexMaintainer 决定提交或回滚，
保证"删旧条目 + 插新条目 + 重算 doc_freq"在同一个事务内完成。
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Set, Type

from sqlalchemy import delete, func, select, text, update
from sqlmodel import Session

from jobrank.models.search_index import SearchIndexEntry
from jobrank.search.store import CorpusStatistics, IndexEntry, validate_term_vector

# 每张索引表一把进程内写锁；PostgreSQL 上额外加表锁
_WRITE_LOCKS: Dict[str, threading.RLock] = {}
_WRITE_LOCKS_GUARD = threading.Lock()


def _write_lock_for(table_name: str) -> threading.RLock:
    with _WRITE_LOCKS_GUARD:
        return _WRITE_LOCKS.setdefault(table_name, threading.RLock())


def _chunks(items: List[str], size: int) -> Iterator[List[str]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


class SearchIndexRepository:
    """
    倒排索引数据访问对象
    封装所有与 job_search_index / candidate_search_index 表相关的数据库操作
    """

    def __init__(
        self,
        session: Session,
        model: Type[SearchIndexEntry],
        chunk_size: int = 500
    ):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
            model: 索引表模型（JobSearchIndex 或 CandidateSearchIndex）
            chunk_size: IN 列表分批大小（受数据库绑定参数个数限制）
        """
        self.session = session
        self.model = model
        self.table = model.__table__
        self.chunk_size = chunk_size

    @property
    def table_name(self) -> str:
        return self.table.name

    @contextmanager
    def write_lock(self) -> Iterator[None]:
        """
        写路径锁：覆盖整张索引表

        doc_freq 是跨文档的冗余字段，两个文档并发重建索引时必须串行，
        否则后提交的一方会基于过期的条目集合计算 doc_freq。
        锁需要一直持有到事务提交。
        """
        lock = _write_lock_for(self.table_name)
        with lock:
            if self.session.get_bind().dialect.name == "postgresql":
                self.session.exec(text(f"LOCK TABLE {self.table_name} IN SHARE ROW EXCLUSIVE MODE"))
            yield

    # ==================== 写操作 ====================

    def replace(self, document_id: int, term_freqs: Mapping[str, int], doc_length: int) -> Set[str]:
        """
        替换文档的全部索引条目

        先删除该文档的所有旧条目，再为每个词项插入一行（doc_freq 占位为 0）

        Args:
            document_id: 文档 ID
            term_freqs: 词项 -> 词频
            doc_length: 文档总词数

        Returns:
            需要重算 doc_freq 的词项集合（旧词项 ∪ 新词项）
        """
        validate_term_vector(term_freqs, doc_length)
        old_terms = self.remove(document_id)
        self.session.add_all([
            self.model(
                document_id=document_id,
                term=term,
                term_freq=freq,
                doc_length=doc_length,
                doc_freq=0
            )
            for term, freq in term_freqs.items()
        ])
        self.session.flush()
        return old_terms | set(term_freqs)

    def remove(self, document_id: int) -> Set[str]:
        """
        删除文档的全部索引条目

        Returns:
            被删除的词项集合
        """
        terms = set(self.session.exec(
            select(self.table.c.term).where(self.table.c.document_id == document_id)
        ).scalars().all())
        if terms:
            self.session.exec(
                delete(self.model)
                .where(self.model.document_id == document_id)
                .execution_options(synchronize_session="fetch")
            )
        return terms

    def recompute_doc_frequencies(self, terms: Optional[Iterable[str]] = None) -> int:
        """
        重算 doc_freq = 包含该词项的不同文档数

        每批词项一条相关子查询 UPDATE，不做逐词查询。
        terms 为 None 时重算整张表（只在批量重建结束时使用）。

        Args:
            terms: 需要重算的词项（脏词项集合）

        Returns:
            涉及的词项数
        """
        self.session.flush()
        peer = self.table.alias("peer")
        doc_count = (
            select(func.count(func.distinct(peer.c.document_id)))
            .where(peer.c.term == self.table.c.term)
            .scalar_subquery()
        )
        statement = update(self.table).values(doc_freq=doc_count)

        if terms is None:
            self.session.exec(statement)
            return self.unique_term_count()

        dirty = sorted(set(terms))
        for chunk in _chunks(dirty, self.chunk_size):
            self.session.exec(statement.where(self.table.c.term.in_(chunk)))
        return len(dirty)

    def truncate(self) -> None:
        """清空整张索引表"""
        self.session.exec(delete(self.table))

    # ==================== 读操作 ====================

    def _to_entries(self, rows) -> List[IndexEntry]:
        return [
            IndexEntry(
                document_id=row.document_id,
                term=row.term,
                term_freq=row.term_freq,
                doc_length=row.doc_length,
                doc_freq=row.doc_freq
            )
            for row in rows
        ]

    def _entry_columns(self):
        columns = self.table.c
        return select(
            columns.document_id, columns.term, columns.term_freq,
            columns.doc_length, columns.doc_freq
        )

    def entries_for_terms(self, terms: Iterable[str]) -> List[IndexEntry]:
        """
        取出所有给定词项的条目（按批 IN 查询，而不是每个词项一次查询）

        Args:
            terms: 查询词项

        Returns:
            IndexEntry 列表
        """
        wanted = sorted(set(terms))
        entries: List[IndexEntry] = []
        for chunk in _chunks(wanted, self.chunk_size):
            rows = self.session.exec(
                self._entry_columns().where(self.table.c.term.in_(chunk))
            ).all()
            entries.extend(self._to_entries(rows))
        return entries

    def entries_for_document(self, document_id: int) -> List[IndexEntry]:
        """获取文档的全部条目（按词项排序）"""
        rows = self.session.exec(
            self._entry_columns()
            .where(self.table.c.document_id == document_id)
            .order_by(self.table.c.term)
        ).all()
        return self._to_entries(rows)

    def document_ids(self) -> Set[int]:
        """索引中出现过的全部文档 ID"""
        return set(self.session.exec(
            select(self.table.c.document_id).distinct()
        ).scalars().all())

    def unique_term_count(self) -> int:
        return self.session.exec(
            select(func.count(func.distinct(self.table.c.term)))
        ).scalar_one()

    def corpus_statistics(self) -> CorpusStatistics:
        """
        语料统计

        平均文档长度按文档计算：先按文档取 doc_length，再求平均

        Returns:
            CorpusStatistics 对象
        """
        per_document = (
            select(
                self.table.c.document_id,
                func.max(self.table.c.doc_length).label("doc_length")
            )
            .group_by(self.table.c.document_id)
            .subquery()
        )
        total_docs, avg_length = self.session.exec(
            select(func.count(), func.avg(per_document.c.doc_length)).select_from(per_document)
        ).one()
        total_entries = self.session.exec(
            select(func.count()).select_from(self.table)
        ).scalar_one()
        return CorpusStatistics(
            total_docs=int(total_docs or 0),
            avg_doc_length=float(avg_length or 0.0),
            unique_terms=self.unique_term_count(),
            total_entries=int(total_entries or 0)
        )
