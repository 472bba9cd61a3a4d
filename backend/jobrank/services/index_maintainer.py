"""
索引维护服务

负责倒排索引的构建、增量更新和批量重建：
1. index_document：单文档重建索引（删旧条目 + 插新条目 + 增量重算 doc_freq，一个事务）
2. remove_document：删除单文档索引并重算受影响词项的 doc_freq
3. rebuild：批量重建（逐文档提交，最后统一全量重算 doc_freq）

资格判定：
- 职位：status == active
- 候选人：profile_complete 且 visibility
不符合资格的文档在任何一次维护中都会被移出索引。
"""

from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from jobrank.config import SearchSettings
from jobrank.exceptions import JobRankError, MaintenanceFailure, NoContentError
from jobrank.models.job import JobStatus
from jobrank.models.search_index import CandidateSearchIndex, JobSearchIndex, SearchIndexEntry
from jobrank.repositories.candidate_repository import CandidateRepository
from jobrank.repositories.job_repository import JobRepository
from jobrank.repositories.search_index_repository import SearchIndexRepository
from jobrank.schemas import IndexOutcome, RebuildReport
from jobrank.search.composer import CandidateContentComposer, ContentComposer, JobContentComposer
from jobrank.search.store import CorpusStatistics
from jobrank.utils.logger import get_logger

logger = get_logger(__name__)

# 进度回调：(已处理数, 总数, 文档 ID)
ProgressCallback = Callable[[int, int, int], None]


class IndexMaintainer:
    """
    索引维护基类

    子类提供索引表模型、拼接器，以及实体加载和资格判定
    """

    kind = "document"
    index_model: Type[SearchIndexEntry] = SearchIndexEntry
    composer_class: Type[ContentComposer] = ContentComposer

    def __init__(self, session: Session, settings: Optional[SearchSettings] = None):
        """
        初始化维护服务

        Args:
            session: SQLModel 数据库会话
            settings: 搜索配置（可选，用于 doc_freq 重算分批大小）
        """
        self.session = session
        self.settings = settings or SearchSettings()
        self.store = SearchIndexRepository(
            session,
            self.index_model,
            chunk_size=self.settings.recompute_chunk_size
        )
        self.composer = self.composer_class()

    # ==================== 子类实现 ====================

    def load(self, document_id: int) -> Optional[Any]:
        """加载实体及拼接所需的关联"""
        raise NotImplementedError

    def is_eligible(self, entity: Any) -> bool:
        raise NotImplementedError

    def eligible_ids(self) -> List[int]:
        """当前所有符合资格的文档 ID（升序）"""
        raise NotImplementedError

    # ==================== 事务 ====================

    @contextmanager
    def _transaction(self, document_id: Optional[int] = None) -> Iterator[None]:
        """
        写锁 + 事务：正常结束时提交，出错时回滚

        存储层错误统一包装为 MaintenanceFailure
        """
        with self.store.write_lock():
            try:
                yield
                self.session.commit()
            except SQLAlchemyError as e:
                self.session.rollback()
                raise MaintenanceFailure(
                    f"Index maintenance failed for {self.kind} {document_id}: {e}",
                    document_id
                ) from e
            except Exception:
                self.session.rollback()
                raise

    # ==================== 单文档维护 ====================

    def index_document(self, document_id: int, strict: bool = True) -> IndexOutcome:
        """
        重建单个文档的索引

        流程：
        1. 加载实体；不存在或不符合资格 -> 移出索引
        2. 加权拼接并分词
        3. 同一事务内：替换条目 + 重算脏词项（旧词项 ∪ 新词项）的 doc_freq

        Args:
            document_id: 文档 ID
            strict: 严格模式下无内容时抛 NoContentError，否则只记录日志

        Returns:
            IndexOutcome：INDEXED / REMOVED / SKIPPED

        Raises:
            NoContentError: 严格模式下文档没有任何可索引词项（旧条目已被清除）
            MaintenanceFailure: 存储错误（事务已回滚）
        """
        entity = self.load(document_id)
        if entity is None or not self.is_eligible(entity):
            self.remove_document(document_id)
            return IndexOutcome.REMOVED

        try:
            vector = self.composer.compose(entity)
        except NoContentError:
            # 无内容的文档不能留下旧条目
            self.remove_document(document_id)
            if strict:
                raise
            logger.info("No indexable content for %s %s, skipped", self.kind, document_id)
            return IndexOutcome.SKIPPED

        with self._transaction(document_id):
            dirty = self.store.replace(document_id, vector.term_freqs, vector.doc_length)
            self.store.recompute_doc_frequencies(dirty)

        logger.debug(
            "Indexed %s %s: %d terms, doc_length=%d",
            self.kind, document_id, len(vector.term_freqs), vector.doc_length
        )
        return IndexOutcome.INDEXED

    def remove_document(self, document_id: int) -> bool:
        """
        删除单个文档的全部索引条目，并重算受影响词项的 doc_freq

        Returns:
            原先存在条目返回 True
        """
        with self._transaction(document_id):
            removed = self.store.remove(document_id)
            if removed:
                self.store.recompute_doc_frequencies(removed)
        if removed:
            logger.debug("Removed %s %s from index (%d terms)", self.kind, document_id, len(removed))
        return bool(removed)

    # ==================== 批量重建 ====================

    def _rebuild_one(self, document_id: int) -> None:
        """批量重建中的单文档写入：只替换条目，doc_freq 留到最后统一重算"""
        entity = self.load(document_id)
        if entity is None or not self.is_eligible(entity):
            raise JobRankError(f"{self.kind} {document_id} is no longer eligible")
        try:
            vector = self.composer.compose(entity)
        except NoContentError:
            with self._transaction(document_id):
                self.store.remove(document_id)
            raise
        with self._transaction(document_id):
            self.store.replace(document_id, vector.term_freqs, vector.doc_length)

    def rebuild(self, fresh: bool = False, progress: Optional[ProgressCallback] = None) -> RebuildReport:
        """
        批量重建索引

        单个文档失败只计入跳过列表，不中断整体重建。
        结束时清理已不符合资格的文档，再全量重算一次 doc_freq。

        Args:
            fresh: 是否先清空整张索引表
            progress: 进度回调（可选）

        Returns:
            RebuildReport 重建报告
        """
        report = RebuildReport(kind=self.kind)

        if fresh:
            with self._transaction():
                self.store.truncate()
            logger.info("Truncated %s index", self.kind)

        eligible = self.eligible_ids()
        total = len(eligible)
        logger.info("Rebuilding %s index for %d documents", self.kind, total)

        for position, document_id in enumerate(eligible, start=1):
            try:
                self._rebuild_one(document_id)
                report.indexed += 1
            except (JobRankError, ValueError) as e:
                logger.warning("Skipped %s %s: %s", self.kind, document_id, e)
                report.skipped[document_id] = str(e)
            except Exception as e:
                # 加载或拼接阶段的意外错误同样只跳过该文档
                self.session.rollback()
                logger.exception("Failed to rebuild %s %s", self.kind, document_id)
                report.skipped[document_id] = f"{type(e).__name__}: {e}"
            if progress is not None:
                progress(position, total, document_id)

        eligible_set = set(eligible)
        with self._transaction():
            stale = sorted(self.store.document_ids() - eligible_set)
            for document_id in stale:
                self.store.remove(document_id)
            self.store.recompute_doc_frequencies()
        report.pruned = len(stale)

        statistics = self.statistics()
        report.unique_terms = statistics.unique_terms
        report.avg_doc_length = statistics.avg_doc_length
        report.total_entries = statistics.total_entries

        logger.info(
            "Rebuilt %s index: indexed=%d skipped=%d pruned=%d unique_terms=%d",
            self.kind, report.indexed, report.skipped_count, report.pruned, report.unique_terms
        )
        return report

    def statistics(self) -> CorpusStatistics:
        return self.store.corpus_statistics()


class JobIndexMaintainer(IndexMaintainer):
    """职位索引维护：只有 active 的职位进入索引"""

    kind = "job"
    index_model = JobSearchIndex
    composer_class = JobContentComposer

    def __init__(self, session: Session, settings: Optional[SearchSettings] = None):
        super().__init__(session, settings)
        self.jobs = JobRepository(session)

    def load(self, document_id: int):
        return self.jobs.get_with_relations(document_id)

    def is_eligible(self, job) -> bool:
        return job.status == JobStatus.ACTIVE

    def eligible_ids(self) -> List[int]:
        return self.jobs.list_indexable_ids()


class CandidateIndexMaintainer(IndexMaintainer):
    """候选人索引维护：只有资料完整且公开的候选人进入索引"""

    kind = "candidate"
    index_model = CandidateSearchIndex
    composer_class = CandidateContentComposer

    def __init__(self, session: Session, settings: Optional[SearchSettings] = None):
        super().__init__(session, settings)
        self.candidates = CandidateRepository(session)

    def load(self, document_id: int):
        return self.candidates.get_with_relations(document_id)

    def is_eligible(self, candidate) -> bool:
        return candidate.is_indexable

    def eligible_ids(self) -> List[int]:
        return self.candidates.list_indexable_ids()
