"""
职位搜索服务

在 BM25 排序和传统筛选之间编排：
1. 查询为空或分词后无词项 -> 传统筛选（按 ID 倒序，SQL 分页）
2. 语料统计退化（无可搜索职位或平均长度为 0）-> 传统筛选
3. BM25 无命中或打分时存储出错 -> 传统筛选
4. 否则：BM25 得分 ∩ (active + 未过期 + 筛选条件) -> 按 (得分降序, ID 升序) 排序 -> 内存分页
"""

from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from jobrank.config import SearchSettings
from jobrank.models.search_index import JobSearchIndex
from jobrank.repositories.job_repository import JobRepository
from jobrank.repositories.search_index_repository import SearchIndexRepository
from jobrank.schemas import Page, ScoredJob, SearchFilters, normalize_page, paginate
from jobrank.search.bm25 import BM25Scorer, rank
from jobrank.search.tokenizer import BASE_STOP_WORDS, Tokenizer
from jobrank.utils.logger import get_logger

logger = get_logger(__name__)


class JobSearchService:
    """
    职位搜索服务

    使用示例：
        service = JobSearchService(session)
        page = service.search("laravel developer", SearchFilters(jobtype="full-time"), page=1)
        for item in page.items:
            print(item.job.title, item.score)
    """

    def __init__(
        self,
        session: Session,
        scorer: Optional[BM25Scorer] = None,
        settings: Optional[SearchSettings] = None
    ):
        """
        初始化服务

        Args:
            session: SQLModel 数据库会话
            scorer: BM25 打分器（可选，默认基于职位索引表创建）
            settings: 搜索配置（可选）
        """
        self.session = session
        self.settings = settings or SearchSettings()
        self.jobs = JobRepository(session)
        self.index = SearchIndexRepository(
            session,
            JobSearchIndex,
            chunk_size=self.settings.recompute_chunk_size
        )
        self.scorer = scorer or BM25Scorer(
            self.index,
            k1=self.settings.bm25.k1,
            b=self.settings.bm25.b
        )
        self.tokenizer = Tokenizer(BASE_STOP_WORDS)

    @property
    def per_page(self) -> int:
        return self.settings.job_page_size

    def search(
        self,
        query: Optional[str],
        filters: Optional[SearchFilters] = None,
        page: int = 1
    ) -> Page[ScoredJob]:
        """
        搜索职位

        Args:
            query: 自由文本查询
            filters: 筛选条件（可选）
            page: 页码（从 1 开始）

        Returns:
            Page[ScoredJob]；回退路径下得分为 0
        """
        filters = filters or SearchFilters()
        terms = self.tokenizer.tokenize(query)
        if not terms:
            return self.filtered_jobs(filters, page)

        today = date.today()
        try:
            total_docs = self.jobs.count_searchable(today)
            statistics = self.index.corpus_statistics()
            if total_docs <= 0 or statistics.avg_doc_length <= 0:
                logger.info("BM25 fallback: no searchable jobs or zero average document length")
                return self.filtered_jobs(filters, page)

            scores = self.scorer.score(terms, total_docs, statistics.avg_doc_length)
            if not scores:
                logger.info("BM25 fallback: no BM25 results for %r", query)
                return self.filtered_jobs(filters, page)

            matched = self.jobs.find_searchable(filters, list(scores), today)
        except SQLAlchemyError:
            logger.exception("BM25 fallback: job search failed for %r", query)
            self.session.rollback()
            return self.filtered_jobs(filters, page)

        jobs_by_id = {job.id: job for job in matched}
        ranked = [
            ScoredJob(job=jobs_by_id[job_id], score=score)
            for job_id, score in rank(scores)
            if job_id in jobs_by_id
        ]
        return paginate(ranked, page, self.per_page)

    def filtered_jobs(self, filters: Optional[SearchFilters] = None, page: int = 1) -> Page[ScoredJob]:
        """
        传统筛选（回退路径）：active 且未过期，按 ID 倒序

        Args:
            filters: 筛选条件（可选）
            page: 页码

        Returns:
            Page[ScoredJob]，得分均为 0
        """
        filters = filters or SearchFilters()
        current_page = normalize_page(page)
        jobs, total = self.jobs.filtered_page(filters, current_page, self.per_page)
        return Page(
            items=[ScoredJob(job=job) for job in jobs],
            total=total,
            per_page=self.per_page,
            current_page=current_page
        )
