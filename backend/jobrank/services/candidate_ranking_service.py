"""
候选人排名服务

为某个职位的投递者排序：
1. 权限校验：只有发布该职位的公司可以查看排名
2. 以职位本身构造查询（JobQueryComposer），在候选人索引上做 BM25 打分
3. 每个投递者出现且只出现一次，没有得分的记 0 分；同分保持投递顺序
4. 无 BM25 结果或打分出错时，退化为按投递时间倒序
"""

from typing import Dict, List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from jobrank.config import SearchSettings
from jobrank.exceptions import UnauthorizedRankingAccess
from jobrank.models import AppliedJob, Candidate, Job
from jobrank.models.search_index import CandidateSearchIndex
from jobrank.repositories.application_repository import ApplicationRepository
from jobrank.repositories.job_repository import JobRepository
from jobrank.repositories.search_index_repository import SearchIndexRepository
from jobrank.schemas import Page, RankedApplication, RankingStatistics, paginate
from jobrank.search.bm25 import BM25Scorer
from jobrank.search.composer import JobQueryComposer
from jobrank.utils.logger import get_logger

logger = get_logger(__name__)


class CandidateRankingService:
    """
    候选人排名服务

    使用示例：
        service = CandidateRankingService(session)
        page = service.rank_applicants_for_job(job_id=12, company_id=3)
        for item in page.items:
            print(item.rank_position, item.candidate.full_name, item.score)
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
            scorer: BM25 打分器（可选，默认基于候选人索引表创建）
            settings: 搜索配置（可选）
        """
        self.session = session
        self.settings = settings or SearchSettings()
        self.jobs = JobRepository(session)
        self.applications = ApplicationRepository(session)
        self.index = SearchIndexRepository(
            session,
            CandidateSearchIndex,
            chunk_size=self.settings.recompute_chunk_size
        )
        self.scorer = scorer or BM25Scorer(
            self.index,
            k1=self.settings.bm25.k1,
            b=self.settings.bm25.b
        )
        self.query_composer = JobQueryComposer()

    @property
    def per_page(self) -> int:
        return self.settings.applicant_page_size

    # ==================== 排名 ====================

    def rank_candidates_for_job(self, job: Union[Job, int, None]) -> Dict[int, float]:
        """
        以职位为查询，对候选人索引打分

        Args:
            job: Job 对象或职位 ID

        Returns:
            candidate_id -> 得分；职位不存在、无查询词或语料退化时返回空字典
        """
        if isinstance(job, int):
            job = self.jobs.get_with_relations(job)
        if job is None:
            return {}

        terms = self.query_composer.query_terms(job)
        if not terms:
            logger.info("No query terms extracted for job %s", job.id)
            return {}

        statistics = self.index.corpus_statistics()
        if statistics.is_degenerate:
            logger.info("No indexed candidates found for ranking")
            return {}

        return self.scorer.score(terms, statistics.total_docs, statistics.avg_doc_length)

    def rank_applicants_for_job(
        self,
        job_id: int,
        company_id: Optional[int],
        page: int = 1
    ) -> Page[RankedApplication]:
        """
        为职位的投递者排序

        Args:
            job_id: 职位 ID
            company_id: 调用方公司 ID
            page: 页码（从 1 开始）

        Returns:
            Page[RankedApplication]；rank_position 从 1 开始，跨页连续

        Raises:
            UnauthorizedRankingAccess: 调用方不是该职位的发布公司
        """
        job = self.jobs.get_with_relations(job_id)
        if job is None:
            logger.info("Job %s not found, nothing to rank", job_id)
            return Page.empty(self.per_page, page)
        if job.company_id != company_id:
            raise UnauthorizedRankingAccess(job_id, company_id)

        applications = self.applications.list_for_job(job_id)
        if not applications:
            logger.info("No applications found for job %s", job_id)
            return Page.empty(self.per_page, page)

        try:
            scores = self.rank_candidates_for_job(job)
        except SQLAlchemyError:
            logger.exception("Candidate ranking failed for job %s, falling back", job_id)
            self.session.rollback()
            scores = {}

        if not scores:
            logger.info("No BM25 results for job %s, falling back to chronological order", job_id)
            return self._chronological(applications, page)

        # sorted 是稳定排序，同分保持投递顺序
        ordered = sorted(applications, key=lambda application: -scores.get(application.candidate_id, 0.0))
        ranked = [
            RankedApplication(
                application=application,
                score=scores.get(application.candidate_id, 0.0),
                rank_position=position
            )
            for position, application in enumerate(ordered, start=1)
        ]
        return paginate(ranked, page, self.per_page)

    def _chronological(self, applications: List[AppliedJob], page: int) -> Page[RankedApplication]:
        """回退路径：按投递时间倒序（同一时间按 ID 倒序），得分为 0"""
        ordered = sorted(
            applications,
            key=lambda application: (application.created_at, application.id),
            reverse=True
        )
        ranked = [
            RankedApplication(application=application, score=0.0, rank_position=position)
            for position, application in enumerate(ordered, start=1)
        ]
        return paginate(ranked, page, self.per_page)

    # ==================== 技能匹配 ====================

    def get_matching_skills(self, candidate: Candidate, job: Job) -> List[str]:
        """
        候选人与职位共同拥有的技能（忽略大小写，按候选人技能顺序）

        Returns:
            技能名称列表（候选人一侧的写法）
        """
        job_skills = {name.lower() for name in job.skill_names}
        return [name for name in candidate.skill_names if name.lower() in job_skills]

    def calculate_skill_match_percentage(self, candidate: Candidate, job: Job) -> float:
        """
        候选人覆盖了职位技能的百分比，保留一位小数

        职位没有技能要求时返回 0
        """
        job_skill_count = len({name.lower() for name in job.skill_names})
        if job_skill_count == 0:
            return 0.0
        matching = {name.lower() for name in self.get_matching_skills(candidate, job)}
        return round(len(matching) / job_skill_count * 100, 1)

    # ==================== 统计 ====================

    def get_ranking_statistics(self, job_id: int) -> RankingStatistics:
        """
        职位排名的覆盖情况

        ranked_candidates 只统计投递者中获得 BM25 得分的人数

        Returns:
            RankingStatistics；查询出错时返回全 0
        """
        try:
            total_applications = self.applications.count_for_job(job_id)
            indexed_candidates = self.index.corpus_statistics().total_docs
            scores = self.rank_candidates_for_job(job_id)
            applicant_ids = {application.candidate_id for application in self.applications.list_for_job(job_id)}
        except SQLAlchemyError:
            logger.exception("Failed to collect ranking statistics for job %s", job_id)
            self.session.rollback()
            return RankingStatistics()

        ranked_candidates = len(applicant_ids & set(scores))
        coverage = round(ranked_candidates / total_applications * 100, 1) if total_applications else 0.0
        return RankingStatistics(
            total_applications=total_applications,
            indexed_candidates=indexed_candidates,
            ranked_candidates=ranked_candidates,
            ranking_coverage=coverage
        )
