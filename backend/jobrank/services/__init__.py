"""
服务层模块
索引维护、事件分派、职位搜索、候选人排名
"""

from .index_maintainer import CandidateIndexMaintainer, IndexMaintainer, JobIndexMaintainer
from .index_events import IndexEventDispatcher
from .job_search_service import JobSearchService
from .candidate_ranking_service import CandidateRankingService

__all__ = [
    "IndexMaintainer",
    "JobIndexMaintainer",
    "CandidateIndexMaintainer",
    "IndexEventDispatcher",
    "JobSearchService",
    "CandidateRankingService",
]
