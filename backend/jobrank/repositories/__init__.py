"""
Repository 层模块
提供数据访问抽象，封装数据库操作
"""

from .job_repository import JobRepository
from .candidate_repository import CandidateRepository
from .application_repository import ApplicationRepository
from .search_index_repository import SearchIndexRepository

__all__ = [
    "JobRepository",
    "CandidateRepository",
    "ApplicationRepository",
    "SearchIndexRepository",
]
