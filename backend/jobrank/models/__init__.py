"""
数据库模型模块
导出所有表模型和枚举类型
"""

# 目录域模型
from .catalog import Company, JobCategory, JobRole, JobType, Skill, Profession

# 职位域模型
from .job import Job, JobSkill, JobStatus

# 候选人域模型
from .candidate import Candidate, CandidateSkill, CandidateExperience, CandidateEducation

# 投递域模型
from .application import AppliedJob, ApplicationStatus

# 搜索索引域模型
from .search_index import SearchIndexEntry, JobSearchIndex, CandidateSearchIndex

# 基础模型
from .base import TimestampModel

# 定义导出的内容
__all__ = [
    # 目录域
    "Company", "JobCategory", "JobRole", "JobType", "Skill", "Profession",
    # 职位域
    "Job", "JobSkill", "JobStatus",
    # 候选人域
    "Candidate", "CandidateSkill", "CandidateExperience", "CandidateEducation",
    # 投递域
    "AppliedJob", "ApplicationStatus",
    # 搜索索引域
    "SearchIndexEntry", "JobSearchIndex", "CandidateSearchIndex",
    # 基础模型
    "TimestampModel"
]
