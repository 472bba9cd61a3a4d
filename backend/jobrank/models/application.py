"""
投递域模型 - 职位申请表
候选人排名的范围：只对已经投递该职位的候选人排序
"""

from enum import Enum
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship

from .base import TimestampModel
from .candidate import Candidate
from .job import Job


class ApplicationStatus(str, Enum):
    """投递状态枚举"""
    UNDER_REVIEW = "under_review"
    SHORTLISTED = "shortlisted"
    CALLED_FOR_INTERVIEW = "called_for_interview"
    REJECTED = "rejected"


class AppliedJob(TimestampModel, table=True):
    """
    职位申请表
    created_at 即投递时间，排名回退时按它倒序
    """
    __tablename__ = "applied_jobs"

    # 同一候选人对同一职位只能投递一次
    __table_args__ = (UniqueConstraint("job_id", "candidate_id", name="uix_job_candidate"),)

    id: Optional[int] = Field(default=None, primary_key=True)

    job_id: int = Field(foreign_key="jobs.id", index=True, nullable=False, ondelete="CASCADE")
    candidate_id: int = Field(foreign_key="candidates.id", index=True, nullable=False, ondelete="CASCADE")

    application_status: ApplicationStatus = Field(
        default=ApplicationStatus.UNDER_REVIEW,
        nullable=False
    )

    notes: Optional[str] = Field(default=None)

    job: Optional[Job] = Relationship()
    candidate: Optional[Candidate] = Relationship()
