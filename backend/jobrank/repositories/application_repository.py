"""
投递记录 Repository
提供 applied_jobs 的增删改查操作
"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import selectinload
from sqlmodel import Session, col, select

from jobrank.models.application import ApplicationStatus, AppliedJob
from jobrank.models.candidate import Candidate


class ApplicationRepository:
    """
    投递记录数据访问对象
    封装所有与 applied_jobs 表相关的数据库操作
    """

    def __init__(self, session: Session):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
        """
        self.session = session

    def create(
        self,
        job_id: int,
        candidate_id: int,
        application_status: ApplicationStatus = ApplicationStatus.UNDER_REVIEW,
        notes: Optional[str] = None
    ) -> AppliedJob:
        """
        创建投递记录

        Args:
            job_id: 职位 ID
            candidate_id: 候选人 ID
            application_status: 投递状态
            notes: 备注（可选）

        Returns:
            创建的 AppliedJob 对象
        """
        application = AppliedJob(
            job_id=job_id,
            candidate_id=candidate_id,
            application_status=application_status,
            notes=notes
        )
        self.session.add(application)
        self.session.commit()
        self.session.refresh(application)
        return application

    def get_by_id(self, application_id: int) -> Optional[AppliedJob]:
        return self.session.get(AppliedJob, application_id)

    def list_for_job(self, job_id: int) -> List[AppliedJob]:
        """
        获取职位的全部投递记录（预加载候选人及其技能）

        按投递 ID 升序返回，即投递顺序；排名同分时保持这个顺序

        Args:
            job_id: 职位 ID

        Returns:
            AppliedJob 列表
        """
        statement = (
            select(AppliedJob)
            .where(AppliedJob.job_id == job_id)
            .options(
                selectinload(AppliedJob.candidate).selectinload(Candidate.skills),
                selectinload(AppliedJob.candidate).selectinload(Candidate.profession)
            )
            .order_by(col(AppliedJob.id).asc())
        )
        return list(self.session.exec(statement).all())

    def count_for_job(self, job_id: int) -> int:
        statement = select(func.count()).select_from(AppliedJob).where(AppliedJob.job_id == job_id)
        return self.session.exec(statement).one()

    def update_status(
        self,
        application_id: int,
        application_status: ApplicationStatus
    ) -> Optional[AppliedJob]:
        """
        更新投递状态

        Returns:
            更新后的 AppliedJob 对象，不存在则返回 None
        """
        application = self.get_by_id(application_id)
        if application:
            application.application_status = application_status
            self.session.add(application)
            self.session.commit()
            self.session.refresh(application)
        return application
