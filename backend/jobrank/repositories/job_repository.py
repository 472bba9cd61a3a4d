"""
职位 Repository
提供 jobs 的增删改查、索引加载和搜索筛选查询
"""

from datetime import date
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import selectinload
from sqlmodel import Session, col, select

from jobrank.events import JobCreated, JobDeleted, JobSkillsChanged, JobUpdated
from jobrank.models.catalog import JobCategory, JobType, Skill
from jobrank.models.job import Job, JobStatus
from jobrank.schemas import SearchFilters

# find_searchable 每条 IN 查询最多携带的职位 ID 数
ID_CHUNK_SIZE = 500


def _with_index_relations(statement):
    """预加载索引拼接需要的关联（技能、分类、角色）"""
    return statement.options(
        selectinload(Job.skills),
        selectinload(Job.category),
        selectinload(Job.role)
    )


class JobRepository:
    """
    职位数据访问对象
    封装所有与 jobs 表相关的数据库操作

    写操作提交后通过 events 发出生命周期事件（events 可选，需提供 dispatch 方法）
    """

    def __init__(self, session: Session, events: Any = None):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
            events: 事件分派器（可选）
        """
        self.session = session
        self.events = events

    def _emit(self, event) -> None:
        if self.events is not None:
            self.events.dispatch(event)

    # ==================== 写操作 ====================

    def create(self, skills: Optional[Sequence[Skill]] = None, **fields) -> Job:
        """
        创建职位

        Args:
            skills: 技能列表（可选）
            **fields: Job 字段

        Returns:
            创建的 Job 对象
        """
        job = Job(**fields)
        if skills:
            job.skills = list(skills)
        self.session.add(job)
        self.session.commit()
        self.session.refresh(job)
        self._emit(JobCreated(job_id=job.id))
        return job

    def update(self, job_id: int, **fields) -> Optional[Job]:
        """
        更新职位字段

        Returns:
            更新后的 Job 对象，不存在则返回 None
        """
        job = self.get_by_id(job_id)
        if job:
            for name, value in fields.items():
                setattr(job, name, value)
            self.session.add(job)
            self.session.commit()
            self.session.refresh(job)
            self._emit(JobUpdated(job_id=job.id))
        return job

    def set_skills(self, job_id: int, skills: Sequence[Skill]) -> Optional[Job]:
        """替换职位的技能列表"""
        job = self.get_by_id(job_id)
        if job:
            job.skills = list(skills)
            self.session.add(job)
            self.session.commit()
            self.session.refresh(job)
            self._emit(JobSkillsChanged(job_id=job.id))
        return job

    def delete(self, job_id: int) -> bool:
        """
        删除职位

        Returns:
            删除成功返回 True，职位不存在返回 False
        """
        job = self.get_by_id(job_id)
        if job:
            # 先清理索引，再删除职位
            self._emit(JobDeleted(job_id=job_id))
            self.session.delete(job)
            self.session.commit()
            return True
        return False

    # ==================== 读操作 ====================

    def get_by_id(self, job_id: int) -> Optional[Job]:
        return self.session.get(Job, job_id)

    def get_with_relations(self, job_id: int) -> Optional[Job]:
        """获取职位并预加载技能、分类、角色"""
        statement = _with_index_relations(select(Job).where(Job.id == job_id))
        return self.session.exec(statement).first()

    def list_indexable_ids(self) -> List[int]:
        statement = select(Job.id).where(Job.status == JobStatus.ACTIVE).order_by(col(Job.id).asc())
        return list(self.session.exec(statement).all())

    def _searchable(self, today: date):
        """active 且未过截止日期的职位"""
        return select(Job).where(
            Job.status == JobStatus.ACTIVE,
            col(Job.deadline) >= today
        )

    def count_searchable(self, today: Optional[date] = None) -> int:
        """可被搜索到的职位数，即职位搜索的语料文档数"""
        today = today or date.today()
        statement = select(func.count()).select_from(self._searchable(today).subquery())
        return self.session.exec(statement).one()

    def apply_filters(self, statement, filters: SearchFilters):
        """
        叠加关系筛选条件

        - 分类：数字按 ID，否则按 slug
        - 职位类型：按 slug；单个 slug 不存在时不筛选，多选时按 IN 匹配
        - 最低薪资：min_salary 或 max_salary 任一不低于该值
        - 最高薪资：max_salary 不高于该值
        """
        if filters.country:
            statement = statement.where(Job.country_id == filters.country)
        if filters.state:
            statement = statement.where(Job.state_id == filters.state)
        if filters.city:
            statement = statement.where(Job.city_id == filters.city)

        if filters.category:
            if filters.category_id is not None:
                statement = statement.where(Job.job_category_id == filters.category_id)
            else:
                statement = statement.where(col(Job.job_category_id).in_(
                    select(JobCategory.id).where(JobCategory.slug == filters.category)
                ))

        if isinstance(filters.jobtype, str):
            # 单个 slug 找不到对应类型时忽略该条件
            job_type_id = self.session.exec(
                select(JobType.id).where(JobType.slug == filters.jobtype)
            ).first()
            if job_type_id is not None:
                statement = statement.where(Job.job_type_id == job_type_id)
        elif filters.jobtype_slugs:
            statement = statement.where(col(Job.job_type_id).in_(
                select(JobType.id).where(col(JobType.slug).in_(filters.jobtype_slugs))
            ))

        if filters.experience:
            statement = statement.where(Job.job_experience_id == filters.experience)

        if filters.min_salary:
            statement = statement.where(or_(
                col(Job.min_salary) >= filters.min_salary,
                col(Job.max_salary) >= filters.min_salary
            ))

        if filters.max_salary:
            statement = statement.where(col(Job.max_salary) <= filters.max_salary)

        return statement

    def filtered_page(
        self,
        filters: SearchFilters,
        page: int,
        per_page: int,
        today: Optional[date] = None
    ) -> Tuple[List[Job], int]:
        """
        不排序的筛选查询（回退路径），按 ID 倒序即发布时间倒序

        Returns:
            (当前页职位列表, 总数)
        """
        today = today or date.today()
        statement = self.apply_filters(self._searchable(today), filters)
        total = self.session.exec(select(func.count()).select_from(statement.subquery())).one()
        items = self.session.exec(
            statement.order_by(col(Job.id).desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        ).all()
        return list(items), total

    def find_searchable(
        self,
        filters: SearchFilters,
        job_ids: Sequence[int],
        today: Optional[date] = None,
        chunk_size: int = ID_CHUNK_SIZE
    ) -> List[Job]:
        """
        在给定 ID 集合内查找满足筛选条件的可搜索职位

        ID 按 chunk_size 分批做 IN 查询，避免超出数据库绑定参数上限
        """
        if not job_ids:
            return []
        today = today or date.today()
        base = self.apply_filters(self._searchable(today), filters)
        ids = list(job_ids)
        found: List[Job] = []
        for start in range(0, len(ids), chunk_size):
            chunk = ids[start:start + chunk_size]
            found.extend(self.session.exec(base.where(col(Job.id).in_(chunk))).all())
        return found
