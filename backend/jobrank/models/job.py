"""
职位域模型 - 职位表与职位技能关联表
"""

from datetime import date
from enum import Enum
from typing import List, Optional

from sqlmodel import Column, Field, JSON, Relationship, SQLModel

from .base import TimestampModel
from .catalog import JobCategory, JobRole, JobType, Skill


class JobStatus(str, Enum):
    """职位状态枚举，只有 active 的职位会进入倒排索引"""
    ACTIVE = "active"
    PENDING = "pending"
    INACTIVE = "inactive"


class JobSkill(SQLModel, table=True):
    """职位-技能关联表"""
    __tablename__ = "job_skills"

    job_id: Optional[int] = Field(
        default=None, foreign_key="jobs.id", primary_key=True, ondelete="CASCADE"
    )
    skill_id: Optional[int] = Field(
        default=None, foreign_key="skills.id", primary_key=True, ondelete="CASCADE"
    )


class Job(TimestampModel, table=True):
    """
    职位表
    搜索的文档来源：标题、技能、分类、描述参与索引；标签和公司名不参与
    """
    __tablename__ = "jobs"

    id: Optional[int] = Field(default=None, primary_key=True)

    # 外键：发布公司，候选人排名时用于权限校验
    company_id: int = Field(foreign_key="companies.id", index=True, nullable=False)

    title: str = Field(nullable=False)

    # 描述可能包含 HTML，索引前会剥离标签
    description: str = Field(default="", nullable=False)

    job_category_id: Optional[int] = Field(default=None, foreign_key="job_categories.id", index=True)
    job_role_id: Optional[int] = Field(default=None, foreign_key="job_roles.id")
    job_type_id: Optional[int] = Field(default=None, foreign_key="job_types.id", index=True)

    # 经验等级、地区均为外部字典表的 ID，这里只做筛选
    job_experience_id: Optional[int] = Field(default=None, index=True)
    country_id: Optional[int] = Field(default=None, index=True)
    state_id: Optional[int] = Field(default=None, index=True)
    city_id: Optional[int] = Field(default=None, index=True)

    min_salary: Optional[float] = Field(default=None)
    max_salary: Optional[float] = Field(default=None)

    status: JobStatus = Field(default=JobStatus.PENDING, index=True, nullable=False)

    # 截止日期，过期职位不出现在搜索结果中
    deadline: date = Field(nullable=False)

    # 标签（不参与索引）
    tags: Optional[List[str]] = Field(default_factory=list, sa_column=Column(JSON))

    category: Optional[JobCategory] = Relationship()
    role: Optional[JobRole] = Relationship()
    job_type: Optional[JobType] = Relationship()
    skills: List[Skill] = Relationship(link_model=JobSkill)

    @property
    def skill_names(self) -> List[str]:
        return [skill.name for skill in self.skills if skill.name]
