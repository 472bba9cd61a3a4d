"""
候选人域模型 - 候选人、技能关联、工作经历、教育经历
"""

from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel

from .base import TimestampModel
from .catalog import Profession, Skill


class CandidateSkill(SQLModel, table=True):
    """候选人-技能关联表"""
    __tablename__ = "candidate_skills"

    candidate_id: Optional[int] = Field(
        default=None, foreign_key="candidates.id", primary_key=True, ondelete="CASCADE"
    )
    skill_id: Optional[int] = Field(
        default=None, foreign_key="skills.id", primary_key=True, ondelete="CASCADE"
    )


class Candidate(TimestampModel, table=True):
    """
    候选人表
    只有资料完整且公开（profile_complete 且 visibility）的候选人才会被索引
    """
    __tablename__ = "candidates"

    id: Optional[int] = Field(default=None, primary_key=True)

    full_name: str = Field(nullable=False)

    # 求职头衔，索引权重 2.5x
    title: Optional[str] = Field(default=None)

    # 个人简介，索引权重 1.5x
    bio: Optional[str] = Field(default=None)

    # 隐私字段：永远不参与索引
    email: Optional[str] = Field(default=None)
    phone: Optional[str] = Field(default=None)
    address: Optional[str] = Field(default=None)

    profession_id: Optional[int] = Field(default=None, foreign_key="professions.id")

    # 资格判定字段
    profile_complete: bool = Field(default=False, nullable=False)
    visibility: bool = Field(default=True, nullable=False)

    profession: Optional[Profession] = Relationship()
    skills: List[Skill] = Relationship(link_model=CandidateSkill)
    experiences: List["CandidateExperience"] = Relationship(
        back_populates="candidate",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "CandidateExperience.id",
        },
    )
    educations: List["CandidateEducation"] = Relationship(
        back_populates="candidate",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "CandidateEducation.id",
        },
    )

    @property
    def is_indexable(self) -> bool:
        """资料完整且公开"""
        return bool(self.profile_complete and self.visibility)

    @property
    def skill_names(self) -> List[str]:
        return [skill.name for skill in self.skills if skill.name]


class CandidateExperience(TimestampModel, table=True):
    """候选人工作经历表"""
    __tablename__ = "candidate_experiences"

    id: Optional[int] = Field(default=None, primary_key=True)
    candidate_id: int = Field(foreign_key="candidates.id", index=True, nullable=False, ondelete="CASCADE")

    company: Optional[str] = Field(default=None)

    # 职位名称，索引权重 2x
    designation: Optional[str] = Field(default=None)

    # 工作职责（可能包含 HTML），索引权重 2x
    responsibilities: Optional[str] = Field(default=None)

    candidate: Optional[Candidate] = Relationship(back_populates="experiences")


class CandidateEducation(TimestampModel, table=True):
    """候选人教育经历表"""
    __tablename__ = "candidate_educations"

    id: Optional[int] = Field(default=None, primary_key=True)
    candidate_id: int = Field(foreign_key="candidates.id", index=True, nullable=False, ondelete="CASCADE")

    # 学位，索引权重 1x
    degree: Optional[str] = Field(default=None)
    institution: Optional[str] = Field(default=None)
    year: Optional[int] = Field(default=None)

    candidate: Optional[Candidate] = Relationship(back_populates="educations")
