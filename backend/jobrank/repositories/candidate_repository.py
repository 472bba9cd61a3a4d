"""
候选人 Repository
提供 candidates 及其技能、工作经历、教育经历的增删改查
"""

from typing import Any, List, Optional, Sequence

from sqlalchemy.orm import selectinload
from sqlmodel import Session, col, select

from jobrank.events import (
    CandidateCreated,
    CandidateDeleted,
    CandidateEducationChanged,
    CandidateExperienceChanged,
    CandidateSkillChanged,
    CandidateUpdated,
)
from jobrank.models.candidate import Candidate, CandidateEducation, CandidateExperience
from jobrank.models.catalog import Skill


def _indexable_clause():
    return (col(Candidate.profile_complete).is_(True), col(Candidate.visibility).is_(True))


class CandidateRepository:
    """
    候选人数据访问对象
    封装所有与 candidates 及其子表相关的数据库操作

    写操作提交后通过 events 发出生命周期事件
    """

    def __init__(self, session: Session, events: Any = None):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
            events: 事件分派器（可选，需提供 dispatch 方法）
        """
        self.session = session
        self.events = events

    def _emit(self, event) -> None:
        if self.events is not None:
            self.events.dispatch(event)

    def _commit(self, *instances) -> None:
        for instance in instances:
            self.session.add(instance)
        self.session.commit()
        for instance in instances:
            self.session.refresh(instance)

    # ==================== 候选人 ====================

    def create(self, skills: Optional[Sequence[Skill]] = None, **fields) -> Candidate:
        """
        创建候选人

        Args:
            skills: 技能列表（可选）
            **fields: Candidate 字段

        Returns:
            创建的 Candidate 对象
        """
        candidate = Candidate(**fields)
        if skills:
            candidate.skills = list(skills)
        self._commit(candidate)
        self._emit(CandidateCreated(candidate_id=candidate.id))
        return candidate

    def update(self, candidate_id: int, **fields) -> Optional[Candidate]:
        """
        更新候选人字段（包括 profile_complete、visibility 这类资格字段）

        Returns:
            更新后的 Candidate 对象，不存在则返回 None
        """
        candidate = self.get_by_id(candidate_id)
        if candidate:
            for name, value in fields.items():
                setattr(candidate, name, value)
            self._commit(candidate)
            self._emit(CandidateUpdated(candidate_id=candidate.id))
        return candidate

    def delete(self, candidate_id: int) -> bool:
        """
        删除候选人（经历、教育随之级联删除）

        Returns:
            删除成功返回 True，候选人不存在返回 False
        """
        candidate = self.get_by_id(candidate_id)
        if candidate:
            # 先清理索引，再删除候选人
            self._emit(CandidateDeleted(candidate_id=candidate_id))
            self.session.delete(candidate)
            self.session.commit()
            return True
        return False

    def get_by_id(self, candidate_id: int) -> Optional[Candidate]:
        return self.session.get(Candidate, candidate_id)

    def get_with_relations(self, candidate_id: int) -> Optional[Candidate]:
        """获取候选人并预加载技能、经历、教育、职业"""
        statement = (
            select(Candidate)
            .where(Candidate.id == candidate_id)
            .options(
                selectinload(Candidate.skills),
                selectinload(Candidate.experiences),
                selectinload(Candidate.educations),
                selectinload(Candidate.profession)
            )
        )
        return self.session.exec(statement).first()

    def list_indexable_ids(self) -> List[int]:
        """资料完整且公开的候选人 ID，按 ID 升序"""
        statement = (
            select(Candidate.id)
            .where(*_indexable_clause())
            .order_by(col(Candidate.id).asc())
        )
        return list(self.session.exec(statement).all())

    # ==================== 技能 ====================

    def set_skills(self, candidate_id: int, skills: Sequence[Skill]) -> Optional[Candidate]:
        """替换候选人的技能列表"""
        candidate = self.get_by_id(candidate_id)
        if candidate:
            candidate.skills = list(skills)
            self._commit(candidate)
            self._emit(CandidateSkillChanged(candidate_id=candidate.id))
        return candidate

    def add_skill(self, candidate_id: int, skill: Skill) -> Optional[Candidate]:
        """追加一个技能（已存在则不重复添加）"""
        candidate = self.get_by_id(candidate_id)
        if candidate:
            if skill not in candidate.skills:
                candidate.skills.append(skill)
            self._commit(candidate)
            self._emit(CandidateSkillChanged(candidate_id=candidate.id))
        return candidate

    def remove_skill(self, candidate_id: int, skill_id: int) -> bool:
        """
        移除一个技能

        Returns:
            技能存在并被移除返回 True
        """
        candidate = self.get_by_id(candidate_id)
        if not candidate:
            return False
        remaining = [skill for skill in candidate.skills if skill.id != skill_id]
        if len(remaining) == len(candidate.skills):
            return False
        candidate.skills = remaining
        self._commit(candidate)
        self._emit(CandidateSkillChanged(candidate_id=candidate.id))
        return True

    # ==================== 工作经历 ====================

    def add_experience(self, candidate_id: int, **fields) -> CandidateExperience:
        """
        新增工作经历

        Args:
            candidate_id: 候选人 ID
            **fields: company、designation、responsibilities

        Returns:
            创建的 CandidateExperience 对象
        """
        experience = CandidateExperience(candidate_id=candidate_id, **fields)
        self._commit(experience)
        self._emit(CandidateExperienceChanged(candidate_id=candidate_id))
        return experience

    def update_experience(self, experience_id: int, **fields) -> Optional[CandidateExperience]:
        experience = self.session.get(CandidateExperience, experience_id)
        if experience:
            for name, value in fields.items():
                setattr(experience, name, value)
            self._commit(experience)
            self._emit(CandidateExperienceChanged(candidate_id=experience.candidate_id))
        return experience

    def delete_experience(self, experience_id: int) -> bool:
        experience = self.session.get(CandidateExperience, experience_id)
        if not experience:
            return False
        candidate_id = experience.candidate_id
        self.session.delete(experience)
        self.session.commit()
        self._emit(CandidateExperienceChanged(candidate_id=candidate_id))
        return True

    # ==================== 教育经历 ====================

    def add_education(self, candidate_id: int, **fields) -> CandidateEducation:
        """
        新增教育经历

        Args:
            candidate_id: 候选人 ID
            **fields: degree、institution、year

        Returns:
            创建的 CandidateEducation 对象
        """
        education = CandidateEducation(candidate_id=candidate_id, **fields)
        self._commit(education)
        self._emit(CandidateEducationChanged(candidate_id=candidate_id))
        return education

    def delete_education(self, education_id: int) -> bool:
        education = self.session.get(CandidateEducation, education_id)
        if not education:
            return False
        candidate_id = education.candidate_id
        self.session.delete(education)
        self.session.commit()
        self._emit(CandidateEducationChanged(candidate_id=candidate_id))
        return True
