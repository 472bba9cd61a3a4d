"""
实体生命周期事件

每个 (实体, 生命周期阶段) 一个事件类型，只携带实体 ID。
事件由仓储层在业务写入提交后发出，由 IndexEventDispatcher 分派到索引维护逻辑。
删除事件例外：在删除实体之前发出，这样索引条目和 doc_freq 能在外键级联删除之前被正确清理。
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class IndexEvent:
    """事件基类"""


# ==================== 职位事件 ====================

@dataclass(frozen=True)
class JobEvent(IndexEvent):
    job_id: int


@dataclass(frozen=True)
class JobCreated(JobEvent):
    pass


@dataclass(frozen=True)
class JobUpdated(JobEvent):
    pass


@dataclass(frozen=True)
class JobDeleted(JobEvent):
    pass


@dataclass(frozen=True)
class JobSkillsChanged(JobEvent):
    pass


# ==================== 候选人事件 ====================

@dataclass(frozen=True)
class CandidateEvent(IndexEvent):
    candidate_id: int


@dataclass(frozen=True)
class CandidateCreated(CandidateEvent):
    pass


@dataclass(frozen=True)
class CandidateUpdated(CandidateEvent):
    pass


@dataclass(frozen=True)
class CandidateDeleted(CandidateEvent):
    pass


@dataclass(frozen=True)
class CandidateSkillChanged(CandidateEvent):
    pass


@dataclass(frozen=True)
class CandidateExperienceChanged(CandidateEvent):
    pass


@dataclass(frozen=True)
class CandidateEducationChanged(CandidateEvent):
    pass
