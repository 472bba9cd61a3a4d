"""
服务层输入输出结构

- SearchFilters：职位搜索的关系筛选条件（pydantic 校验外部输入）
- Page / ScoredJob / RankedApplication：分页排序结果
- RebuildReport / RankingStatistics：运维统计
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Generic, List, Optional, Sequence, TypeVar, Union

from pydantic import BaseModel, Field, field_validator

from jobrank.models import AppliedJob, Candidate, Job

T = TypeVar("T")


class SearchFilters(BaseModel):
    """
    职位搜索筛选条件

    空值（None、0、空串、空列表）表示不筛选
    """
    country: Optional[int] = Field(default=None, description="国家 ID")
    state: Optional[int] = Field(default=None, description="省/州 ID")
    city: Optional[int] = Field(default=None, description="城市 ID")
    category: Optional[Union[int, str]] = Field(default=None, description="分类 ID 或 slug")
    jobtype: Optional[Union[str, List[str]]] = Field(default=None, description="职位类型 slug（可多选）")
    experience: Optional[int] = Field(default=None, description="经验等级 ID")
    min_salary: Optional[float] = Field(default=None, ge=0)
    max_salary: Optional[float] = Field(default=None, ge=0)

    @field_validator("country", "state", "city", "experience", "category", "jobtype", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        # 表单里的空串、0 都视为未筛选
        if value in ("", 0, "0", []):
            return None
        return value

    @property
    def category_id(self) -> Optional[int]:
        """分类筛选是数字时返回 ID，否则返回 None（按 slug 筛选）"""
        if isinstance(self.category, int):
            return self.category
        if isinstance(self.category, str) and self.category.isdigit():
            return int(self.category)
        return None

    @property
    def jobtype_slugs(self) -> List[str]:
        if not self.jobtype:
            return []
        if isinstance(self.jobtype, str):
            return [self.jobtype]
        return list(self.jobtype)


def normalize_page(page: Optional[int]) -> int:
    """页码从 1 开始，非法值视为第 1 页"""
    try:
        page = int(page or 1)
    except (TypeError, ValueError):
        return 1
    return max(page, 1)


@dataclass
class Page(Generic[T]):
    """一页结果"""
    items: List[T]
    total: int
    per_page: int
    current_page: int = 1

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page)) if self.per_page else 1

    @property
    def has_more(self) -> bool:
        return self.current_page < self.last_page

    @property
    def offset(self) -> int:
        return (self.current_page - 1) * self.per_page

    @classmethod
    def empty(cls, per_page: int, page: int = 1) -> "Page[T]":
        return cls(items=[], total=0, per_page=per_page, current_page=normalize_page(page))


def paginate(items: Sequence[T], page: Optional[int], per_page: int) -> Page[T]:
    """对已排序的序列做内存分页"""
    current_page = normalize_page(page)
    offset = (current_page - 1) * per_page
    return Page(
        items=list(items[offset:offset + per_page]),
        total=len(items),
        per_page=per_page,
        current_page=current_page,
    )


@dataclass
class ScoredJob:
    """带 BM25 得分的职位（回退路径得分为 0）"""
    job: Job
    score: float = 0.0


@dataclass
class RankedApplication:
    """带排名的投递记录"""
    application: AppliedJob
    score: float
    rank_position: int

    @property
    def candidate(self) -> Optional[Candidate]:
        return self.application.candidate


@dataclass
class RankingStatistics:
    """职位候选人排名的覆盖情况"""
    total_applications: int = 0
    indexed_candidates: int = 0
    ranked_candidates: int = 0
    ranking_coverage: float = 0.0


class IndexOutcome(str, Enum):
    """单个文档索引维护的结果"""
    INDEXED = "indexed"
    REMOVED = "removed"
    SKIPPED = "skipped"


@dataclass
class RebuildReport:
    """批量重建报告"""
    kind: str
    indexed: int = 0
    skipped: Dict[int, str] = field(default_factory=dict)
    pruned: int = 0
    unique_terms: int = 0
    avg_doc_length: float = 0.0
    total_entries: int = 0

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)
