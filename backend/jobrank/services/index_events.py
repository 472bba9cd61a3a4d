"""
索引事件分派

把实体生命周期事件映射到索引维护操作。索引是可重建的派生数据，
分派过程中的任何失败都只记录日志，不向触发事件的业务写入传播。

使用示例：
    dispatcher = IndexEventDispatcher(session)
    jobs = JobRepository(session, events=dispatcher)
    jobs.update(job_id, title="Senior Laravel Developer")   # 自动重建该职位索引
"""

from typing import Callable, Dict, Optional, Type

from sqlmodel import Session

from jobrank.config import SearchSettings
from jobrank.events import (
    CandidateCreated,
    CandidateDeleted,
    CandidateEducationChanged,
    CandidateExperienceChanged,
    CandidateSkillChanged,
    CandidateUpdated,
    IndexEvent,
    JobCreated,
    JobDeleted,
    JobSkillsChanged,
    JobUpdated,
)
from jobrank.services.index_maintainer import CandidateIndexMaintainer, JobIndexMaintainer
from jobrank.utils.logger import get_logger

logger = get_logger(__name__)


class IndexEventDispatcher:
    """
    事件分派器

    分派表：事件类型 -> 处理函数。
    创建/更新类事件一律走 index_document（非严格模式），每次都重新判定资格；
    删除事件走 remove_document。
    """

    def __init__(self, session: Session, settings: Optional[SearchSettings] = None):
        self.jobs = JobIndexMaintainer(session, settings)
        self.candidates = CandidateIndexMaintainer(session, settings)

        self._handlers: Dict[Type[IndexEvent], Callable[[IndexEvent], object]] = {
            JobCreated: self._reindex_job,
            JobUpdated: self._reindex_job,
            JobSkillsChanged: self._reindex_job,
            JobDeleted: self._remove_job,
            CandidateCreated: self._reindex_candidate,
            CandidateUpdated: self._reindex_candidate,
            CandidateSkillChanged: self._reindex_candidate,
            CandidateExperienceChanged: self._reindex_candidate,
            CandidateEducationChanged: self._reindex_candidate,
            CandidateDeleted: self._remove_candidate,
        }

    def _reindex_job(self, event):
        return self.jobs.index_document(event.job_id, strict=False)

    def _remove_job(self, event):
        return self.jobs.remove_document(event.job_id)

    def _reindex_candidate(self, event):
        return self.candidates.index_document(event.candidate_id, strict=False)

    def _remove_candidate(self, event):
        return self.candidates.remove_document(event.candidate_id)

    def dispatch(self, event: IndexEvent) -> bool:
        """
        分派一个事件

        Args:
            event: 生命周期事件

        Returns:
            处理成功返回 True；未知事件或处理失败返回 False（从不抛异常）
        """
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.warning("Ignoring unknown index event: %r", event)
            return False

        try:
            outcome = handler(event)
        except Exception:
            logger.exception("Index maintenance failed for event %r", event)
            return False

        logger.debug("Handled %r -> %s", event, outcome)
        return True
