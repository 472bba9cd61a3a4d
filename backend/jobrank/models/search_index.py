"""
搜索索引域模型 - BM25 倒排索引表
职位索引和候选人索引结构完全相同，各自一张表
"""

from typing import Optional

from sqlalchemy import Index, UniqueConstraint
from sqlmodel import Field

from .base import TimestampModel


class SearchIndexEntry(TimestampModel):
    """
    倒排索引条目基类（非表）
    一行对应一个 (term, document_id) 组合

    不变量：
    - doc_length 对同一文档的所有条目相同，且等于该文档 term_freq 之和
    - doc_freq 对同一 term 的所有条目相同，等于包含该 term 的文档数
    """
    id: Optional[int] = Field(default=None, primary_key=True)

    # 规范化后的词项
    term: str = Field(max_length=255, index=True, nullable=False)

    # 词项在该文档加权文本中出现的次数
    term_freq: int = Field(nullable=False)

    # 文档加权文本的总词数
    doc_length: int = Field(nullable=False)

    # 语料中包含该词项的文档数（冗余字段，索引维护后重算）
    doc_freq: int = Field(default=0, nullable=False)


class JobSearchIndex(SearchIndexEntry, table=True):
    """职位倒排索引表"""
    __tablename__ = "job_search_index"

    __table_args__ = (
        UniqueConstraint("term", "document_id", name="uix_job_search_index_term_document"),
        Index("ix_job_search_index_term_doc_freq", "term", "doc_freq"),
    )

    # 外键：职位 ID，职位删除时级联删除
    document_id: int = Field(foreign_key="jobs.id", index=True, nullable=False, ondelete="CASCADE")


class CandidateSearchIndex(SearchIndexEntry, table=True):
    """候选人倒排索引表"""
    __tablename__ = "candidate_search_index"

    __table_args__ = (
        UniqueConstraint("term", "document_id", name="uix_candidate_search_index_term_document"),
        Index("ix_candidate_search_index_term_doc_freq", "term", "doc_freq"),
    )

    # 外键：候选人 ID，候选人删除时级联删除
    document_id: int = Field(foreign_key="candidates.id", index=True, nullable=False, ondelete="CASCADE")
