"""
排序引擎异常定义

传播策略：
- NoContentError：批量重建时计入跳过列表，事件驱动的增量索引只记录日志
- MaintenanceFailure：索引是可重建的派生数据，永远不向触发它的业务操作传播
- UnauthorizedRankingAccess：直接抛给调用方，作为拒绝处理
语料统计退化（无文档或平均长度为 0）不抛异常，直接走筛选回退路径
"""

from typing import Optional


class JobRankError(Exception):
    """排序引擎异常基类"""


class NoContentError(JobRankError):
    """文档加权拼接并分词后没有任何可索引词项"""

    def __init__(self, document_id: Optional[int], kind: str = "document"):
        self.document_id = document_id
        self.kind = kind
        super().__init__(f"No indexable content found for {kind} {document_id}")


class MaintenanceFailure(JobRankError):
    """倒排索引写入（replace/remove/recompute）时的存储错误"""

    def __init__(self, message: str, document_id: Optional[int] = None):
        self.document_id = document_id
        super().__init__(message)


class UnauthorizedRankingAccess(JobRankError):
    """调用方不是该职位的发布公司，无权查看候选人排名"""

    def __init__(self, job_id: int, company_id: Optional[int]):
        self.job_id = job_id
        self.company_id = company_id
        super().__init__(f"Company {company_id} is not allowed to rank applicants of job {job_id}")
