"""
jobrank - 招聘平台的 BM25 相关性排序引擎
职位全文搜索 + 按职位要求对投递候选人排序
"""

__version__ = "0.1.0"
