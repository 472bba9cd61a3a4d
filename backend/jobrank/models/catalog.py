"""
目录域模型 - 公司、职位分类、角色、类型、技能、职业
被职位和候选人共同引用的字典表
"""

from typing import Optional

from sqlmodel import Field

from .base import TimestampModel


class Company(TimestampModel, table=True):
    """
    公司表
    职位的发布方，候选人排名的访问权限以公司为边界
    """
    __tablename__ = "companies"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False)


class JobCategory(TimestampModel, table=True):
    """职位分类表（参与职位索引，权重 1.5x）"""
    __tablename__ = "job_categories"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False)

    # 搜索筛选时可以使用 slug 代替数字 ID
    slug: str = Field(unique=True, index=True, nullable=False)


class JobRole(TimestampModel, table=True):
    """职位角色表（仅用于候选人排名的查询构造）"""
    __tablename__ = "job_roles"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False)


class JobType(TimestampModel, table=True):
    """职位类型表（全职、兼职等），搜索筛选按 slug 匹配"""
    __tablename__ = "job_types"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False)
    slug: str = Field(unique=True, index=True, nullable=False)


class Skill(TimestampModel, table=True):
    """技能表，职位和候选人通过关联表引用"""
    __tablename__ = "skills"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, nullable=False)


class Profession(TimestampModel, table=True):
    """候选人职业表"""
    __tablename__ = "professions"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False)
