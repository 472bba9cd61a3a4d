"""
数据库初始化脚本
负责创建数据库引擎和表结构（业务表 + 两张倒排索引表）
"""

import os
from pathlib import Path

from sqlmodel import SQLModel, create_engine

# 导入模型以注册到 SQLModel.metadata
from jobrank import models  # noqa: F401
from jobrank.utils.logger import get_logger

logger = get_logger(__name__)


def get_database_url() -> str:
    """
    获取数据库连接 URL
    优先使用环境变量 DATABASE_URL，其次 DATABASE_PATH，否则使用默认的 SQLite 文件
    """
    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        return database_url

    db_path = os.environ.get("DATABASE_PATH", "database.db")
    # 确保路径是绝对路径
    if not os.path.isabs(db_path):
        # 从 backend 目录解析
        project_root = Path(__file__).parent.parent.parent
        db_path = str(project_root / db_path)
    return f"sqlite:///{db_path}"


def get_engine(database_url: str = None):
    """
    创建并返回数据库引擎

    Args:
        database_url: 数据库 URL（可选，默认读取环境变量）
    """
    database_url = database_url or get_database_url()
    connect_args = {}
    if database_url.startswith("sqlite"):
        # SQLite 特有配置
        connect_args["check_same_thread"] = False
    engine = create_engine(
        database_url,
        echo=False,  # 设置为 True 可查看 SQL 语句
        connect_args=connect_args
    )
    return engine


def create_tables(engine) -> None:
    """
    创建所有数据库表
    SQLModel 会自动根据模型创建表结构
    """
    SQLModel.metadata.create_all(engine)
    logger.info("Database tables created successfully at %s", engine.url)


def init_db(database_url: str = None):
    """
    完整的数据库初始化流程
    1. 创建数据库引擎
    2. 创建所有表结构

    Returns:
        创建好的引擎
    """
    engine = get_engine(database_url)
    create_tables(engine)
    return engine


if __name__ == "__main__":
    # 直接运行此脚本时，执行数据库初始化
    init_db()
