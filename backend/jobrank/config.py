"""搜索配置模块

从 JSON 配置文件加载 BM25 参数和分页设置，再用系统环境变量覆盖。
配置文件不存在时使用默认值；格式错误或数值非法时直接报错。
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

# 默认路径：从 backend/jobrank/config.py 到 backend/search_config.json
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "search_config.json"

# 环境变量 -> (配置分组, 字段名)
ENV_OVERRIDES = {
    "JOBRANK_BM25_K1": ("bm25", "k1"),
    "JOBRANK_BM25_B": ("bm25", "b"),
    "JOBRANK_JOB_PAGE_SIZE": (None, "job_page_size"),
    "JOBRANK_APPLICANT_PAGE_SIZE": (None, "applicant_page_size"),
}


class BM25Settings(BaseModel):
    """BM25 调参：k1 控制词频饱和，b 控制文档长度归一化强度"""
    k1: float = Field(default=1.2, ge=0)
    b: float = Field(default=0.75, ge=0, le=1)


class SearchSettings(BaseModel):
    """搜索与排名的全部可调参数"""
    bm25: BM25Settings = Field(default_factory=BM25Settings)

    # 职位搜索每页条数
    job_page_size: int = Field(default=8, gt=0)

    # 候选人排名每页条数
    applicant_page_size: int = Field(default=10, gt=0)

    # 增量重算 doc_freq 时每条 UPDATE 覆盖的词项数
    recompute_chunk_size: int = Field(default=500, gt=0)


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    """读取配置文件，文件不存在返回空字典

    Raises:
        ValueError: JSON 格式错误
    """
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"配置文件 JSON 格式错误: {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"配置文件顶层必须是对象: {config_path}")
    return data


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """用环境变量覆盖配置值（只覆盖已设置且非空的变量）"""
    for env_key, (group, field_name) in ENV_OVERRIDES.items():
        raw = os.getenv(env_key)
        if raw is None or raw.strip() == "":
            continue
        target = data.setdefault(group, {}) if group else data
        target[field_name] = raw.strip()
    return data


def load_settings(config_path: Optional[str] = None) -> SearchSettings:
    """加载搜索配置

    Args:
        config_path: 配置文件路径，None 时使用环境变量 JOBRANK_CONFIG 或默认路径

    Returns:
        SearchSettings 实例

    Raises:
        ValueError: 配置文件格式错误或参数值非法
    """
    if config_path is None:
        config_path = os.getenv("JOBRANK_CONFIG") or str(DEFAULT_CONFIG_PATH)

    data = _apply_env_overrides(_read_config_file(Path(config_path)))
    try:
        return SearchSettings.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"搜索配置参数非法: {e}") from e
