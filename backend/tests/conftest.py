"""
Pytest 测试配置
提供测试数据库、实体工厂、索引维护服务等测试基础设施
"""

import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Dict, Generator

import pytest
from sqlmodel import Session, create_engine

# 添加项目根目录到 sys.path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from jobrank.config import ENV_OVERRIDES, SearchSettings
from jobrank.db.init_db import create_tables
from jobrank.models import (
    AppliedJob,
    Candidate, CandidateEducation, CandidateExperience,
    Company, JobCategory, JobType, JobRole, Profession, Skill,
    Job, JobStatus,
    JobSearchIndex, CandidateSearchIndex,
)


# ==================== 数据库 Fixtures ====================

@pytest.fixture(scope="function")
def test_db_engine():
    """
    创建测试用的内存数据库引擎
    每个测试函数都会获得一个全新的数据库
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False}
    )

    # 创建所有表
    create_tables(engine)

    yield engine


@pytest.fixture(scope="function")
def test_db_session(test_db_engine) -> Generator[Session, None, None]:
    """
    创建测试用的数据库会话
    """
    with Session(test_db_engine) as session:
        yield session


@pytest.fixture(autouse=True)
def clean_search_env(monkeypatch):
    """清除会影响配置加载的环境变量"""
    for env_key in list(ENV_OVERRIDES) + ["JOBRANK_CONFIG"]:
        monkeypatch.delenv(env_key, raising=False)


@pytest.fixture(scope="function")
def search_settings() -> SearchSettings:
    return SearchSettings()


# ==================== 测试数据 Fixtures ====================

def _save(session: Session, instance):
    session.add(instance)
    session.commit()
    session.refresh(instance)
    return instance


@pytest.fixture(scope="function")
def company(test_db_session: Session) -> Company:
    """职位发布公司"""
    return _save(test_db_session, Company(name="Acme Hiring"))


@pytest.fixture(scope="function")
def other_company(test_db_session: Session) -> Company:
    """另一家公司（用于权限校验）"""
    return _save(test_db_session, Company(name="Other Corp"))


@pytest.fixture(scope="function")
def category(test_db_session: Session) -> JobCategory:
    return _save(test_db_session, JobCategory(name="Engineering", slug="engineering"))


@pytest.fixture(scope="function")
def design_category(test_db_session: Session) -> JobCategory:
    return _save(test_db_session, JobCategory(name="Design", slug="design"))


@pytest.fixture(scope="function")
def full_time(test_db_session: Session) -> JobType:
    return _save(test_db_session, JobType(name="Full Time", slug="full-time"))


@pytest.fixture(scope="function")
def part_time(test_db_session: Session) -> JobType:
    return _save(test_db_session, JobType(name="Part Time", slug="part-time"))


@pytest.fixture(scope="function")
def platform_role(test_db_session: Session) -> JobRole:
    return _save(test_db_session, JobRole(name="Platform"))


@pytest.fixture(scope="function")
def engineer_profession(test_db_session: Session) -> Profession:
    return _save(test_db_session, Profession(name="Engineer"))


@pytest.fixture(scope="function")
def make_skill(test_db_session: Session):
    """
    技能工厂，同名技能只创建一次
    """
    created: Dict[str, Skill] = {}

    def _make(name: str) -> Skill:
        if name not in created:
            created[name] = _save(test_db_session, Skill(name=name))
        return created[name]

    return _make


@pytest.fixture(scope="function")
def make_job(test_db_session: Session, company: Company, make_skill):
    """
    职位工厂

    默认 active、截止日期在 30 天后、属于 company
    """

    def _make(
        title: str,
        description: str = "",
        skills=(),
        status: JobStatus = JobStatus.ACTIVE,
        deadline: date = None,
        **fields
    ) -> Job:
        fields.setdefault("company_id", company.id)
        job = Job(
            title=title,
            description=description,
            status=status,
            deadline=deadline or date.today() + timedelta(days=30),
            **fields
        )
        job.skills = [make_skill(name) for name in skills]
        return _save(test_db_session, job)

    return _make


@pytest.fixture(scope="function")
def make_candidate(test_db_session: Session, make_skill):
    """
    候选人工厂

    默认资料完整且公开；experiences / educations 传字段字典列表
    """

    def _make(
        full_name: str = "Test Candidate",
        skills=(),
        profile_complete: bool = True,
        visibility: bool = True,
        experiences=(),
        educations=(),
        **fields
    ) -> Candidate:
        candidate = Candidate(
            full_name=full_name,
            profile_complete=profile_complete,
            visibility=visibility,
            **fields
        )
        candidate.skills = [make_skill(name) for name in skills]
        candidate.experiences = [CandidateExperience(**item) for item in experiences]
        candidate.educations = [CandidateEducation(**item) for item in educations]
        return _save(test_db_session, candidate)

    return _make


@pytest.fixture(scope="function")
def make_application(test_db_session: Session):
    """投递记录工厂"""

    def _make(job: Job, candidate: Candidate, **fields) -> AppliedJob:
        return _save(test_db_session, AppliedJob(job_id=job.id, candidate_id=candidate.id, **fields))

    return _make


# ==================== Repository / Service Fixtures ====================

@pytest.fixture(scope="function")
def job_index(test_db_session: Session):
    """职位倒排索引 Repository"""
    from jobrank.repositories.search_index_repository import SearchIndexRepository
    return SearchIndexRepository(test_db_session, JobSearchIndex)


@pytest.fixture(scope="function")
def candidate_index(test_db_session: Session):
    """候选人倒排索引 Repository"""
    from jobrank.repositories.search_index_repository import SearchIndexRepository
    return SearchIndexRepository(test_db_session, CandidateSearchIndex)


@pytest.fixture(scope="function")
def job_maintainer(test_db_session: Session, search_settings: SearchSettings):
    from jobrank.services.index_maintainer import JobIndexMaintainer
    return JobIndexMaintainer(test_db_session, search_settings)


@pytest.fixture(scope="function")
def candidate_maintainer(test_db_session: Session, search_settings: SearchSettings):
    from jobrank.services.index_maintainer import CandidateIndexMaintainer
    return CandidateIndexMaintainer(test_db_session, search_settings)


@pytest.fixture(scope="function")
def dispatcher(test_db_session: Session, search_settings: SearchSettings):
    from jobrank.services.index_events import IndexEventDispatcher
    return IndexEventDispatcher(test_db_session, search_settings)


# ==================== Pytest 配置 ====================

def pytest_configure(config):
    """
    Pytest 初始化配置
    """
    # 标记测试分类
    config.addinivalue_line(
        "markers", "unit: Unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests"
    )
    config.addinivalue_line(
        "markers", "slow: Slow running tests"
    )
