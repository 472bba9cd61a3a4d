"""
数据库初始化单元测试
验证数据库 URL 解析、引擎创建和表结构（包括两张倒排索引表）
"""

import os
from pathlib import Path

from sqlalchemy import inspect
from sqlmodel import Session, create_engine, select

from jobrank.db.init_db import create_tables, get_database_url, get_engine, init_db
from jobrank.models import Job, JobSearchIndex


class TestDatabaseUrl:
    """测试数据库 URL 解析"""

    def test_database_url_env_wins(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/jobrank")
        monkeypatch.setenv("DATABASE_PATH", "/tmp/ignored.db")
        assert get_database_url() == "postgresql://localhost/jobrank"

    def test_absolute_database_path(self, monkeypatch, tmp_path):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        db_file = tmp_path / "jobs.db"
        monkeypatch.setenv("DATABASE_PATH", str(db_file))
        assert get_database_url() == f"sqlite:///{db_file}"

    def test_relative_path_resolves_from_backend(self, monkeypatch):
        """测试相对路径从 backend 目录解析"""
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("DATABASE_PATH", raising=False)

        url = get_database_url()
        backend_dir = Path(__file__).parent.parent.parent
        assert url == f"sqlite:///{backend_dir / 'database.db'}"
        assert os.path.isabs(url[len("sqlite:///"):])


class TestDatabaseInit:
    """测试数据库初始化"""

    def test_create_tables(self):
        """测试创建所有表"""
        engine = create_engine("sqlite:///:memory:", connect_args={"check_same_thread": False})

        create_tables(engine)

        tables = set(inspect(engine).get_table_names())
        assert {
            "companies", "job_categories", "job_roles", "job_types", "skills", "professions",
            "jobs", "job_skills", "candidates", "candidate_skills",
            "candidate_experiences", "candidate_educations", "applied_jobs",
            "job_search_index", "candidate_search_index",
        } <= tables

    def test_search_index_constraints(self):
        """测试倒排索引表的 (term, document_id) 唯一约束"""
        engine = create_engine("sqlite:///:memory:")
        create_tables(engine)

        constraints = inspect(engine).get_unique_constraints("job_search_index")
        assert any(set(item["column_names"]) == {"term", "document_id"} for item in constraints)

    def test_init_db_with_url(self, tmp_path):
        """测试完整的初始化流程"""
        url = f"sqlite:///{tmp_path / 'jobrank.db'}"
        engine = init_db(url)

        assert (tmp_path / "jobrank.db").exists()
        with Session(engine) as session:
            assert session.exec(select(Job)).all() == []
            assert session.exec(select(JobSearchIndex)).all() == []

    def test_get_engine_reads_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'env.db'}")
        engine = get_engine()
        assert engine.url.database == str(tmp_path / "env.db")
