"""
索引事件分派单元测试
验证仓储写操作通过事件驱动索引维护，且分派从不抛异常
"""

from dataclasses import dataclass
from datetime import date, timedelta

import pytest

from jobrank.events import CandidateUpdated, IndexEvent, JobCreated, JobUpdated
from jobrank.exceptions import MaintenanceFailure
from jobrank.models import JobStatus
from jobrank.repositories import CandidateRepository, JobRepository


@dataclass(frozen=True)
class UnknownEvent(IndexEvent):
    value: int = 0


@pytest.fixture
def jobs(test_db_session, dispatcher):
    return JobRepository(test_db_session, events=dispatcher)


@pytest.fixture
def candidates(test_db_session, dispatcher):
    return CandidateRepository(test_db_session, events=dispatcher)


def index_terms(index, document_id):
    return {entry.term for entry in index.entries_for_document(document_id)}


class TestJobEvents:
    """测试职位生命周期事件"""

    def test_create_update_delete(self, jobs, job_index, company, make_skill):
        """测试创建、更新、换技能、删除职位时索引同步变化"""
        deadline = date.today() + timedelta(days=10)
        job = jobs.create(
            company_id=company.id,
            title="Laravel Developer",
            status=JobStatus.ACTIVE,
            deadline=deadline,
        )
        job_id = job.id
        assert index_terms(job_index, job_id) == {"laravel", "developer"}

        jobs.update(job_id, title="Django Developer")
        assert index_terms(job_index, job_id) == {"django", "developer"}

        jobs.set_skills(job_id, [make_skill("Python")])
        assert "python" in index_terms(job_index, job_id)

        assert jobs.delete(job_id) is True
        assert job_index.entries_for_document(job_id) == []
        assert job_index.document_ids() == set()

    def test_pending_job_enters_index_when_activated(self, jobs, job_index, company):
        """测试职位从 pending 变为 active 时进入索引"""
        job = jobs.create(
            company_id=company.id,
            title="Go Engineer",
            deadline=date.today() + timedelta(days=10),
        )
        assert job.status == JobStatus.PENDING
        assert job_index.entries_for_document(job.id) == []

        jobs.update(job.id, status=JobStatus.ACTIVE)
        assert index_terms(job_index, job.id) == {"go", "engineer"}

        jobs.update(job.id, status=JobStatus.INACTIVE)
        assert job_index.entries_for_document(job.id) == []

    def test_delete_recomputes_doc_freq(self, jobs, job_index, company):
        """测试删除职位后共享词项的 doc_freq 减少"""
        deadline = date.today() + timedelta(days=10)
        first = jobs.create(company_id=company.id, title="Go Developer", status=JobStatus.ACTIVE, deadline=deadline)
        second = jobs.create(company_id=company.id, title="Rust Developer", status=JobStatus.ACTIVE, deadline=deadline)

        jobs.delete(second.id)

        entries = {entry.term: entry.doc_freq for entry in job_index.entries_for_document(first.id)}
        assert entries == {"go": 1, "developer": 1}


class TestCandidateEvents:
    """测试候选人生命周期事件"""

    def test_related_entity_changes_reindex(self, candidates, candidate_index, make_skill):
        """测试技能、经历、教育变化都会触发重建"""
        candidate = candidates.create(full_name="Asha", profile_complete=True, skills=[make_skill("Go")])
        candidate_id = candidate.id
        assert index_terms(candidate_index, candidate_id) == {"go"}

        candidates.add_skill(candidate_id, make_skill("Terraform"))
        assert index_terms(candidate_index, candidate_id) == {"go", "terraform"}

        experience = candidates.add_experience(candidate_id, designation="Kubernetes Administrator")
        assert {"kubernetes", "administrator"} <= index_terms(candidate_index, candidate_id)

        candidates.update_experience(experience.id, designation="Cloud Architect")
        terms = index_terms(candidate_index, candidate_id)
        assert "kubernetes" not in terms
        assert "architect" in terms

        education = candidates.add_education(candidate_id, degree="MSc Informatics")
        assert "informatics" in index_terms(candidate_index, candidate_id)

        candidates.delete_education(education.id)
        assert "informatics" not in index_terms(candidate_index, candidate_id)

        terraform = make_skill("Terraform")
        assert candidates.remove_skill(candidate_id, terraform.id) is True
        assert "terraform" not in index_terms(candidate_index, candidate_id)

    def test_visibility_toggle(self, candidates, candidate_index, make_skill):
        """测试隐藏资料后候选人条目被清除"""
        candidate = candidates.create(full_name="Bikash", profile_complete=True, skills=[make_skill("Go")])
        assert candidate_index.entries_for_document(candidate.id)

        candidates.update(candidate.id, visibility=False)
        assert candidate_index.entries_for_document(candidate.id) == []

    def test_delete_candidate(self, candidates, candidate_index, make_skill):
        candidate = candidates.create(full_name="Chandra", profile_complete=True, skills=[make_skill("Go")])
        candidate_id = candidate.id

        assert candidates.delete(candidate_id) is True
        assert candidate_index.entries_for_document(candidate_id) == []

    def test_candidate_without_content_is_skipped(self, candidates, candidate_index):
        """测试没有可索引内容的候选人不会让写操作失败"""
        candidate = candidates.create(full_name="Empty Profile", profile_complete=True)
        assert candidate.id is not None
        assert candidate_index.entries_for_document(candidate.id) == []


class TestDispatcher:
    """测试分派器本身"""

    def test_unknown_event_is_ignored(self, dispatcher):
        assert dispatcher.dispatch(UnknownEvent()) is False

    def test_handler_failure_is_swallowed(self, dispatcher, monkeypatch):
        """测试处理失败只记录日志并返回 False"""

        def broken(document_id, strict=True):
            raise MaintenanceFailure("database is locked", document_id)

        monkeypatch.setattr(dispatcher.jobs, "index_document", broken)
        assert dispatcher.dispatch(JobUpdated(job_id=1)) is False

    def test_unexpected_error_is_swallowed(self, dispatcher, monkeypatch):
        def broken(document_id, strict=True):
            raise RuntimeError("unexpected")

        monkeypatch.setattr(dispatcher.candidates, "index_document", broken)
        assert dispatcher.dispatch(CandidateUpdated(candidate_id=1)) is False

    def test_event_path_is_lenient(self, dispatcher, make_job, job_index):
        """测试事件路径对无内容职位不抛异常"""
        job = make_job("a")
        assert dispatcher.dispatch(JobCreated(job_id=job.id)) is True
        assert job_index.entries_for_document(job.id) == []

    def test_business_write_survives_index_failure(self, test_db_session, dispatcher, company, monkeypatch):
        """测试索引失败不影响业务写入"""

        def broken(document_id, strict=True):
            raise MaintenanceFailure("index unavailable", document_id)

        monkeypatch.setattr(dispatcher.jobs, "index_document", broken)
        jobs = JobRepository(test_db_session, events=dispatcher)
        job = jobs.create(
            company_id=company.id,
            title="Go Engineer",
            status=JobStatus.ACTIVE,
            deadline=date.today() + timedelta(days=5),
        )
        assert jobs.get_by_id(job.id).title == "Go Engineer"
