"""
jobrank 命令行入口

子命令：
- init-db                          创建数据库表
- index jobs|candidates [--fresh]  批量重建倒排索引
- search QUERY                     BM25 职位搜索
- rank JOB_ID --company-id C       为职位的投递者排序
- stats jobs|candidates            查看索引统计
"""

import argparse
import sys
from typing import List, Optional

from sqlmodel import Session

from jobrank.config import load_settings
from jobrank.db.init_db import get_engine, init_db
from jobrank.exceptions import JobRankError, UnauthorizedRankingAccess
from jobrank.schemas import SearchFilters
from jobrank.services.candidate_ranking_service import CandidateRankingService
from jobrank.services.index_maintainer import CandidateIndexMaintainer, JobIndexMaintainer
from jobrank.services.job_search_service import JobSearchService

MAINTAINERS = {
    "jobs": JobIndexMaintainer,
    "candidates": CandidateIndexMaintainer,
}

# 重建时每处理多少个文档打印一次进度
PROGRESS_EVERY = 50


def _print_progress(position: int, total: int, document_id: int) -> None:
    if position % PROGRESS_EVERY == 0 or position == total:
        print(f"[index] {position}/{total} (last id {document_id})")


def cmd_init_db(args: argparse.Namespace, settings) -> int:
    engine = init_db(args.database_url)
    print(f"[init-db] 数据库表已创建: {engine.url}")
    return 0


def cmd_index(args: argparse.Namespace, settings) -> int:
    """批量重建索引并打印报告"""
    with Session(get_engine(args.database_url)) as session:
        maintainer = MAINTAINERS[args.target](session, settings)
        report = maintainer.rebuild(fresh=args.fresh, progress=_print_progress)

    print(f"[index] {report.kind} 索引重建完成")
    print(f"  indexed:        {report.indexed}")
    print(f"  skipped:        {report.skipped_count}")
    print(f"  pruned:         {report.pruned}")
    print(f"  unique terms:   {report.unique_terms}")
    print(f"  avg doc length: {report.avg_doc_length:.2f}")
    print(f"  total entries:  {report.total_entries}")
    for document_id, reason in sorted(report.skipped.items()):
        print(f"  - skipped {document_id}: {reason}")
    return 0


def cmd_search(args: argparse.Namespace, settings) -> int:
    filters = SearchFilters(
        country=args.country,
        state=args.state,
        city=args.city,
        category=args.category,
        jobtype=args.jobtype,
        experience=args.experience,
        min_salary=args.min_salary,
        max_salary=args.max_salary,
    )
    with Session(get_engine(args.database_url)) as session:
        service = JobSearchService(session, settings=settings)
        service.scorer.set_parameters(k1=args.k1, b=args.b)
        page = service.search(args.query, filters, page=args.page)

        print(f"[search] {page.total} 个结果，第 {page.current_page}/{page.last_page} 页")
        for offset, item in enumerate(page.items, start=page.offset + 1):
            print(f"{offset:3d}. #{item.job.id} {item.job.title}  score={item.score:.4f}")
    return 0


def cmd_rank(args: argparse.Namespace, settings) -> int:
    with Session(get_engine(args.database_url)) as session:
        service = CandidateRankingService(session, settings=settings)
        service.scorer.set_parameters(k1=args.k1, b=args.b)
        try:
            page = service.rank_applicants_for_job(args.job_id, args.company_id, page=args.page)
        except UnauthorizedRankingAccess as e:
            print(f"[rank] 拒绝访问: {e}", file=sys.stderr)
            return 1

        print(f"[rank] 职位 #{args.job_id} 共 {page.total} 个投递者，第 {page.current_page}/{page.last_page} 页")
        for item in page.items:
            candidate = item.candidate
            name = candidate.full_name if candidate else "?"
            print(f"{item.rank_position:3d}. {name} (candidate #{item.application.candidate_id})  score={item.score:.4f}")
    return 0


def cmd_stats(args: argparse.Namespace, settings) -> int:
    with Session(get_engine(args.database_url)) as session:
        statistics = MAINTAINERS[args.target](session, settings).statistics()

    print(f"[stats] {args.target}")
    print(f"  documents:      {statistics.total_docs}")
    print(f"  avg doc length: {statistics.avg_doc_length:.2f}")
    print(f"  unique terms:   {statistics.unique_terms}")
    print(f"  total entries:  {statistics.total_entries}")
    return 0


def _add_bm25_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--page", type=int, default=1, help="页码（从 1 开始）")
    parser.add_argument("--k1", type=float, default=None, help="BM25 k1（覆盖配置）")
    parser.add_argument("--b", type=float, default=None, help="BM25 b（覆盖配置）")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobrank", description="BM25 job search and applicant ranking")
    parser.add_argument("--database-url", default=None, help="数据库 URL（默认读取 DATABASE_URL / DATABASE_PATH）")
    parser.add_argument("--config", default=None, help="搜索配置 JSON 文件路径")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_cmd = subparsers.add_parser("init-db", help="创建数据库表")
    init_cmd.set_defaults(func=cmd_init_db)

    index_cmd = subparsers.add_parser("index", help="批量重建倒排索引")
    index_cmd.add_argument("target", choices=sorted(MAINTAINERS))
    index_cmd.add_argument("--fresh", action="store_true", help="重建前清空索引表")
    index_cmd.set_defaults(func=cmd_index)

    search_cmd = subparsers.add_parser("search", help="搜索职位")
    search_cmd.add_argument("query")
    _add_bm25_arguments(search_cmd)
    search_cmd.add_argument("--country", type=int)
    search_cmd.add_argument("--state", type=int)
    search_cmd.add_argument("--city", type=int)
    search_cmd.add_argument("--category", help="分类 ID 或 slug")
    search_cmd.add_argument("--jobtype", action="append", help="职位类型 slug，可重复")
    search_cmd.add_argument("--experience", type=int)
    search_cmd.add_argument("--min-salary", type=float, dest="min_salary")
    search_cmd.add_argument("--max-salary", type=float, dest="max_salary")
    search_cmd.set_defaults(func=cmd_search)

    rank_cmd = subparsers.add_parser("rank", help="为职位的投递者排序")
    rank_cmd.add_argument("job_id", type=int)
    rank_cmd.add_argument("--company-id", type=int, required=True, dest="company_id")
    _add_bm25_arguments(rank_cmd)
    rank_cmd.set_defaults(func=cmd_rank)

    stats_cmd = subparsers.add_parser("stats", help="查看索引统计")
    stats_cmd.add_argument("target", choices=sorted(MAINTAINERS))
    stats_cmd.set_defaults(func=cmd_stats)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args.config)
        return args.func(args, settings)
    except ValueError as e:
        print(f"[jobrank] 参数错误: {e}", file=sys.stderr)
        return 2
    except JobRankError as e:
        print(f"[jobrank] 执行失败: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
