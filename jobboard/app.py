import argparse
import json
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, List, Optional

from . import __version__
from .database import get_engine, init_database
from .env import Settings, load_env, load_settings
from .executor import SQLAlchemyExecutor
from .jobs import JobRepository
from .logger import StructuredLogger, get_logger, reset_logger
from .outcome import Outcome
from .service import JobService, is_caller_error


def _decimal(text: str) -> Decimal:
    try:
        return Decimal(text)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a decimal number: {text!r}")


def _ensure_sqlite_dir(url: str) -> None:
    prefix = "sqlite:///"
    if url.startswith(prefix) and ":memory:" not in url:
        Path(url[len(prefix):]).parent.mkdir(parents=True, exist_ok=True)


def build_service(settings: Settings, logger: StructuredLogger) -> JobService:
    engine = get_engine(settings.database_url, timeout=settings.query_timeout)
    executor = SQLAlchemyExecutor(engine, max_retries=settings.max_retries, logger=logger)
    return JobService(JobRepository(executor, logger=logger))


def _emit(data: Any) -> None:
    # Decimal equity is printed as a string
    print(json.dumps(data, indent=2, default=str))


def _finish(outcome: Outcome, render=lambda value: value) -> None:
    if outcome.ok:
        _emit(render(outcome.value))
        return
    error = outcome.error
    print(f"error: {error.message}", file=sys.stderr)
    for detail in getattr(error, "errors", []):
        print(f" - {detail}", file=sys.stderr)
    raise SystemExit(2 if is_caller_error(error) else 1)


def cmd_init_db(args: argparse.Namespace) -> None:
    url = args.settings.database_url
    _ensure_sqlite_dir(url)
    init_database(url, timeout=args.settings.query_timeout)
    print(f"Initialized database: {url}")


def cmd_create(args: argparse.Namespace) -> None:
    data = {"title": args.title, "companyHandle": args.company}
    if args.salary is not None:
        data["salary"] = args.salary
    if args.equity is not None:
        data["equity"] = args.equity
    _finish(args.service.create(data), lambda job: {"job": job.to_dict()})


def cmd_list(args: argparse.Namespace) -> None:
    query = {}
    if args.title:
        query["title"] = args.title
    if args.min_salary is not None:
        query["minSalary"] = args.min_salary
    if args.has_equity:
        query["hasEquity"] = "true"
    _finish(args.service.list(query), lambda jobs: {"jobs": [j.to_dict() for j in jobs]})


def cmd_get(args: argparse.Namespace) -> None:
    _finish(args.service.get(args.id), lambda job: {"job": job.to_dict()})


def cmd_update(args: argparse.Namespace) -> None:
    changes = {}
    if args.title is not None:
        changes["title"] = args.title
    if args.salary is not None:
        changes["salary"] = args.salary
    if args.equity is not None:
        changes["equity"] = args.equity
    _finish(args.service.update(args.id, changes), lambda job: {"job": job.to_dict()})


def cmd_delete(args: argparse.Namespace) -> None:
    _finish(args.service.delete(args.id), lambda message: {"deleted": message})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobboard", description="Job postings data access CLI")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--verbose", action="store_true", help="Log statements to stdout")

    subparsers = parser.add_subparsers(dest="command")
    ini = subparsers.add_parser("init-db", help="Create the companies and jobs tables")
    ini.set_defaults(func=cmd_init_db, needs_service=False)

    crt = subparsers.add_parser("create", help="Create a job posting")
    crt.add_argument("--title", required=True, help="Job title")
    crt.add_argument("--company", required=True, help="Handle of an existing company")
    crt.add_argument("--salary", type=int, help="Yearly salary (>= 0)")
    crt.add_argument("--equity", type=_decimal, help="Equity fraction between 0 and 1")
    crt.set_defaults(func=cmd_create, needs_service=True)

    lst = subparsers.add_parser("list", help="List jobs, optionally filtered")
    lst.add_argument("--title", help="Case-insensitive substring of the title")
    lst.add_argument("--min-salary", help="Only jobs paying more than this")
    lst.add_argument("--has-equity", action="store_true", help="Only jobs with equity > 0")
    lst.set_defaults(func=cmd_list, needs_service=True)

    gt = subparsers.add_parser("get", help="Show one job")
    gt.add_argument("id", type=int, help="Job id")
    gt.set_defaults(func=cmd_get, needs_service=True)

    upd = subparsers.add_parser("update", help="Change some fields of a job")
    upd.add_argument("id", type=int, help="Job id")
    upd.add_argument("--title", help="New title")
    upd.add_argument("--salary", type=int, help="New salary")
    upd.add_argument("--equity", type=_decimal, help="New equity fraction")
    upd.set_defaults(func=cmd_update, needs_service=True)

    dlt = subparsers.add_parser("delete", help="Delete a job")
    dlt.add_argument("id", type=int, help="Job id")
    dlt.set_defaults(func=cmd_delete, needs_service=True)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    # Load .env if present (JOBBOARD_DATABASE_URL, JOBBOARD_LOG_LEVEL, etc.)
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        settings = load_settings()
    except ValueError as e:
        parser.error(str(e))
    reset_logger()
    logger = get_logger(
        level=settings.log_level,
        log_dir=settings.log_dir,
        enable_console=args.verbose,
    )
    args.settings = settings
    if args.needs_service:
        args.service = build_service(settings, logger)
    try:
        args.func(args)
    finally:
        if args.needs_service:
            logger.log_metrics_summary()


if __name__ == "__main__":
    main()
