"""
Pytest configuration and shared fixtures.
"""

import pytest
from decimal import Decimal
from typing import Any, Dict, List

from jobboard.database import init_database
from jobboard.executor import SQLAlchemyExecutor
from jobboard.jobs import JobRepository
from jobboard.logger import get_logger, reset_logger


class RecordingExecutor:
    """QueryExecutor that records statements and returns canned rows."""

    def __init__(self, rows: List[Dict[str, Any]] = None):
        self.rows = rows or []
        self.calls = []

    def execute(self, sql, args=()):
        self.calls.append((sql, list(args)))
        return self.rows


@pytest.fixture(autouse=True)
def quiet_logger():
    """Keep the global logger off stdout during tests."""
    reset_logger()
    get_logger(enable_console=False)
    yield
    reset_logger()


@pytest.fixture
def engine(tmp_path):
    """Fresh SQLite database with the jobs schema."""
    engine = init_database(tmp_path / "test.db")
    yield engine
    engine.dispose()


@pytest.fixture
def executor(engine) -> SQLAlchemyExecutor:
    return SQLAlchemyExecutor(engine)


@pytest.fixture
def companies(executor) -> List[str]:
    """Insert the companies jobs can point at."""
    handles = [("c1", "Company One"), ("c2", "Company Two"), ("abc", "ABC Corp")]
    for handle, name in handles:
        executor.execute("INSERT INTO companies (handle, name) VALUES ($1, $2)", [handle, name])
    return [h for h, _ in handles]


@pytest.fixture
def repo(executor, companies) -> JobRepository:
    return JobRepository(executor)


@pytest.fixture
def recorder() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def job_row() -> Dict[str, Any]:
    """A row as the store returns it for the job columns."""
    return {
        "id": 5,
        "title": "Engineer",
        "salary": 90000,
        "equity": 0.1,
        "companyHandle": "c1",
    }


@pytest.fixture
def seeded_jobs(repo):
    """Four jobs across two companies."""
    data = [
        {"title": "Software Engineer", "salary": 120000, "equity": Decimal("0.05"), "companyHandle": "c1"},
        {"title": "Data Engineer", "salary": 100000, "equity": 0, "companyHandle": "c1"},
        {"title": "Product Manager", "salary": 90000, "equity": None, "companyHandle": "c2"},
        {"title": "Intern", "salary": None, "equity": Decimal("0.001"), "companyHandle": "c2"},
    ]
    return [repo.create(d) for d in data]
