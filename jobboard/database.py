"""
Database schema and engine management.

Tables are declared with SQLAlchemy Core; statements against them are plain
parameterized SQL run through the executor. Works with SQLite (default) and
PostgreSQL.
"""

from pathlib import Path
from typing import Optional, Union

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine

metadata = MetaData()

# Owned elsewhere; declared so jobs.company_handle has something to reference
companies = Table(
    "companies",
    metadata,
    Column("handle", String(25), primary_key=True),
    Column("name", Text, nullable=False),
)

jobs = Table(
    "jobs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", Text, nullable=False),
    Column("salary", Integer, CheckConstraint("salary >= 0", name="ck_jobs_salary")),
    Column(
        "equity",
        Numeric,
        CheckConstraint("equity >= 0 AND equity <= 1", name="ck_jobs_equity"),
    ),
    Column(
        "company_handle",
        String(25),
        ForeignKey("companies.handle", ondelete="CASCADE"),
        nullable=False,
    ),
)


def database_url(db_path: Path) -> str:
    """SQLAlchemy URL for a SQLite file."""
    return f"sqlite:///{db_path}"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ships with foreign key enforcement off
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(url: Union[str, Path], timeout: Optional[float] = None) -> Engine:
    """
    Create an engine for a database URL or SQLite file path.

    Args:
        url: SQLAlchemy URL, or a Path to a SQLite file
        timeout: Seconds a statement may wait or run before the store gives up
            (SQLite busy timeout, PostgreSQL statement_timeout)

    Returns:
        SQLAlchemy engine
    """
    if isinstance(url, Path):
        url = database_url(url)

    connect_args = {}
    if timeout is not None:
        if url.startswith("sqlite"):
            connect_args["timeout"] = timeout
        elif url.startswith("postgresql"):
            connect_args["options"] = f"-c statement_timeout={int(timeout * 1000)}"

    engine = create_engine(url, connect_args=connect_args)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def init_database(target: Union[str, Path, Engine], timeout: Optional[float] = None) -> Engine:
    """
    Initialize database and create tables.

    Args:
        target: Engine, SQLAlchemy URL, or Path to SQLite database file
        timeout: Passed to get_engine when an engine has to be created

    Returns:
        The engine the tables were created on
    """
    if isinstance(target, Engine):
        engine = target
    else:
        if isinstance(target, Path):
            target.parent.mkdir(parents=True, exist_ok=True)
        engine = get_engine(target, timeout=timeout)
    metadata.create_all(engine)
    return engine
