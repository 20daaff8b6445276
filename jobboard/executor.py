"""
Query executor: runs `$N`-parameterized SQL and returns rows as dicts.

Anything that implements QueryExecutor can back the repository. The bundled
SQLAlchemyExecutor runs each statement in its own transaction on an engine
and translates driver failures into the jobboard error taxonomy.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from .errors import ConstraintViolation, StoreError
from .logger import StructuredLogger, get_logger
from .retry import RetryError, exponential_backoff, is_transient_error
from .sql import PLACEHOLDER_RE, placeholder_indexes

Row = Dict[str, Any]


class QueryExecutor(Protocol):
    """The one capability the repository needs from the store."""

    def execute(self, sql: str, args: Sequence[Any] = ()) -> List[Row]:
        ...


def bind_positional(sql: str, args: Sequence[Any]) -> Tuple[str, Dict[str, Any]]:
    """
    Rewrite `$N` placeholders as SQLAlchemy bind parameters.

    Args:
        sql: Statement using $1..$N
        args: Values, args[i - 1] for $i

    Returns:
        Tuple of (statement with :pN parameters, {"pN": value})

    Raises:
        StoreError: If the placeholders are not exactly $1..$len(args)
    """
    indexes = placeholder_indexes(sql)
    if indexes != list(range(1, len(args) + 1)):
        raise StoreError(
            f"Statement uses placeholders {indexes} but {len(args)} argument(s) were supplied"
        )
    statement = PLACEHOLDER_RE.sub(lambda m: f":p{m.group(1)}", sql)
    return statement, {f"p{i}": value for i, value in enumerate(args, start=1)}


def statement_kind(sql: str) -> str:
    """First keyword of the statement (SELECT, INSERT, ...), used for metrics."""
    words = sql.split(None, 1)
    return words[0].upper() if words else "UNKNOWN"


def _sqlite_value(value: Any) -> Any:
    # sqlite3 cannot bind Decimal
    if isinstance(value, Decimal):
        return float(value)
    return value


class SQLAlchemyExecutor:
    """
    QueryExecutor backed by a SQLAlchemy engine.

    IntegrityError becomes ConstraintViolation; every other SQLAlchemy error
    becomes StoreError. With max_retries > 0, transient OperationalErrors
    (lost connection, lock timeout) are retried with exponential backoff.
    """

    def __init__(
        self,
        engine: Engine,
        max_retries: int = 0,
        retry_delay: float = 0.5,
        logger: Optional[StructuredLogger] = None,
    ):
        self.engine = engine
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.logger = logger or get_logger()

    def execute(self, sql: str, args: Sequence[Any] = ()) -> List[Row]:
        statement, params = bind_positional(sql, args)
        if self.engine.dialect.name == "sqlite":
            params = {k: _sqlite_value(v) for k, v in params.items()}
        kind = statement_kind(sql)

        run = self._run
        if self.max_retries > 0:
            run = exponential_backoff(
                max_retries=self.max_retries,
                base_delay=self.retry_delay,
                exceptions=(OperationalError,),
                should_retry=is_transient_error,
                on_retry=self._log_retry,
            )(run)

        try:
            rows = run(statement, params)
        except IntegrityError as e:
            self.logger.record_query_failure(kind, "IntegrityError")
            self.logger.warning("Statement rejected by constraint", operation=kind, error=str(e.orig))
            raise ConstraintViolation(f"Constraint violated: {e.orig}") from e
        except RetryError as e:
            self.logger.record_query_failure(kind, "RetryError")
            self.logger.error("Statement failed after retries", operation=kind, error=str(e))
            raise StoreError(str(e)) from e
        except SQLAlchemyError as e:
            detail = getattr(e, "orig", None) or e
            self.logger.record_query_failure(kind, type(e).__name__)
            self.logger.error("Statement failed", operation=kind, error=str(detail))
            raise StoreError(f"{kind} failed: {detail}") from e
        except OverflowError as e:
            # raised by sqlite3 while binding, before SQLAlchemy can wrap it
            self.logger.record_query_failure(kind, type(e).__name__)
            self.logger.error("Statement parameters rejected by driver", operation=kind, error=str(e))
            raise StoreError(f"{kind} failed: {e}") from e

        self.logger.record_query(kind)
        self.logger.debug("Statement executed", operation=kind, rows=len(rows))
        return rows

    def _run(self, statement: str, params: Dict[str, Any]) -> List[Row]:
        with self.engine.begin() as conn:
            result = conn.execute(text(statement), params)
            if not result.returns_rows:
                return []
            return [dict(row) for row in result.mappings()]

    def _log_retry(self, attempt: int, exception: Exception, delay: float):
        self.logger.warning(
            f"Retrying statement in {delay:.2f}s",
            attempt=attempt,
            error=str(exception),
        )
