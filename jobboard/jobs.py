"""
Jobs Repository.

Responsibilities:
- create / get / list / partial update / delete for the jobs table.
- Build every statement with bound parameters and map rows to Job records.

Non-Responsibilities:
- No connection or transaction handling (the executor owns that).
- No HTTP status mapping.

Invariant:
Caller-supplied values, ids included, only ever reach the store through the
argument list, never through the SQL text.
"""

from typing import Any, List, Mapping, Optional, Union

from .errors import ConstraintViolation, NotFoundError, ValidationError
from .executor import QueryExecutor
from .logger import StructuredLogger, get_logger
from .models import JOB_FIELD_MAP, FilterCriteria, Job, JobUpdate, NewJob, RemovedJob, jobs_from_rows
from .schema import fits_integer_column
from .sql import FieldMap, build_predicates, build_set_clause, compose_where

JOB_COLUMNS = 'id, title, salary, equity, company_handle AS "companyHandle"'


def _job_id(job_id: Any) -> int:
    value = job_id
    # isdecimal, not isdigit: "²" is a digit that int() rejects
    if isinstance(value, str) and value.strip().isdecimal():
        value = int(value.strip())
    if isinstance(value, int) and not isinstance(value, bool) and fits_integer_column(value):
        return value
    raise ValidationError(f"Invalid job id: {job_id!r}")


class JobRepository:
    """Data access for Job records over a QueryExecutor."""

    entity = "job"

    def __init__(
        self,
        executor: QueryExecutor,
        field_map: FieldMap = JOB_FIELD_MAP,
        logger: Optional[StructuredLogger] = None,
    ):
        self.executor = executor
        self.field_map = field_map
        self.logger = logger or get_logger()

    def create(self, data: Union[NewJob, Mapping[str, Any]]) -> Job:
        """
        Insert a job and return it with its generated id.

        Raises:
            ValidationError: If data breaks the job field rules
            ConstraintViolation: If companyHandle does not name an existing company
        """
        new_job = data if isinstance(data, NewJob) else NewJob.from_dict(data)
        sql = (
            "INSERT INTO jobs (title, salary, equity, company_handle) "
            "VALUES ($1, $2, $3, $4) "
            f"RETURNING {JOB_COLUMNS}"
        )
        try:
            rows = self.executor.execute(
                sql,
                [new_job.title, new_job.salary, new_job.equity, new_job.company_handle],
            )
        except ConstraintViolation as e:
            if "foreign key" not in e.message.lower():
                raise
            raise ConstraintViolation(
                f"Cannot create job for company {new_job.company_handle!r}: no such company"
            ) from e

        job = Job.from_row(rows[0])
        self.logger.info("Created job", id=job.id, company=job.company_handle)
        return job

    def get(self, job_id: Any) -> Job:
        """
        Return the job with the given id.

        Raises:
            NotFoundError: If no job has that id
        """
        job_id = _job_id(job_id)
        rows = self.executor.execute(f"SELECT {JOB_COLUMNS} FROM jobs WHERE id = $1", [job_id])
        if not rows:
            self.logger.debug("Job not found", id=job_id)
            raise NotFoundError(self.entity, job_id)
        return Job.from_row(rows[0])

    def list(self, criteria: Optional[FilterCriteria] = None) -> List[Job]:
        """
        Return the jobs matching criteria (all jobs when criteria is None or empty),
        ordered by title then id.
        """
        where, values = compose_where(build_predicates(criteria))
        parts = [f"SELECT {JOB_COLUMNS} FROM jobs"]
        if where:
            parts.append(where)
        parts.append("ORDER BY title, id")
        return jobs_from_rows(self.executor.execute(" ".join(parts), values))

    def list_for_company(self, company_handle: str) -> List[Job]:
        """Return a company's jobs ordered by id (empty if it has none)."""
        rows = self.executor.execute(
            f"SELECT {JOB_COLUMNS} FROM jobs WHERE company_handle = $1 ORDER BY id",
            [company_handle],
        )
        return jobs_from_rows(rows)

    def update_partial(self, job_id: Any, changes: Union[JobUpdate, Mapping[str, Any]]) -> Job:
        """
        Update only the supplied fields (title, salary, equity) and return the job.

        This is a "partial update": fields missing from changes keep their
        current values. companyHandle and id cannot be changed.

        Raises:
            ValidationError: If changes is empty ("No data") or invalid; raised
                before any statement runs
            NotFoundError: If no job has that id
        """
        job_id = _job_id(job_id)
        update = changes if isinstance(changes, JobUpdate) else JobUpdate.from_dict(changes)
        set_clause, values = build_set_clause(update.as_payload(), self.field_map)

        id_slot = len(values) + 1
        sql = f"UPDATE jobs SET {set_clause} WHERE id = ${id_slot} RETURNING {JOB_COLUMNS}"
        rows = self.executor.execute(sql, [*values, job_id])
        if not rows:
            self.logger.debug("Job not found for update", id=job_id)
            raise NotFoundError(self.entity, job_id)

        self.logger.info("Updated job", id=job_id, fields=list(update.as_payload()))
        return Job.from_row(rows[0])

    def delete(self, job_id: Any) -> RemovedJob:
        """
        Delete a job and return its title and company for reporting.

        Raises:
            NotFoundError: If no job has that id
        """
        job_id = _job_id(job_id)
        rows = self.executor.execute(
            'DELETE FROM jobs WHERE id = $1 RETURNING title, company_handle AS "companyHandle"',
            [job_id],
        )
        if not rows:
            self.logger.debug("Job not found for delete", id=job_id)
            raise NotFoundError(self.entity, job_id)

        self.logger.info("Deleted job", id=job_id)
        return RemovedJob.from_row(rows[0])
