"""
Boundary contract for callers (HTTP handlers, CLI).

Wraps JobRepository so every operation returns an Outcome and classifies
failures as caller errors or internal ones. Status codes and response
bodies are left to the caller.
"""

from typing import Any, List, Mapping, Optional

from .errors import ConstraintViolation, JobBoardError, NotFoundError, ValidationError
from .jobs import JobRepository
from .models import FilterCriteria, Job, RemovedJob
from .outcome import Outcome, attempt

CALLER_ERRORS = (ValidationError, NotFoundError, ConstraintViolation)


def is_caller_error(error: Optional[JobBoardError]) -> bool:
    """True when the request itself has to change (bad data, unknown id)."""
    return isinstance(error, CALLER_ERRORS)


def describe_removed(removed: RemovedJob) -> str:
    return f"{removed.title} at company {removed.company_handle}"


class JobService:
    """create / list / get / update / delete, each returning an Outcome."""

    def __init__(self, repository: JobRepository):
        self.repository = repository

    def create(self, data: Mapping[str, Any]) -> Outcome[Job]:
        return attempt(self.repository.create, data)

    def list(self, query: Optional[Mapping[str, Any]] = None) -> Outcome[List[Job]]:
        """List jobs from raw query parameters (title, minSalary, hasEquity)."""
        return attempt(lambda: self.repository.list(FilterCriteria.from_query(query or {})))

    def get(self, job_id: Any) -> Outcome[Job]:
        return attempt(self.repository.get, job_id)

    def update(self, job_id: Any, changes: Mapping[str, Any]) -> Outcome[Job]:
        return attempt(self.repository.update_partial, job_id, changes)

    def delete(self, job_id: Any) -> Outcome[str]:
        """Delete a job; the value is a '<title> at company <handle>' message."""
        return attempt(lambda: describe_removed(self.repository.delete(job_id)))
