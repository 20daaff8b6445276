"""
Job records and the caller-facing input types.

Field names on the wire (and in result rows) are the semantic names
id, title, salary, equity, companyHandle. JOB_FIELD_MAP translates the ones
that differ from the physical column names.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple

from .errors import ValidationError
from .schema import validate_criteria, validate_new_job, validate_update
from .sql import FieldMap

JOB_FIELD_MAP = FieldMap({"companyHandle": "company_handle"})

TRUE_STRINGS = {"true", "1", "yes"}
FALSE_STRINGS = {"false", "0", "no", ""}


class _Unset:
    """Sentinel for 'field not supplied' (None means 'set to NULL')."""

    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


UNSET = _Unset()


def _to_decimal(value: Any) -> Optional[Decimal]:
    # Non-numbers are left alone for the schema checks to reject
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return value
    # str() first so 0.1 becomes Decimal('0.1'), not the binary expansion
    return Decimal(str(value))


@dataclass(frozen=True)
class Job:
    """A stored job posting."""

    id: int
    title: str
    salary: Optional[int]
    equity: Optional[Decimal]
    company_handle: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Job":
        return cls(
            id=row["id"],
            title=row["title"],
            salary=row["salary"],
            equity=_to_decimal(row["equity"]),
            company_handle=row["companyHandle"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "salary": self.salary,
            "equity": self.equity,
            "companyHandle": self.company_handle,
        }


@dataclass(frozen=True)
class NewJob:
    """Data for creating a job. companyHandle is fixed once the job exists."""

    title: str
    company_handle: str
    salary: Optional[int] = None
    equity: Optional[Decimal] = None

    def __post_init__(self):
        object.__setattr__(self, "equity", _to_decimal(self.equity))
        errors = validate_new_job(self.to_dict())
        if errors:
            raise ValidationError("Invalid job data", errors)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NewJob":
        errors = validate_new_job(data)
        if errors:
            raise ValidationError("Invalid job data", errors)
        return cls(
            title=data["title"],
            company_handle=data["companyHandle"],
            salary=data.get("salary"),
            equity=data.get("equity"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "salary": self.salary,
            "equity": self.equity,
            "companyHandle": self.company_handle,
        }


@dataclass(frozen=True)
class JobUpdate:
    """
    Partial update of a job's mutable fields.

    Only the fields listed in MUTABLE_FIELDS can be set; anything left as
    UNSET is not touched. as_payload() walks MUTABLE_FIELDS in order, so the
    SET clause never sees a key that isn't declared here.
    """

    MUTABLE_FIELDS: ClassVar[Tuple[str, ...]] = ("title", "salary", "equity")

    title: Any = UNSET
    salary: Any = UNSET
    equity: Any = UNSET

    def __post_init__(self):
        if self.equity is not UNSET:
            object.__setattr__(self, "equity", _to_decimal(self.equity))
        errors = validate_update(self.as_payload())
        if errors:
            raise ValidationError("Invalid update data", errors)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "JobUpdate":
        errors = validate_update(data)
        if errors:
            raise ValidationError("Invalid update data", errors)
        return cls(**{name: data[name] for name in cls.MUTABLE_FIELDS if name in data})

    def as_payload(self) -> Dict[str, Any]:
        payload = {}
        for name in self.MUTABLE_FIELDS:
            value = getattr(self, name)
            if value is not UNSET:
                payload[name] = value
        return payload

    @property
    def is_empty(self) -> bool:
        return not self.as_payload()


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_STRINGS:
        return True
    if text in FALSE_STRINGS:
        return False
    raise ValidationError("Invalid filter", [f"Filter '{name}' must be true or false"])


def _parse_int(name: str, value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValidationError("Invalid filter", [f"Filter '{name}' must be an integer"])


@dataclass(frozen=True)
class FilterCriteria:
    """
    Optional search filters for listing jobs.

    title: case-insensitive substring of the job title
    min_salary: exclusive lower bound on salary
    has_equity: only jobs with equity > 0 when True
    """

    title: Optional[str] = None
    min_salary: Optional[int] = None
    has_equity: bool = False

    def __post_init__(self):
        errors = validate_criteria(self.to_dict())
        if errors:
            raise ValidationError("Invalid filter", errors)

    @classmethod
    def from_query(cls, params: Mapping[str, Any]) -> "FilterCriteria":
        """
        Parse string query parameters (title, minSalary, hasEquity).

        Empty values count as absent. Unrecognized parameters are ignored.
        """
        title = params.get("title") or None
        min_salary = params.get("minSalary")
        has_equity = params.get("hasEquity")
        return cls(
            title=title,
            min_salary=_parse_int("minSalary", min_salary) if min_salary not in (None, "") else None,
            has_equity=_parse_bool("hasEquity", has_equity) if has_equity is not None else False,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "minSalary": self.min_salary, "hasEquity": self.has_equity}

    @property
    def is_empty(self) -> bool:
        return self.title is None and self.min_salary is None and not self.has_equity


@dataclass(frozen=True)
class RemovedJob:
    """What is left to report about a job after it has been deleted."""

    title: str
    company_handle: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "RemovedJob":
        return cls(title=row["title"], company_handle=row["companyHandle"])

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "companyHandle": self.company_handle}


def jobs_from_rows(rows: List[Mapping[str, Any]]) -> List[Job]:
    return [Job.from_row(r) for r in rows]
