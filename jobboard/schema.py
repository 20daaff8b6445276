from decimal import Decimal
from numbers import Number
from typing import Any, Dict, List, Mapping

NEW_JOB_FIELDS = ["title", "salary", "equity", "companyHandle"]
REQUIRED_STR_FIELDS = ["title", "companyHandle"]
MUTABLE_FIELDS = ["title", "salary", "equity"]

# Signed 64-bit range, the widest INTEGER SQLite and PostgreSQL BIGINT hold
MIN_INTEGER = -(2 ** 63)
MAX_INTEGER = 2 ** 63 - 1


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_int(v: Any) -> bool:
    # bool is an int subclass; True is not a salary
    return isinstance(v, int) and not isinstance(v, bool)


def fits_integer_column(v: int) -> bool:
    return MIN_INTEGER <= v <= MAX_INTEGER


def _salary_errors(v: Any) -> List[str]:
    if v is None:
        return []
    if not _is_int(v):
        return ["Field 'salary' must be an integer if provided"]
    if v < 0:
        return ["Field 'salary' must be >= 0"]
    if not fits_integer_column(v):
        return [f"Field 'salary' must be <= {MAX_INTEGER}"]
    return []


def _equity_errors(v: Any) -> List[str]:
    if v is None:
        return []
    if isinstance(v, bool) or not isinstance(v, (Number, Decimal)):
        return ["Field 'equity' must be a number if provided"]
    if isinstance(v, Decimal) and not v.is_finite():
        return ["Field 'equity' must be a finite number"]
    if not 0 <= v <= 1:
        return ["Field 'equity' must be between 0 and 1"]
    return []


def _unknown_field_errors(data: Mapping[str, Any], allowed: List[str]) -> List[str]:
    return [f"Unknown or immutable field: {k}" for k in data if k not in allowed]


def validate_new_job(data: Mapping[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.

    data uses semantic names: {title, salary, equity, companyHandle}.
    """
    errors: List[str] = _unknown_field_errors(data, NEW_JOB_FIELDS)

    for f in REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    errors.extend(_salary_errors(data.get("salary")))
    errors.extend(_equity_errors(data.get("equity")))
    return errors


def validate_update(data: Mapping[str, Any]) -> List[str]:
    """
    Check a partial update. Only mutable fields may appear; an empty mapping
    is not an error here (the SET clause builder rejects it).
    """
    errors: List[str] = _unknown_field_errors(data, MUTABLE_FIELDS)

    if "title" in data and not _is_non_empty_str(data["title"]):
        errors.append("Field 'title' must be a non-empty string")
    if "salary" in data:
        errors.extend(_salary_errors(data["salary"]))
    if "equity" in data:
        errors.extend(_equity_errors(data["equity"]))
    return errors


def validate_criteria(criteria: Dict[str, Any]) -> List[str]:
    """Check parsed filter values: {title, minSalary, hasEquity}."""
    errors: List[str] = []

    title = criteria.get("title")
    if title is not None and not isinstance(title, str):
        errors.append("Filter 'title' must be a string")

    min_salary = criteria.get("minSalary")
    if min_salary is not None:
        if not _is_int(min_salary):
            errors.append("Filter 'minSalary' must be an integer")
        elif min_salary < 0:
            errors.append("Filter 'minSalary' must be >= 0")
        elif not fits_integer_column(min_salary):
            errors.append(f"Filter 'minSalary' must be <= {MAX_INTEGER}")

    if not isinstance(criteria.get("hasEquity", False), bool):
        errors.append("Filter 'hasEquity' must be a boolean")

    return errors
