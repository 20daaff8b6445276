"""
SQL fragment builders.

Turns caller intent into parameterized SQL pieces:
- FieldMap / resolve_column: semantic field name -> physical column name.
- build_set_clause: partial update payload -> SET clause + positional values.
- build_predicates / compose_where: filter criteria -> WHERE clause + values.

Placeholders use the numbered `$N` style. Caller data only ever travels in
the returned values lists, never in the SQL text.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Sequence, Tuple

from .errors import ValidationError

if TYPE_CHECKING:
    from .models import FilterCriteria

# Marks "the next positional slot" inside a Predicate before it is numbered
SLOT = "$?"

PLACEHOLDER_RE = re.compile(r"\$(\d+)")


@dataclass(frozen=True)
class FieldMap:
    """
    Read-only table of semantic field names to column names for one entity.

    Build it once and pass it to the builders; it cannot be mutated after
    construction.
    """

    columns: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "columns", MappingProxyType(dict(self.columns)))

    def resolve(self, name: str) -> str:
        return self.columns.get(name, name)


def resolve_column(name: str, field_map: FieldMap) -> str:
    """
    Return the column for a semantic field name.

    Names missing from the map pass through unchanged. Passthrough names are
    NOT checked against the table's real columns, so callers must restrict
    which keys can reach here (see models.JobUpdate).
    """
    return field_map.resolve(name)


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def build_set_clause(
    payload: Mapping[str, Any],
    field_map: FieldMap,
    first_index: int = 1,
) -> Tuple[str, List[Any]]:
    """
    Build the SET clause for a partial update.

    Args:
        payload: Non-empty field -> value mapping, enumerated in its own order
        field_map: Semantic name -> column name table
        first_index: Number of the first placeholder, for clauses that follow
            other parameters

    Returns:
        Tuple of (set_clause, values) where placeholder $(first_index + i)
        corresponds to values[i]

    Raises:
        ValidationError: If payload is empty

    Example:
        >>> build_set_clause({"title": "Engineer", "salary": 90000}, FieldMap())
        ('"title"=$1, "salary"=$2', ['Engineer', 90000])
    """
    if not payload:
        raise ValidationError("No data")

    cols = []
    values = []
    for idx, (name, value) in enumerate(payload.items(), start=first_index):
        cols.append(f"{quote_identifier(resolve_column(name, field_map))}=${idx}")
        values.append(value)

    return ", ".join(cols), values


@dataclass(frozen=True)
class Predicate:
    """A single WHERE condition, optionally carrying one bound value."""

    sql: str
    value: Any = None
    bound: bool = False

    def render(self, index: int) -> str:
        if not self.bound:
            return self.sql
        return self.sql.replace(SLOT, f"${index}")


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so the text matches literally (escape char: backslash)."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_predicates(criteria: Optional["FilterCriteria"]) -> List[Predicate]:
    """
    Convert filter criteria into predicates, in the order title, minSalary, hasEquity.

    Absent criteria contribute nothing; None or empty criteria give [].
    """
    predicates: List[Predicate] = []
    if criteria is None:
        return predicates

    if criteria.title is not None:
        predicates.append(Predicate(
            sql=f"LOWER(\"title\") LIKE {SLOT} ESCAPE '\\'",
            value=f"%{escape_like(criteria.title.lower())}%",
            bound=True,
        ))

    if criteria.min_salary is not None:
        predicates.append(Predicate(sql=f'"salary" > {SLOT}', value=criteria.min_salary, bound=True))

    if criteria.has_equity:
        # Fixed comparison, nothing caller-supplied to bind
        predicates.append(Predicate(sql='"equity" > 0'))

    return predicates


def compose_where(predicates: Sequence[Predicate], first_index: int = 1) -> Tuple[str, List[Any]]:
    """
    AND the predicates together into a WHERE clause.

    Bound predicates are numbered sequentially starting at first_index; pass
    the number of parameters already in the statement plus one when the
    clause follows other placeholders.

    Returns:
        Tuple of (where_clause, values); ("", []) when there are no predicates
    """
    if not predicates:
        return "", []

    parts = []
    values: List[Any] = []
    index = first_index
    for predicate in predicates:
        parts.append(predicate.render(index))
        if predicate.bound:
            values.append(predicate.value)
            index += 1

    return "WHERE " + " AND ".join(parts), values


def placeholder_indexes(sql: str) -> List[int]:
    """Return the distinct $N placeholder numbers used in sql, sorted."""
    return sorted({int(n) for n in PLACEHOLDER_RE.findall(sql)})
