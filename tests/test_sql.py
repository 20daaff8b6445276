"""
Tests for sql.py - field mapping and SQL fragment builders.
"""

import dataclasses

import pytest

from jobboard.errors import ValidationError
from jobboard.models import JOB_FIELD_MAP, FilterCriteria
from jobboard.sql import (
    FieldMap,
    Predicate,
    build_predicates,
    build_set_clause,
    compose_where,
    escape_like,
    placeholder_indexes,
    resolve_column,
)


class TestResolveColumn:
    """Test semantic name -> column lookup."""

    def test_mapped_name(self):
        """Mapped names resolve to their column."""
        assert resolve_column("companyHandle", JOB_FIELD_MAP) == "company_handle"

    def test_unmapped_name_passes_through(self):
        """Names missing from the map come back unchanged."""
        field_map = FieldMap({"companyHandle": "company_handle"})
        assert resolve_column("salary", field_map) == "salary"

    def test_empty_map(self):
        """An empty map passes everything through."""
        assert resolve_column("title", FieldMap()) == "title"

    def test_field_map_is_read_only(self):
        """The underlying table can't be modified."""
        field_map = FieldMap({"a": "b"})
        with pytest.raises(TypeError):
            field_map.columns["a"] = "c"

    def test_field_map_is_frozen(self):
        """The columns attribute can't be replaced."""
        field_map = FieldMap({"a": "b"})
        with pytest.raises(dataclasses.FrozenInstanceError):
            field_map.columns = {}

    def test_field_map_copies_source(self):
        """Mutating the source dict doesn't leak into the map."""
        source = {"a": "b"}
        field_map = FieldMap(source)
        source["a"] = "changed"
        assert field_map.resolve("a") == "b"


class TestBuildSetClause:
    """Test partial update SET clause generation."""

    def test_two_fields(self):
        """Title and salary produce $1 and $2 in order."""
        set_clause, values = build_set_clause(
            {"title": "Engineer", "salary": 90000},
            FieldMap({"companyHandle": "company_handle"}),
        )
        assert set_clause == '"title"=$1, "salary"=$2'
        assert values == ["Engineer", 90000]

    def test_maps_column_names(self):
        """Semantic names are translated through the field map."""
        set_clause, values = build_set_clause({"companyHandle": "abc"}, JOB_FIELD_MAP)
        assert set_clause == '"company_handle"=$1'
        assert values == ["abc"]

    def test_empty_payload_fails(self):
        """An empty payload is rejected whatever the map."""
        for field_map in (FieldMap(), JOB_FIELD_MAP):
            with pytest.raises(ValidationError, match="No data"):
                build_set_clause({}, field_map)

    def test_placeholders_align_with_values(self):
        """$i always refers to values[i - 1]."""
        payloads = [
            {"title": "a"},
            {"salary": 1, "title": "b"},
            {"equity": 0.5, "salary": 2, "title": "c"},
            {"a": 1, "b": 2, "c": 3, "d": 4, "e": 5},
        ]
        for payload in payloads:
            set_clause, values = build_set_clause(payload, JOB_FIELD_MAP)
            assert placeholder_indexes(set_clause) == list(range(1, len(payload) + 1))
            assert values == list(payload.values())
            for i, key in enumerate(payload, start=1):
                assert f'"{key}"=${i}' in set_clause

    def test_first_index(self):
        """Numbering can start after parameters already in the statement."""
        set_clause, values = build_set_clause({"title": "a", "salary": 1}, JOB_FIELD_MAP, first_index=3)
        assert set_clause == '"title"=$3, "salary"=$4'
        assert values == ["a", 1]

    def test_keeps_none_values(self):
        """None is a value to store (NULL), not a missing field."""
        set_clause, values = build_set_clause({"salary": None}, JOB_FIELD_MAP)
        assert set_clause == '"salary"=$1'
        assert values == [None]

    def test_values_never_in_sql(self):
        """Values travel in the list, not the clause text."""
        set_clause, values = build_set_clause({"title": "x'; DROP TABLE jobs; --"}, JOB_FIELD_MAP)
        assert "DROP" not in set_clause
        assert values == ["x'; DROP TABLE jobs; --"]


class TestBuildPredicates:
    """Test filter criteria -> predicate conversion."""

    def test_no_criteria(self):
        """None and empty criteria give no predicates."""
        assert build_predicates(None) == []
        assert build_predicates(FilterCriteria()) == []

    def test_title_predicate(self):
        """Title becomes a bound, lowercased contains pattern."""
        [predicate] = build_predicates(FilterCriteria(title="EnGiNeer"))
        assert predicate.bound
        assert predicate.value == "%engineer%"
        assert 'LOWER("title") LIKE' in predicate.sql

    def test_title_wildcards_escaped(self):
        """LIKE wildcards in the title are matched literally."""
        [predicate] = build_predicates(FilterCriteria(title="100%_fun"))
        assert predicate.value == "%100\\%\\_fun%"
        assert "ESCAPE" in predicate.sql

    def test_min_salary_predicate(self):
        """minSalary becomes a bound strict greater-than."""
        [predicate] = build_predicates(FilterCriteria(min_salary=100000))
        assert predicate.bound
        assert predicate.value == 100000
        assert predicate.render(1) == '"salary" > $1'

    def test_has_equity_predicate(self):
        """hasEquity is a fixed comparison with nothing bound."""
        [predicate] = build_predicates(FilterCriteria(has_equity=True))
        assert not predicate.bound
        assert predicate.render(7) == '"equity" > 0'

    def test_has_equity_false(self):
        """hasEquity False adds nothing."""
        assert build_predicates(FilterCriteria(has_equity=False)) == []

    def test_order(self):
        """Predicates come out as title, minSalary, equity."""
        predicates = build_predicates(
            FilterCriteria(title="dev", min_salary=5, has_equity=True)
        )
        assert [p.value for p in predicates] == ["%dev%", 5, None]
        assert predicates[2].sql == '"equity" > 0'


class TestComposeWhere:
    """Test WHERE clause assembly and placeholder numbering."""

    def test_empty(self):
        """No predicates means no WHERE clause at all."""
        assert compose_where([]) == ("", [])

    def test_all_filters(self):
        """Bound predicates get $1, $2; the fixed one takes no slot."""
        predicates = build_predicates(
            FilterCriteria(title="dev", min_salary=5, has_equity=True)
        )
        where, values = compose_where(predicates)
        assert where == (
            "WHERE LOWER(\"title\") LIKE $1 ESCAPE '\\' "
            'AND "salary" > $2 AND "equity" > 0'
        )
        assert values == ["%dev%", 5]

    def test_first_index_offset(self):
        """Numbering can continue after placeholders already in the statement."""
        predicates = build_predicates(FilterCriteria(min_salary=10))
        where, values = compose_where(predicates, first_index=4)
        assert where == 'WHERE "salary" > $4'
        assert values == [10]

    def test_unbound_before_bound(self):
        """An unbound predicate doesn't consume an index."""
        predicates = [Predicate(sql="x > 0"), Predicate(sql="y = $?", value=1, bound=True)]
        where, values = compose_where(predicates)
        assert where == "WHERE x > 0 AND y = $1"
        assert values == [1]


class TestHelpers:
    """Test small SQL helpers."""

    def test_placeholder_indexes(self):
        """Distinct placeholder numbers come back sorted."""
        assert placeholder_indexes("a=$2 AND b=$1 OR c=$2") == [1, 2]
        assert placeholder_indexes("SELECT 1") == []

    def test_escape_like(self):
        """Backslash is escaped before the wildcards."""
        assert escape_like("a\\b%c_d") == "a\\\\b\\%c\\_d"
