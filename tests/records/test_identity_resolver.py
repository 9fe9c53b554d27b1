from __future__ import annotations

from src.employee_dashboard.employee_dashboard.core.enums import ErrorKind
from src.employee_dashboard.employee_dashboard.core.exceptions import StorageError
from src.employee_dashboard.employee_dashboard.records.identity import IdentityResolver
from tests.fakes import InMemoryRecords


def _records():
    records = InMemoryRecords()
    records.seed(
        "attendance",
        {"id": 1, "empid": "E1", "email": "e1@corp.com", "status": "present"},
        {"id": 2, "empid": None, "email": "a@b.com", "status": "late"},
        {"id": 3, "empid": "E3", "email": "e3@corp.com", "status": "absent"},
    )
    return records


def test_falls_back_to_email_when_employee_id_matches_nothing():
    resolver = IdentityResolver(_records())

    result = resolver.resolve("attendance", primary_key="X", secondary_key="a@b.com")

    assert result.ok
    assert [r["id"] for r in result.data] == [2]


def test_employee_id_match_short_circuits_email_lookup():
    records = _records()
    resolver = IdentityResolver(records)

    # e3's email would select a different row; it must not be consulted
    result = resolver.resolve("attendance", primary_key="E1", secondary_key="e3@corp.com")

    assert result.ok
    assert [r["id"] for r in result.data] == [1]
    assert len(records.ops("select", "attendance")) == 1


def test_email_only_lookup_may_return_no_rows():
    resolver = IdentityResolver(_records())

    result = resolver.resolve("attendance", secondary_key="nobody@corp.com")

    assert result.ok
    assert result.data == []


def test_missing_keys_fail_without_touching_storage():
    records = _records()
    resolver = IdentityResolver(records)

    result = resolver.resolve("attendance", primary_key=None, secondary_key="  ")

    assert not result.ok
    assert result.error_kind == ErrorKind.INVALID_ARGUMENT
    assert records.calls == []


def test_resolve_any_returns_union_in_one_query():
    records = _records()
    resolver = IdentityResolver(records)

    result = resolver.resolve_any("attendance", primary_key="E1", secondary_key="e3@corp.com")

    assert result.ok
    assert sorted(r["id"] for r in result.data) == [1, 3]
    assert result.count == 2
    assert len(records.ops("select", "attendance")) == 1


def test_resolve_any_requires_a_key():
    records = _records()

    result = IdentityResolver(records).resolve_any("attendance")

    assert result.error_kind == ErrorKind.INVALID_ARGUMENT
    assert records.calls == []


def test_storage_failure_is_returned_verbatim():
    records = _records()
    records.fail_on.add("attendance")

    result = IdentityResolver(records).resolve("attendance", primary_key="E1")

    assert not result.ok
    assert result.error_kind == ErrorKind.STORAGE_ERROR
    assert result.error == 'permission denied for table "attendance"'


def test_fields_are_projected():
    result = IdentityResolver(_records()).resolve("attendance", primary_key="E1", fields="id,status")

    assert result.data == [{"id": 1, "status": "present"}]


def test_matching_field_prefers_email_when_employee_id_has_no_rows():
    resolver = IdentityResolver(_records())

    assert resolver.matching_field("attendance", "E1", "x@y.com") == ("empid", "E1")
    assert resolver.matching_field("attendance", "X", "a@b.com") == ("email", "a@b.com")
    assert resolver.matching_field("attendance", "X", None) == ("empid", "X")


class _NoEmployeeIdColumn(InMemoryRecords):
    """Collection without an ``empid`` column: filtering on it is a server error."""

    def select(self, collection, *, fields="*", equals=None, any_of=None):
        if "empid" in (equals or {}):
            self.calls.append(("select", collection, {"equals": dict(equals), "any_of": {}}))
            raise StorageError("Unknown column 'empid' in 'where clause'")
        return super().select(collection, fields=fields, equals=equals, any_of=any_of)


def test_failed_employee_id_query_falls_back_to_email():
    records = _NoEmployeeIdColumn()
    records.seed("loanrequest", {"id": 1, "email": "a@b.com", "amount": 100})

    result = IdentityResolver(records).resolve("loanrequest", primary_key="X", secondary_key="a@b.com")

    assert result.ok
    assert [r["id"] for r in result.data] == [1]
    assert len(records.ops("select", "loanrequest")) == 2


def test_failed_employee_id_query_without_email_is_reported():
    records = _NoEmployeeIdColumn()

    result = IdentityResolver(records).resolve("loanrequest", primary_key="X")

    assert result.error_kind == ErrorKind.STORAGE_ERROR
    assert result.error == "Unknown column 'empid' in 'where clause'"


def test_matching_field_uses_email_when_employee_id_query_fails():
    resolver = IdentityResolver(_NoEmployeeIdColumn())

    assert resolver.matching_field("loanrequest", "X", "a@b.com") == ("email", "a@b.com")
