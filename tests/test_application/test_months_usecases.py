"""
Tests for month folder use-cases
"""
import pytest
from sqlalchemy.exc import DataError

from po_tracker.infrastructure.db.models import MonthModel
from po_tracker.application.months import (
    CreateMonthUseCase, MonthValidationError, month_key_from_label, list_months,
)


class TestCreateMonth:
    def test_create_basic(self, db_session, clock):
        mid = CreateMonthUseCase(db_session, clock).execute("2026-01", "Jan 2026")
        m = db_session.get(MonthModel, mid)
        assert m.month_key == "2026-01"
        assert m.label == "Jan 2026"
        assert m.created_at is not None

    def test_label_defaults_to_key(self, db_session, clock):
        mid = CreateMonthUseCase(db_session, clock).execute("2026-02")
        assert db_session.get(MonthModel, mid).label == "2026-02"

    def test_key_derived_from_label(self, db_session, clock):
        mid = CreateMonthUseCase(db_session, clock).execute(None, "March 2026")
        assert db_session.get(MonthModel, mid).month_key == "2026-03"

    @pytest.mark.parametrize("key", ["2026-1", "26-01", "2026/01", "abc", ""])
    def test_invalid_key_rejected(self, db_session, clock, key):
        with pytest.raises(MonthValidationError, match="YYYY-MM"):
            CreateMonthUseCase(db_session, clock).execute(key, "whatever")

    def test_duplicate_key_surfaces_db_message(self, db_session, clock):
        CreateMonthUseCase(db_session, clock).execute("2026-01")
        with pytest.raises(MonthValidationError, match="UNIQUE"):
            CreateMonthUseCase(db_session, clock).execute("2026-01", "again")
        assert db_session.query(MonthModel).count() == 1


class TestMonthKeyFromLabel:
    @pytest.mark.parametrize("label,expected", [
        ("Jan 2026", "2026-01"),
        ("January 2026", "2026-01"),
        ("  dec   2025 ", "2025-12"),
        ("2026-07", "2026-07"),
        ("07/2026", "2026-07"),
    ])
    def test_parse(self, label, expected):
        assert month_key_from_label(label) == expected

    @pytest.mark.parametrize("label", ["", None, "someday", "13/2026"])
    def test_unparseable(self, label):
        assert month_key_from_label(label) is None


def test_list_months_newest_first(db_session, clock):
    for key in ("2025-12", "2026-02", "2026-01"):
        CreateMonthUseCase(db_session, clock).execute(key)
    assert [m.month_key for m in list_months(db_session)] == ["2026-02", "2026-01", "2025-12"]


def test_database_error_becomes_validation_error(db_session, clock, monkeypatch):
    def value_too_long():
        raise DataError("INSERT INTO months ...", {}, Exception("value too long for type character varying(64)"))

    monkeypatch.setattr(db_session, "commit", value_too_long)
    with pytest.raises(MonthValidationError, match="value too long"):
        CreateMonthUseCase(db_session, clock).execute("2026-03", "x" * 65)

    monkeypatch.undo()
    assert db_session.query(MonthModel).count() == 0
