# =============================================================================
# tests/test_validation.py - Body gates, date round-trips and field schemas
# =============================================================================

from datetime import datetime, timezone

import pytest

from exceptions import ClientInputError, KEYS_NOT_ALLOWED
from schemas import BugFields, ProjectFields, UserFields
from validation import (
    allowed_keys_only,
    body_is_empty,
    check_body,
    convert_dates,
    date_strings_are_valid,
    format_iso_date,
    is_iso_date_string,
    parse_id,
    parse_iso_date,
    required_keys_present,
)


# =============================================================================
# Generic body gates
# =============================================================================

class TestBodyGates:

    def test_body_is_empty(self):
        assert body_is_empty({})
        assert not body_is_empty({"title": None})

    def test_allowed_keys_only(self):
        assert allowed_keys_only({"title": "x"}, ["title", "description"])
        assert allowed_keys_only({}, ["title"])
        assert not allowed_keys_only({"title": "x", "owner": 1}, ["title", "description"])

    def test_required_keys_present_counts_null_values(self):
        assert required_keys_present({"title": None}, ["title"])
        assert not required_keys_present({"description": "x"}, ["title"])

    def test_check_body_order(self):
        """Empty body wins over keys, keys win over values."""
        kwargs = dict(allowed=["title"], required=["title"], fields=ProjectFields)

        with pytest.raises(ClientInputError) as exc:
            check_body({}, **kwargs)
        assert exc.value.message == "Body missing."

        with pytest.raises(ClientInputError) as exc:
            check_body(None, **kwargs)
        assert exc.value.message == "Body missing."

        with pytest.raises(ClientInputError) as exc:
            check_body({"title": "", "bogus": 1}, **kwargs)
        assert exc.value.message == "Some keys are invalid or missing."

        with pytest.raises(ClientInputError) as exc:
            check_body({"title": ""}, **kwargs)
        assert exc.value.message == "Some values are invalid."

    def test_check_body_custom_keys_message(self):
        with pytest.raises(ClientInputError) as exc:
            check_body({"bogus": 1}, allowed=["title"], fields=ProjectFields,
                       keys_message=KEYS_NOT_ALLOWED)
        assert exc.value.message == KEYS_NOT_ALLOWED

    def test_check_body_rejects_non_object(self):
        with pytest.raises(ClientInputError) as exc:
            check_body(["title"], allowed=["title"], fields=ProjectFields)
        assert exc.value.message == "Some keys are invalid or missing."

    def test_check_body_returns_copy(self):
        body = {"title": "Tracker"}
        values = check_body(body, allowed=["title"], fields=ProjectFields)
        assert values == body
        assert values is not body

    def test_parse_id(self):
        assert parse_id("42") == 42
        with pytest.raises(ClientInputError) as exc:
            parse_id("abc", "Unvalid projectId")
        assert exc.value.message == "Unvalid projectId"
        assert exc.value.status_code == 400

    @pytest.mark.parametrize("raw", ["0", "-3", "99999999999999999999", str(2**63)])
    def test_parse_id_out_of_store_range(self, raw):
        with pytest.raises(ClientInputError) as exc:
            parse_id(raw)
        assert exc.value.message == "Unvalid id"

    def test_parse_id_largest_store_id(self):
        assert parse_id(str(2**63 - 1)) == 2**63 - 1


# =============================================================================
# Dates
# =============================================================================

class TestDates:

    @pytest.mark.parametrize("value", [
        "2023-04-01T12:30:00.000Z",
        "1999-12-31T23:59:59.999Z",
        "0999-01-01T00:00:00.000Z",
    ])
    def test_canonical_strings_round_trip(self, value):
        assert is_iso_date_string(value)

    @pytest.mark.parametrize("value", [
        "2023-04-01",
        "2023-04-01T12:30:00Z",
        "2023-04-01T12:30:00.000+00:00",
        "2023-04-01T12:30:00.000500Z",
        "2023-02-30T00:00:00.000Z",
        "not a date",
        "",
        1680352200,
        None,
    ])
    def test_non_round_tripping_values_rejected(self, value):
        assert not is_iso_date_string(value)

    def test_format_iso_date(self):
        assert format_iso_date(datetime(2023, 4, 1, 12, 30, 0, 123456)) == "2023-04-01T12:30:00.123Z"

    def test_format_pads_early_years(self):
        assert format_iso_date(datetime(999, 1, 1, tzinfo=timezone.utc)) == "0999-01-01T00:00:00.000Z"

    def test_parse_keeps_utc(self):
        parsed = parse_iso_date("2023-04-01T12:30:00.000Z")
        assert parsed.tzinfo is not None
        assert parsed.utcoffset().total_seconds() == 0

    def test_convert_dates_keeps_nulls(self):
        converted = convert_dates(
            {"title": "x", "due_date": "2023-04-01T12:30:00.000Z", "end_date": None},
            ["due_date", "end_date"],
        )
        assert converted["due_date"] == datetime(2023, 4, 1, 12, 30, tzinfo=timezone.utc)
        assert converted["end_date"] is None
        assert converted["title"] == "x"

    def test_date_strings_are_valid(self):
        keys = ["due_date", "end_date"]
        assert date_strings_are_valid({"due_date": "2023-04-01T00:00:00.000Z"}, keys)
        assert date_strings_are_valid({"title": "x"}, keys)
        assert not date_strings_are_valid({"end_date": "2023-04-01"}, keys)


# =============================================================================
# Field schemas
# =============================================================================

def _valid(model, body):
    try:
        model.model_validate(body)
    except ValueError:
        return False
    return True


class TestProjectFields:

    def test_accepts_title_and_nullable_description(self):
        assert _valid(ProjectFields, {"title": "Tracker", "description": None})

    @pytest.mark.parametrize("body", [
        {"title": ""},
        {"title": None},
        {"title": 3},
        {"description": 12},
    ])
    def test_rejects_bad_values(self, body):
        assert not _valid(ProjectFields, body)


class TestBugFields:

    def test_accepts_full_body(self):
        assert _valid(BugFields, {
            "title": "Crash on save",
            "description": None,
            "priority": 3,
            "status": "close",
            "due_date": "2023-04-01T00:00:00.000Z",
            "end_date": None,
        })

    @pytest.mark.parametrize("body", [
        {"priority": "3"},
        {"priority": 2.5},
        {"priority": True},
        {"priority": 2**70},
        {"priority": -2**63 - 1},
        {"status": "closed"},
        {"status": None},
        {"due_date": "2023-04-01"},
        {"end_date": 5},
    ])
    def test_rejects_bad_values(self, body):
        assert not _valid(BugFields, body)


class TestUserFields:

    def test_accepts_matching_passwords(self):
        assert _valid(UserFields, {
            "username": "bob", "email": "bob@x.com", "password": "pw", "password2": "pw",
        })

    @pytest.mark.parametrize("email", ["user.@user", "bob@x", "bob x@y", 42])
    def test_rejects_bad_emails(self, email):
        assert not _valid(UserFields, {"email": email})

    def test_rejects_mismatched_passwords(self):
        assert not _valid(UserFields, {"password": "pw", "password2": "other"})

    def test_rejects_password2_alone(self):
        assert not _valid(UserFields, {"password2": "pw"})

    def test_rejects_empty_strings(self):
        assert not _valid(UserFields, {"username": ""})
        assert not _valid(UserFields, {"password": ""})

    def test_ignores_unknown_keys(self):
        assert _valid(UserFields, {"username": "bob", "whatever": object()})
