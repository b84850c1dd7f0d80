"""Row mappers, the dev-session filter and date ranges."""

from __future__ import annotations

import pytest

from notsoai.core.errors import ApiError
from notsoai.services.mappers import map_client, normalize_chat_session
from notsoai.services.session_filters import filter_dev_sessions, should_exclude_dev_session
from notsoai.utils.dates import parse_date_range, parse_timestamp


class TestNormalizeChatSession:

    RAW = {
        "id": "cs_1",
        "mascot_id": "helper",
        "client_id": "acme-inc",
        "ip_address": "203.0.113.42",
        "browser": "Chrome 120.0.1",
        "os": "Windows",
        "device_type": "Mobile",
        "country": "NL",
        "referrer_url": "https://www.google.com/search?q=x",
        "page_url": "https://acme.example/pricing",
        "session_started_at": "2025-03-01T10:00:00Z",
        "session_ended_at": "2025-03-01T10:02:30.400Z",
        "user_messages": 3,
        "assistant_messages": 2,
        "total_prompt_tokens": 100,
        "total_completion_tokens": 40,
        "is_active": True,
    }

    def test_derived_fields(self):
        session = normalize_chat_session(self.RAW)
        assert session["session_duration_seconds"] == 150
        assert session["total_messages"] == 5
        assert session["user_messages"] == 3
        assert session["assistant_messages"] == 2
        assert session["browser_name"] == "Chrome"
        assert session["browser_version"] == "120.0.1"
        assert session["os_name"] == "Windows"
        assert session["os_version"] is None
        assert session["is_mobile"] is True
        assert session["status"] == "active"
        assert session["referrer_domain"] == "www.google.com"
        assert session["visitor_ip_hash"] == "203.0.113.xxx"
        assert session["input_tokens"] == 100
        assert session["output_tokens"] == 40

    def test_fallback_columns(self):
        session = normalize_chat_session(self.RAW)
        assert session["mascot_slug"] == "helper"
        assert session["client_slug"] == "acme-inc"
        assert session["visitor_country"] == "NL"
        assert session["landing_page_url"] == "https://acme.example/pricing"

    def test_open_session_has_no_duration(self):
        raw = {**self.RAW, "session_ended_at": None, "is_active": False}
        session = normalize_chat_session(raw)
        assert session["session_duration_seconds"] is None
        assert session["status"] == "ended"

    def test_explicit_totals_win(self):
        raw = {**self.RAW, "total_messages": 9, "total_user_messages": 4, "total_bot_messages": 5}
        session = normalize_chat_session(raw)
        assert (session["total_messages"], session["user_messages"], session["assistant_messages"]) == (9, 4, 5)


class TestMapClient:

    def test_credentials_never_exposed(self):
        client = map_client({
            "id": "c_1",
            "slug": "acme-inc",
            "name": "Acme",
            "login": {"password": "hunter2"},
            "password_hash": "$2b$...",
            "default_workspace_id": "ws_1",
        })
        assert "login" not in client
        assert "password_hash" not in client
        assert client["defaultWorkspaceId"] == "ws_1"
        assert client["isDemo"] is False


class TestDevSessionFilter:

    @pytest.mark.parametrize("row", [
        {"total_messages": 0},
        {"total_bot_messages": 0, "total_user_messages": 0},
        {"total_messages": 4, "domain": "localhost"},
        {"total_messages": 4, "domain": "localhost:3000"},
        {"total_messages": 4, "domain": "http://localhost:5173/page"},
        {"total_messages": 4, "domain": "LOCALHOST"},
        {"total_messages": 4, "ip_address": "::1", "is_dev": True},
    ])
    def test_excluded(self, row):
        assert should_exclude_dev_session(row)

    @pytest.mark.parametrize("row", [
        {"total_messages": 4, "domain": "acme.example"},
        {"domain": "acme.example"},
        {"total_messages": 4, "ip_address": "::1", "is_dev": False},
        {"total_messages": 4, "ip_address": "127.0.0.1", "is_dev": True},
        {"total_messages": 4, "domain": "localhost.acme.example"},
    ])
    def test_kept(self, row):
        assert not should_exclude_dev_session(row)

    def test_filter_keeps_order(self):
        rows = [{"id": 1, "total_messages": 2}, {"id": 2, "total_messages": 0}, {"id": 3, "total_messages": 1}]
        assert [r["id"] for r in filter_dev_sessions(rows)] == [1, 3]


class TestDateRange:

    def test_needs_both_bounds(self):
        assert parse_date_range("2025-03-01", None) is None
        assert parse_date_range(None, None) is None

    def test_parses_bounds(self):
        date_range = parse_date_range("2025-03-01T00:00:00Z", "2025-03-31T23:59:59Z")
        assert date_range.start.year == 2025
        assert date_range.start.tzinfo is not None
        assert date_range.start < date_range.end

    def test_invalid_date(self):
        with pytest.raises(ApiError) as exc_info:
            parse_date_range("yesterday", "2025-03-31")
        assert exc_info.value.status_code == 400
        assert exc_info.value.errors == {"from": "Invalid date"}

    def test_reversed_range(self):
        with pytest.raises(ApiError) as exc_info:
            parse_date_range("2025-04-01", "2025-03-01")
        assert exc_info.value.code == "VALIDATION_ERROR"

    def test_offsets_normalised_to_utc(self):
        date_range = parse_date_range("2025-03-01T01:00:00+02:00", "2025-03-01T12:00:00-05:00")
        assert date_range.start == parse_timestamp("2025-02-28T23:00:00Z")
        assert date_range.start.utcoffset().total_seconds() == 0
        assert date_range.end.hour == 17


class TestParseTimestamp:

    def test_naive_is_utc(self):
        assert parse_timestamp("2025-03-01T10:00:00").utcoffset().total_seconds() == 0

    def test_offset_converted(self):
        parsed = parse_timestamp("2025-03-01T01:30:00+02:00")
        assert (parsed.day, parsed.hour, parsed.minute) == (28, 23, 30)

    @pytest.mark.parametrize("value", [None, "", "soon"])
    def test_unparseable(self, value):
        assert parse_timestamp(value) is None
