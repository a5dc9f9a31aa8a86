"""
Unit tests for kpi_portal/templates_config.py -- date formatting, JSON serialization, filters.
"""
import os
import sys
import json
import pytest
from datetime import datetime, date

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))
os.environ.setdefault("DATABASE_URL", "")

from kpi_portal.templates_config import format_date, json_serial, safe_tojson, status_css, templates

pytestmark = pytest.mark.unit


# ── format_date ──────────────────────────────────────────────────────

class TestFormatDate:
    def test_none_returns_dash(self):
        assert format_date(None) == "-"

    def test_date_object(self):
        assert format_date(date(2025, 6, 1)) == "01/06/2025"

    def test_datetime_object(self):
        assert format_date(datetime(2025, 3, 15, 10, 30, 45)) == "15/03/2025"

    def test_date_string(self):
        assert format_date("2025-03-15") == "15/03/2025"

    def test_datetime_string(self):
        assert format_date("2025-03-15 10:30:45") == "15/03/2025"

    def test_unparsable_string_returned_as_is(self):
        assert format_date("domani") == "domani"

    def test_custom_format(self):
        assert format_date(date(2025, 6, 1), "%Y-%m") == "2025-06"


# ── json_serial / safe_tojson ────────────────────────────────────────

class TestJsonSerial:
    def test_datetime_serialized(self):
        assert json_serial(datetime(2025, 3, 15, 10, 30, 45)) == "2025-03-15T10:30:45"

    def test_date_serialized(self):
        assert json_serial(date(2025, 3, 15)) == "2025-03-15"

    def test_other_types_raise(self):
        with pytest.raises(TypeError):
            json_serial(object())


class TestSafeToJson:
    def test_dict_with_dates(self):
        result = json.loads(safe_tojson({"end_date": date(2025, 12, 31), "progress": 20.5}))
        assert result == {"end_date": "2025-12-31", "progress": 20.5}

    def test_list(self):
        assert json.loads(safe_tojson([1, 2, 3])) == [1, 2, 3]


# ── status_css ───────────────────────────────────────────────────────

class TestStatusCss:
    @pytest.mark.parametrize("status,css", [
        ("Completed", "status-done"),
        ("Achieved", "status-done"),
        ("In progress", "status-active"),
        ("Behind", "status-late"),
        ("Not achieved", "status-late"),
    ])
    def test_known_statuses(self, status, css):
        assert status_css(status) == css

    def test_unknown_status(self):
        assert status_css("Unknown") == "status-late"


# ── Filter registration ──────────────────────────────────────────────

class TestFiltersRegistered:
    @pytest.mark.parametrize("name", [
        "format_date", "format_number", "format_compact", "format_label", "status_css", "safe_tojson",
    ])
    def test_filter_available(self, name):
        assert name in templates.env.filters
