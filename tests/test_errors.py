"""
Tests for error handling: structured error responses, HTTP status codes,
and the custom exception classes.
"""
from datetime import date

import pytest

from moodlog.core.errors import (
    CatalogError,
    DuplicateDayError,
    EntryNotFoundError,
    InvalidEntryError,
    NoPendingEntryError,
    ReplaceFailedError,
    ReviewNotFoundError,
    ReviewNotReadyError,
)


# ---------------------------------------------------------------------------
# Unit tests on exception classes
# ---------------------------------------------------------------------------

class TestExceptionClasses:
    def test_duplicate_day(self):
        err = DuplicateDayError(day=date(2026, 3, 2), pending={"candidate": {"mood_level": 8}})
        assert err.http_status == 409
        assert err.code == "DUPLICATE_DAY_PENDING"
        d = err.to_dict()
        assert d["details"]["day"] == "2026-03-02"
        assert d["details"]["pending"]["candidate"]["mood_level"] == 8

    def test_replace_failed(self):
        err = ReplaceFailedError(date(2026, 3, 2), entry_id=5)
        assert err.http_status == 500
        assert err.code == "REPLACE_FAILED"
        assert err.details == {"day": "2026-03-02", "entry_id": 5}

    def test_not_found_errors(self):
        assert EntryNotFoundError(3).http_status == 404
        assert EntryNotFoundError(3).details == {"entry_id": 3}
        assert ReviewNotFoundError("abc").code == "REVIEW_NOT_FOUND"

    def test_review_not_ready(self):
        err = ReviewNotReadyError(attempts=3)
        assert err.http_status == 503
        assert "3 attempt" in err.message

    def test_invalid_entry(self):
        err = InvalidEntryError("bad", field="mood_level")
        assert err.http_status == 422
        assert err.details == {"field": "mood_level"}

    def test_catalog_error(self):
        assert CatalogError("broken").to_dict() == {"code": "CATALOG_ERROR", "message": "broken"}

    def test_to_dict_without_details(self):
        d = NoPendingEntryError().to_dict()
        assert d["code"] == "NO_PENDING_ENTRY"
        assert "details" not in d


# ---------------------------------------------------------------------------
# Integration tests on HTTP error responses
# ---------------------------------------------------------------------------

class TestValidationErrors:
    def test_missing_mood(self, client, user_id):
        r = client.post(f"/users/{user_id}/entries", json={})
        assert r.status_code == 422
        body = r.json()
        assert body["code"] == "VALIDATION_ERROR"
        fields = [e["field"] for e in body["details"]["errors"]]
        assert any("mood_level" in f for f in fields)

    @pytest.mark.parametrize("mood", [-1, 10.5, "happy"])
    def test_mood_out_of_range(self, client, user_id, mood):
        r = client.post(f"/users/{user_id}/entries", json={"mood_level": mood})
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"

    def test_bad_impact(self, client, user_id):
        r = client.post(f"/users/{user_id}/entries",
                        json={"mood_level": 5, "factors": {"Work": "neutral"}})
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"

    def test_unknown_factor(self, client, user_id):
        r = client.post(f"/users/{user_id}/entries",
                        json={"mood_level": 5, "factors": {"Gardening": "positive"}})
        assert r.status_code == 422
        body = r.json()
        assert body["code"] == "INVALID_ENTRY"
        assert body["details"]["field"] == "factors"

    def test_bad_trend_range(self, client, user_id):
        r = client.get(f"/users/{user_id}/analytics/trend", params={"range": "year"})
        assert r.status_code == 422

    def test_preference_hour_bounds(self, client, user_id):
        r = client.put(f"/users/{user_id}/notifications/preferences", json={"daily_reminder_hour": 24})
        assert r.status_code == 422


class TestConflictErrors:
    def test_pending_flow_codes(self, client, user_id):
        r = client.post(f"/users/{user_id}/entries/pending/confirm")
        assert r.status_code == 409
        assert r.json()["code"] == "NO_PENDING_ENTRY"

        r = client.delete(f"/users/{user_id}/entries/pending")
        assert r.status_code == 409

    def test_entry_not_found(self, client, user_id):
        r = client.patch(f"/users/{user_id}/entries/999999", json={"mood_level": 5})
        assert r.status_code == 404
        assert r.json()["code"] == "ENTRY_NOT_FOUND"

    def test_review_not_found(self, client, user_id):
        r = client.post(f"/users/{user_id}/reviews/nope/viewed")
        assert r.status_code == 404
        assert r.json()["code"] == "REVIEW_NOT_FOUND"
