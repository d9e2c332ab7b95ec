"""
Unit tests for core.policies.
Access rules and progress arithmetic, checked on plain objects (no database).
"""
import datetime as dt
from types import SimpleNamespace

from vidvault.core.policies import (
    COMPLETION_THRESHOLD,
    completion_percentage,
    entitlement_has_access,
    progress_fields,
    summarize_entitlements,
    token_is_valid,
    utc_now,
    video_is_published,
)
from vidvault.models.video import VideoStatus


NOW = dt.datetime(2024, 5, 1, 12, 0, tzinfo=dt.timezone.utc)


class TestTokenValidity:
    def test_unused_and_unexpired_is_valid(self):
        token = SimpleNamespace(is_used=False, expires_at=NOW + dt.timedelta(minutes=10))
        assert token_is_valid(token, NOW) is True

    def test_valid_exactly_at_expiry(self):
        token = SimpleNamespace(is_used=False, expires_at=NOW)
        assert token_is_valid(token, NOW) is True

    def test_expired_is_invalid(self):
        token = SimpleNamespace(is_used=False, expires_at=NOW - dt.timedelta(seconds=1))
        assert token_is_valid(token, NOW) is False

    def test_used_is_invalid(self):
        token = SimpleNamespace(is_used=True, expires_at=NOW + dt.timedelta(minutes=10))
        assert token_is_valid(token, NOW) is False


class TestEntitlementAccess:
    def test_open_ended_grant(self):
        assert entitlement_has_access(SimpleNamespace(is_active=True, expires_at=None), NOW) is True

    def test_future_expiry(self):
        e = SimpleNamespace(is_active=True, expires_at=NOW + dt.timedelta(days=1))
        assert entitlement_has_access(e, NOW) is True

    def test_past_expiry(self):
        e = SimpleNamespace(is_active=True, expires_at=NOW - dt.timedelta(seconds=1))
        assert entitlement_has_access(e, NOW) is False

    def test_revoked_grant(self):
        assert entitlement_has_access(SimpleNamespace(is_active=False, expires_at=None), NOW) is False


class TestVideoPublished:
    def test_published_and_active(self):
        assert video_is_published(SimpleNamespace(status=VideoStatus.PUBLISHED, is_active=True))

    def test_draft_or_archived_is_hidden(self):
        assert not video_is_published(SimpleNamespace(status=VideoStatus.DRAFT, is_active=True))
        assert not video_is_published(SimpleNamespace(status=VideoStatus.ARCHIVED, is_active=True))

    def test_inactive_is_hidden(self):
        assert not video_is_published(SimpleNamespace(status=VideoStatus.PUBLISHED, is_active=False))


class TestCompletion:
    def test_ninety_percent_completes(self):
        fields = progress_fields(90, 100)
        assert fields == {"watch_position": 90, "completion_percentage": 90, "is_completed": True}

    def test_eighty_nine_percent_does_not_complete(self):
        fields = progress_fields(89, 100)
        assert fields["completion_percentage"] == 89
        assert fields["is_completed"] is False

    def test_threshold_constant(self):
        assert COMPLETION_THRESHOLD == 90

    def test_rounding(self):
        assert completion_percentage(1, 3) == 33
        assert completion_percentage(2, 3) == 67

    def test_position_past_the_end_is_clamped(self):
        assert completion_percentage(250, 100) == 100

    def test_unknown_duration_gives_zero(self):
        assert completion_percentage(30, 0) == 0


class TestSummarizeEntitlements:
    @staticmethod
    def _row(view_count=0, is_completed=False, watch_position=0):
        return SimpleNamespace(view_count=view_count, is_completed=is_completed, watch_position=watch_position)

    def test_no_rows(self):
        assert summarize_entitlements([]) == {
            "totalViews": 0,
            "uniqueViewers": 0,
            "completionRate": 0,
            "averageWatchTime": 0,
        }

    def test_zero_viewers_gives_zero_completion_rate(self):
        stats = summarize_entitlements([self._row(), self._row()])
        assert stats["uniqueViewers"] == 0
        assert stats["completionRate"] == 0

    def test_aggregates(self):
        rows = [
            self._row(view_count=3, is_completed=True, watch_position=95),
            self._row(view_count=1, is_completed=False, watch_position=40),
            self._row(view_count=2, is_completed=False, watch_position=10),
            self._row(),  # assigned, never watched
        ]
        stats = summarize_entitlements(rows)
        assert stats["totalViews"] == 6
        assert stats["uniqueViewers"] == 3
        assert stats["completionRate"] == 33.33
        assert stats["averageWatchTime"] == 36  # (95 + 40 + 10 + 0) / 4 = 36.25


def test_utc_now_is_timezone_aware():
    assert utc_now().tzinfo is not None
