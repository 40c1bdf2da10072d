"""
Unit tests for scope-aware updates.

Given a weekly series, check that "single" edits stay put and "future"
edits shift or patch the target and every later occurrence only.
"""

from datetime import datetime, timedelta, timezone

import pytest

from coachboard.core.scheduling.errors import InvalidSessionError, SessionNotFoundError
from coachboard.core.scheduling.models import SessionType, UpdateScope
from coachboard.core.scheduling.updates import (
    apply_scoped_update,
    resolve_scoped_update,
    toggle_completed,
)

UTC = timezone.utc


def week(n: int, hour: int = 9, minute: int = 0) -> datetime:
    """Start of the n-th weekly occurrence (0-based) from Jan 6, 2025."""
    return datetime(2025, 1, 6, hour, minute, tzinfo=UTC) + timedelta(weeks=n)


@pytest.fixture
def series(make_session):
    """Five weekly 09:00 sessions in one series: w0..w4."""
    return [
        make_session(week(n), 60, id=f"w{n}", series_id="series-a", notes="original")
        for n in range(5)
    ]


@pytest.fixture
def one_off(make_session):
    return make_session(week(1, hour=14), 45, id="solo", notes="original")


def by_id(sessions):
    return {s.id: s for s in sessions}


class TestSingleScope:
    """Tests for editing one occurrence."""

    def test_only_target_changes(self, series):
        updated = apply_scoped_update(
            series, "w2", {"start_time": week(2, 10), "notes": "moved"}, "single",
        )

        result = by_id(updated)
        assert result["w2"].start_time == week(2, 10)
        assert result["w2"].notes == "moved"
        for other in ["w0", "w1", "w3", "w4"]:
            assert result[other] == by_id(series)[other]

    def test_resolve_returns_only_target(self, series):
        changed = resolve_scoped_update(series, "w2", {"notes": "x"}, UpdateScope.SINGLE)
        assert [s.id for s in changed] == ["w2"]

    def test_series_id_is_kept(self, series):
        changed = resolve_scoped_update(series, "w1", {"duration_minutes": 90}, "single")
        assert changed[0].series_id == "series-a"
        assert changed[0].duration_minutes == 90

    def test_one_off_session(self, one_off):
        changed = resolve_scoped_update([one_off], "solo", {"completed": True}, "single")
        assert changed[0].completed is True


class TestFutureScope:
    """Tests for editing this and later occurrences."""

    def test_time_shift_moves_target_and_later(self, make_session):
        """Moving week 2 by +30 minutes moves weeks 2 and 3; week 1 stays."""
        sessions = [
            make_session(week(n), 60, id=f"w{n}", series_id="series-b")
            for n in range(3)
        ]

        updated = by_id(apply_scoped_update(
            sessions, "w1", {"start_time": week(1, 9, 30)}, "future",
        ))

        assert updated["w0"].start_time == week(0)
        assert updated["w1"].start_time == week(1, 9, 30)
        assert updated["w2"].start_time == week(2, 9, 30)

    def test_shift_preserves_spacing(self, series):
        """A shift across days keeps each occurrence a week apart."""
        changed = resolve_scoped_update(
            series, "w1", {"start_time": week(1) + timedelta(days=2, hours=-1)}, "future",
        )

        assert [s.id for s in changed] == ["w1", "w2", "w3", "w4"]
        for original, moved in zip(series[1:], changed):
            assert moved.start_time - original.start_time == timedelta(days=2, hours=-1)

    def test_non_time_fields_propagate_without_moving(self, series):
        changed = by_id(resolve_scoped_update(
            series, "w3", {"notes": "new plan", "session_type": SessionType.ONLINE}, "future",
        ))

        assert set(changed) == {"w3", "w4"}
        for session in changed.values():
            assert session.notes == "new plan"
            assert session.session_type == SessionType.ONLINE
            assert session.start_time == by_id(series)[session.id].start_time

    def test_time_and_fields_together(self, series):
        changed = by_id(resolve_scoped_update(
            series, "w3", {"start_time": week(3, 8), "duration_minutes": 45}, "future",
        ))

        assert changed["w3"].start_time == week(3, 8)
        assert changed["w4"].start_time == week(4, 8)
        assert changed["w3"].duration_minutes == 45
        assert changed["w4"].duration_minutes == 45

    def test_earlier_occurrences_untouched(self, series):
        updated = by_id(apply_scoped_update(series, "w2", {"notes": "later"}, "future"))

        assert updated["w0"] == series[0]
        assert updated["w1"] == series[1]
        assert updated["w2"].notes == "later"

    def test_absent_fields_left_alone_per_session(self, make_session):
        """Patch semantics: each occurrence keeps its own unpatched values."""
        sessions = [
            make_session(week(0), 60, id="w0", series_id="s", notes="first"),
            make_session(week(1), 60, id="w1", series_id="s", notes="second"),
        ]

        changed = by_id(resolve_scoped_update(sessions, "w0", {"duration_minutes": 30}, "future"))

        assert changed["w0"].notes == "first"
        assert changed["w1"].notes == "second"

    def test_other_series_untouched(self, series, make_session):
        other = make_session(week(3), 60, id="other", series_id="series-z")

        updated = by_id(apply_scoped_update(
            series + [other], "w1", {"start_time": week(1, 11)}, "future",
        ))

        assert updated["other"] == other

    def test_one_off_degrades_to_single(self, one_off, series):
        """Without a series, future scope behaves exactly like single scope."""
        collection = series + [one_off]
        patch = {"start_time": week(1, 15), "notes": "moved"}

        future = apply_scoped_update(collection, "solo", patch, "future")
        single = apply_scoped_update(collection, "solo", patch, "single")

        assert future == single

    def test_propagate_fields_restricts_spread(self, series):
        """Only allowed fields reach other occurrences; the target gets everything."""
        changed = by_id(resolve_scoped_update(
            series,
            "w2",
            {"start_time": week(2, 10), "notes": "just this week", "duration_minutes": 90},
            "future",
            propagate_fields=["duration_minutes"],
        ))

        assert changed["w2"].notes == "just this week"
        assert changed["w3"].notes == "original"
        assert changed["w3"].duration_minutes == 90
        assert changed["w3"].start_time == week(3, 10)

    def test_results_are_chronological(self, series):
        shuffled = [series[3], series[0], series[4], series[2], series[1]]
        changed = resolve_scoped_update(shuffled, "w2", {"notes": "x"}, "future")
        assert [s.id for s in changed] == ["w2", "w3", "w4"]


class TestApplyScopedUpdate:
    """Tests for merging changes back into the full collection."""

    def test_preserves_order_and_size(self, series, one_off):
        collection = [series[2], one_off, series[0], series[4], series[1], series[3]]

        updated = apply_scoped_update(collection, "w1", {"notes": "x"}, "future")

        assert [s.id for s in updated] == [s.id for s in collection]

    def test_input_not_modified(self, series):
        snapshot = list(series)
        apply_scoped_update(series, "w0", {"start_time": week(0, 12)}, "future")
        assert series == snapshot


class TestErrors:
    """Tests for rejected updates."""

    def test_unknown_target(self, series):
        with pytest.raises(SessionNotFoundError):
            apply_scoped_update(series, "missing", {"notes": "x"}, "single")

    @pytest.mark.parametrize("field", ["id", "series_id"])
    def test_immutable_fields_rejected(self, series, field):
        with pytest.raises(InvalidSessionError, match="cannot be updated"):
            resolve_scoped_update(series, "w0", {field: "other"}, "single")

    def test_unknown_field_rejected(self, series):
        with pytest.raises(InvalidSessionError, match="Unknown"):
            resolve_scoped_update(series, "w0", {"colour": "red"}, "single")

    def test_invalid_duration_rejected(self, series):
        with pytest.raises(InvalidSessionError):
            resolve_scoped_update(series, "w0", {"duration_minutes": 0}, "future")

    @pytest.mark.parametrize("scope", ["single", "future"])
    def test_null_start_time_rejected_in_both_scopes(self, series, scope):
        with pytest.raises(InvalidSessionError, match="must be a datetime"):
            resolve_scoped_update(series, "w1", {"start_time": None}, scope)

    @pytest.mark.parametrize("scope", ["single", "future"])
    def test_naive_start_time_rejected_in_both_scopes(self, series, scope):
        with pytest.raises(InvalidSessionError, match="timezone-aware"):
            resolve_scoped_update(series, "w1", {"start_time": datetime(2025, 1, 13, 9, 30)}, scope)

    def test_invalid_scope_rejected(self, series):
        with pytest.raises(ValueError):
            resolve_scoped_update(series, "w0", {"notes": "x"}, "everything")


class TestToggleCompleted:

    def test_flips_flag(self, one_off):
        done = toggle_completed([one_off], "solo")
        assert done.completed is True
        assert toggle_completed([done], "solo").completed is False

    def test_unknown_session(self, one_off):
        with pytest.raises(SessionNotFoundError):
            toggle_completed([one_off], "missing")
