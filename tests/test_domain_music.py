"""
Unit Tests for the Music Domain

Tests for:
- Entities: Media, QueueEntry, NowPlaying
- Value Objects: PlaybackState, FinishReason
- Services: QueueAccountant
- Formatting: format_duration, duration_bar, format_playlist
"""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from conftest import make_entry
from opendj.domain.music.entities import Media, NowPlaying, QueueEntry
from opendj.domain.music.formatting import duration_bar, format_duration, format_playlist
from opendj.domain.music.services import QueueAccountant
from opendj.domain.music.value_objects import FinishReason, PlaybackOutcome, PlaybackState
from opendj.domain.shared.exceptions import UserNotQueuedError

# =============================================================================
# Entities
# =============================================================================


class TestMedia:
    """Unit tests for the Media value object."""

    def test_is_frozen(self, sample_media):
        with pytest.raises(ValidationError):
            sample_media.title = "other"

    def test_negative_duration_rejected(self):
        with pytest.raises(ValidationError):
            Media(title="x", locator="loc", duration_seconds=-1.0)

    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError):
            Media(title="", locator="loc", duration_seconds=1.0)

    def test_duration_formatted(self):
        media = Media(title="x", locator="loc", duration_seconds=185.0)

        assert media.duration_formatted == "03:05"


class TestQueueEntry:
    """Unit tests for QueueEntry."""

    def test_empty_owner_rejected(self, sample_media):
        with pytest.raises(ValidationError):
            QueueEntry(media=sample_media, owner="")

    def test_defaults(self, sample_media):
        entry = QueueEntry(media=sample_media, owner="alice")

        assert entry.dedication is None
        assert entry.is_dedicated is False
        assert entry.requested_at.tzinfo is not None

    def test_with_dedication_returns_copy(self, sample_entry):
        dedicated = sample_entry.with_dedication("bob")

        assert dedicated.dedication == "bob"
        assert sample_entry.dedication is None

    def test_with_dedication_validates_target(self, sample_entry):
        with pytest.raises(ValidationError):
            sample_entry.with_dedication("x" * 80)

    def test_naive_requested_at_rejected(self, sample_media):
        with pytest.raises(ValidationError):
            QueueEntry(media=sample_media, owner="alice", requested_at=datetime(2024, 1, 1))

    def test_requested_at_normalized_to_utc(self, sample_media):
        entry = QueueEntry(
            media=sample_media, owner="alice", requested_at=datetime(2024, 1, 1, tzinfo=UTC)
        )

        assert entry.requested_at.tzinfo == UTC


class TestNowPlaying:
    """Unit tests for elapsed and remaining time."""

    def test_elapsed(self, sample_entry):
        now_playing = NowPlaying(entry=sample_entry, started_at=100.0)

        assert now_playing.elapsed(130.0) == 30.0

    def test_elapsed_never_negative(self, sample_entry):
        now_playing = NowPlaying(entry=sample_entry, started_at=100.0)

        assert now_playing.elapsed(50.0) == 0.0

    def test_remaining_floored_at_zero(self, sample_entry):
        now_playing = NowPlaying(entry=sample_entry, started_at=0.0)

        assert now_playing.remaining(10_000.0) == 0.0
        assert now_playing.remaining(20.0) == 100.0


# =============================================================================
# Value Objects
# =============================================================================


class TestPlaybackState:
    """Unit tests for scheduler state transitions."""

    def test_valid_transitions(self):
        assert PlaybackState.IDLE.can_transition_to(PlaybackState.PLAYING)
        assert PlaybackState.PLAYING.can_transition_to(PlaybackState.IDLE)
        assert PlaybackState.PLAYING.can_transition_to(PlaybackState.STOPPED)
        assert PlaybackState.STOPPED.can_transition_to(PlaybackState.IDLE)

    def test_invalid_transition(self):
        assert not PlaybackState.STOPPED.can_transition_to(PlaybackState.PLAYING)

    def test_finish_reason_from_outcome(self):
        assert FinishReason.from_outcome(PlaybackOutcome.SUCCESS) == FinishReason.COMPLETED
        assert FinishReason.from_outcome(PlaybackOutcome.CANCELLED) == FinishReason.SKIPPED
        assert FinishReason.from_outcome(PlaybackOutcome.FAILURE) == FinishReason.ERROR


# =============================================================================
# QueueAccountant
# =============================================================================


class TestQueueAccountant:
    """Unit tests for positions and wait estimates."""

    @pytest.fixture
    def entries(self):
        return (
            make_entry("alice", duration=180.0),
            make_entry("bob", duration=240.0),
            make_entry("carol", duration=60.0),
        )

    def test_positions_of(self, entries):
        assert QueueAccountant.positions_of(entries, "bob") == [1]
        assert QueueAccountant.positions_of(entries, "zed") == []

    def test_positions_of_tolerates_duplicates(self):
        entries = (make_entry("alice"), make_entry("bob"), make_entry("alice"))

        assert QueueAccountant.positions_of(entries, "alice") == [0, 2]

    def test_duration_until_head_is_zero_when_idle(self, entries):
        assert QueueAccountant.duration_until(entries, "alice") == [0.0]

    def test_duration_until_sums_entries_ahead(self, entries):
        assert QueueAccountant.duration_until(entries, "carol") == [420.0]

    def test_duration_until_adds_remaining_of_current(self, entries):
        now_playing = NowPlaying(entry=make_entry("dave", duration=100.0), started_at=0.0)

        waits = QueueAccountant.duration_until(entries, "bob", now_playing, now=40.0)

        assert waits == [180.0 + 60.0]

    def test_duration_until_overrun_current_counts_zero(self, entries):
        now_playing = NowPlaying(entry=make_entry("dave", duration=100.0), started_at=0.0)

        waits = QueueAccountant.duration_until(entries, "alice", now_playing, now=500.0)

        assert waits == [0.0]

    def test_duration_until_multiple_positions(self):
        entries = (
            make_entry("alice", duration=10.0),
            make_entry("bob", duration=20.0),
            make_entry("alice", duration=30.0),
        )

        assert QueueAccountant.duration_until(entries, "alice") == [0.0, 30.0]

    def test_duration_until_unknown_user(self, entries):
        with pytest.raises(UserNotQueuedError):
            QueueAccountant.duration_until(entries, "zed")

    def test_total_queued_duration(self, entries):
        assert QueueAccountant.total_queued_duration(entries, "bob") == 240.0

    def test_total_queued_duration_with_current(self, entries):
        now_playing = NowPlaying(entry=make_entry("bob", duration=100.0), started_at=0.0)

        without = QueueAccountant.total_queued_duration(entries, "bob", now_playing, now=30.0)
        with_current = QueueAccountant.total_queued_duration(
            entries, "bob", now_playing, include_current=True, now=30.0
        )

        assert without == 240.0
        assert with_current == 310.0

    def test_is_playing_for(self):
        now_playing = NowPlaying(entry=make_entry("bob"), started_at=0.0)

        assert QueueAccountant.is_playing_for(now_playing, "bob")
        assert not QueueAccountant.is_playing_for(now_playing, "alice")
        assert not QueueAccountant.is_playing_for(None, "bob")


# =============================================================================
# Formatting
# =============================================================================


class TestFormatting:
    """Unit tests for text rendering."""

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [(0, "00:00"), (59.4, "00:59"), (61, "01:01"), (600, "10:00"), (3725, "62:05")],
    )
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_duration_bar_width_and_single_marker(self):
        bar = duration_bar(15, 30.0, 60.0)

        assert len(bar) == 15
        assert bar.count("⚫") == 1
        assert bar.index("⚫") == 6

    def test_duration_bar_start_and_end(self):
        assert duration_bar(5, 0.0, 60.0).index("⚫") == 0
        assert duration_bar(5, 60.0, 60.0).index("⚫") == 4
        assert duration_bar(5, 120.0, 60.0).index("⚫") == 4

    def test_duration_bar_zero_total(self):
        assert duration_bar(5, 10.0, 0.0) == "⚫————"

    def test_format_playlist(self):
        now_playing = NowPlaying(entry=make_entry("dj", title="Current"), started_at=0.0)
        entries = (
            make_entry("al", title="First", duration=65.0),
            make_entry("bartholomew", title="Second", duration=600.0),
        )

        text = format_playlist(entries, now_playing)

        lines = text.split("\n")
        assert lines[0] == ' currently playing: 🎶 "Current" 🎶 requested by dj'
        assert lines[1] == ""
        assert lines[2] == "  1 | al          | 01:05 | First"
        assert lines[3] == "  2 | bartholomew | 10:00 | Second"
        assert text.endswith("\n")

    def test_format_playlist_idle_and_empty(self):
        text = format_playlist((), None)

        assert text == " nothing is playing right now\n\n"
