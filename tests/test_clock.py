"""Tests for PositionClock extrapolation."""

import pytest

from media_controls.clock import PositionClock


@pytest.fixture
def clock(fake_time):
    return PositionClock(now=fake_time)


class TestPositionClock:
    """Tests for position extrapolation."""

    def test_extrapolates_while_playing(self, clock, fake_time):
        clock.set_playing(True)
        clock.record_position(10000)
        fake_time.advance(2.5)
        assert clock.position() == 12500

    def test_paused_returns_last_known(self, clock, fake_time):
        clock.record_position(10000)
        fake_time.advance(2.5)
        assert clock.position() == 10000

    def test_pause_does_not_count_paused_time(self, clock, fake_time):
        clock.record_position(0)
        clock.set_playing(True)
        fake_time.advance(3)
        clock.set_playing(False)
        fake_time.advance(60)
        clock.set_playing(True)
        fake_time.advance(1)
        assert clock.position() == 4000

    def test_record_with_observation_time(self, clock, fake_time):
        clock.set_playing(True)
        clock.record_position(5000, observed_at=fake_time.now - 1)
        assert clock.position() == 6000

    def test_position_at_explicit_time(self, clock, fake_time):
        clock.set_playing(True)
        clock.record_position(0)
        assert clock.position(at=fake_time.now + 0.5) == 500

    def test_never_negative(self, clock, fake_time):
        clock.set_playing(True)
        clock.record_position(1000)
        assert clock.position(at=fake_time.now - 10) == 1000

    def test_last_known_is_passive(self, clock, fake_time):
        clock.set_playing(True)
        clock.record_position(1000)
        fake_time.advance(5)
        assert clock.last_known == 1000


class TestFreeze:
    """Extrapolation is suspended while a seek is in flight."""

    def test_frozen_position_does_not_advance(self, clock, fake_time):
        clock.set_playing(True)
        clock.record_position(1000)
        fake_time.advance(1)
        clock.freeze()
        fake_time.advance(10)

        assert clock.frozen
        assert clock.position() == 2000

    def test_thaw_resumes_from_now(self, clock, fake_time):
        clock.set_playing(True)
        clock.record_position(1000)
        clock.freeze()
        fake_time.advance(10)
        clock.thaw()
        fake_time.advance(1)
        assert clock.position() == 2000
