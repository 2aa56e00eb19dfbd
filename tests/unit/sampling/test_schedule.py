"""
Test sampler schedules.

Author: Neurite Project
Date: January 2026
"""

import pytest

from neurite.errors import ConfigurationError
from neurite.sampling.schedule import ExplicitSchedule, PoissonSchedule, RegularSchedule


class TestRegularSchedule:

    def test_times_in_half_open_interval(self):
        schedule = RegularSchedule(0.0, 0.25)
        assert schedule.events(0.0, 1.0) == pytest.approx([0.0, 0.25, 0.5, 0.75])

    def test_consecutive_intervals_do_not_overlap(self):
        schedule = RegularSchedule(0.1, 0.5)
        first = schedule.events(0.0, 1.1)
        second = schedule.events(1.1, 2.1)

        assert first == pytest.approx([0.1, 0.6])
        assert second == pytest.approx([1.1, 1.6])

    def test_respects_start_and_stop(self):
        schedule = RegularSchedule(2.0, 1.0, tstop=4.0)
        assert schedule.events(0.0, 10.0) == pytest.approx([2.0, 3.0])
        assert schedule.events(5.0, 10.0) == []

    def test_invalid_dt(self):
        with pytest.raises(ConfigurationError):
            RegularSchedule(0.0, 0.0)


class TestExplicitSchedule:

    def test_sorted_times_in_interval(self):
        schedule = ExplicitSchedule([3.0, 0.5, 1.0, 2.5])
        assert schedule.events(0.0, 2.0) == [0.5, 1.0]
        assert schedule.events(2.0, 4.0) == [2.5, 3.0]

    def test_cursor_and_reset(self):
        schedule = ExplicitSchedule([0.5, 1.5])
        assert schedule.events(0.0, 2.0) == [0.5, 1.5]
        assert schedule.events(0.0, 2.0) == []

        schedule.reset()

        assert schedule.events(0.0, 2.0) == [0.5, 1.5]

    def test_empty(self):
        assert ExplicitSchedule([]).events(0.0, 10.0) == []


class TestPoissonSchedule:

    def test_reproducible_after_reset(self):
        schedule = PoissonSchedule(0.0, rate_khz=2.0, seed=3)
        first = schedule.events(0.0, 10.0) + schedule.events(10.0, 20.0)

        schedule.reset()
        again = schedule.events(0.0, 20.0)

        assert again == pytest.approx(first)

    def test_times_within_interval_and_increasing(self):
        schedule = PoissonSchedule(5.0, rate_khz=1.0, seed=1)
        times = schedule.events(0.0, 50.0)

        assert all(5.0 <= t < 50.0 for t in times)
        assert times == sorted(times)
        assert len(times) > 10

    def test_invalid_rate(self):
        with pytest.raises(ConfigurationError):
            PoissonSchedule(0.0, rate_khz=0.0)
