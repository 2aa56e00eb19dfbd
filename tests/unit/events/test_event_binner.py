"""
Test event time binning policies.

Author: Neurite Project
Date: January 2026
"""

import pytest

from neurite.errors import ConfigurationError
from neurite.events.binning import BinningKind, EventBinner


def test_none_keeps_time():
    binner = EventBinner()
    assert binner.bin(0, 1.2345, 0.0) == 1.2345


def test_none_respects_floor():
    binner = EventBinner(BinningKind.NONE)
    assert binner.bin(0, 0.5, 1.0) == 1.0


@pytest.mark.parametrize(
    "time, floor, expected",
    [
        (0.24, 0.0, 0.0),
        (0.25, 0.0, 0.25),
        (1.37, 0.0, 1.25),
        (1.37, 1.3, 1.3),   # never earlier than the floor
        (0.1, 2.0, 2.0),    # events in the past land at the floor
    ],
)
def test_regular_grid(time, floor, expected):
    binner = EventBinner(BinningKind.REGULAR, 0.25)
    # the first event of a key anchors its grid
    assert binner.bin(7, 0.0, 0.0) == 0.0

    assert binner.bin(7, time, floor) == pytest.approx(expected)


def test_regular_grid_anchored_per_key():
    binner = EventBinner(BinningKind.REGULAR, 1.0)

    assert binner.bin(1, 0.3, 0.0) == 0.3
    assert binner.bin(2, 5.3, 0.0) == 5.3
    assert binner.bin(2, 5.9, 0.0) == 5.3
    assert binner.bin(1, 1.9, 0.0) == pytest.approx(1.3)
    assert binner.bin(2, 6.4, 0.0) == pytest.approx(6.3)


def test_regular_time_before_anchor_rounds_down():
    binner = EventBinner(BinningKind.REGULAR, 0.25)
    binner.bin(0, 1.0, 0.0)

    assert binner.bin(0, 0.9, 0.0) == pytest.approx(0.75)
    assert binner.bin(0, 0.9, 0.8) == 0.8


def test_reset_clears_regular_anchors():
    binner = EventBinner(BinningKind.REGULAR, 1.0)
    binner.bin(1, 0.3, 0.0)

    binner.reset()

    assert binner.bin(1, 0.7, 0.0) == 0.7


def test_regular_same_result_for_jittered_times():
    binner = EventBinner(BinningKind.REGULAR, 0.1)
    assert binner.bin(0, 0.5 + 1e-9, 0.0) == binner.bin(0, 0.5 + 2e-9, 0.0)


def test_following_reuses_anchor_per_key():
    binner = EventBinner(BinningKind.FOLLOWING, 0.5)

    assert binner.bin(1, 1.0, 0.0) == 1.0
    assert binner.bin(1, 1.3, 0.0) == 1.0
    assert binner.bin(1, 1.6, 0.0) == 1.6
    # a different key has its own anchor
    assert binner.bin(2, 1.3, 0.0) == 1.3


def test_reset_clears_anchors():
    binner = EventBinner(BinningKind.FOLLOWING, 0.5)
    binner.bin(1, 1.0, 0.0)

    binner.reset()

    assert binner.bin(1, 1.3, 0.0) == 1.3


@pytest.mark.parametrize("policy", [BinningKind.REGULAR, BinningKind.FOLLOWING])
def test_interval_required(policy):
    with pytest.raises(ConfigurationError):
        EventBinner(policy, 0.0)


def test_negative_interval_rejected():
    with pytest.raises(ConfigurationError):
        EventBinner(BinningKind.NONE, -1.0)


def test_policy_from_string():
    binner = EventBinner("regular", 1.0)
    assert binner.policy is BinningKind.REGULAR
