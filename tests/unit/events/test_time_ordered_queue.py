"""
Test the time-ordered event queue.

Author: Neurite Project
Date: January 2026
"""

from hypothesis import given, settings, strategies as st

from neurite.events.system import PostsynapticSpikeEvent, SampleEvent, TimeOrderedQueue
from neurite.typing import CellMember


def test_empty_queue():
    queue = TimeOrderedQueue()

    assert len(queue) == 0
    assert not queue
    assert queue.pop_if_before(100.0) is None
    assert queue.time_if_before(100.0) is None
    assert queue.peek_time() is None


def test_pop_if_before_is_strict():
    """An item at exactly the threshold is not eligible."""
    queue = TimeOrderedQueue([SampleEvent(0, 2.0)])

    assert queue.pop_if_before(2.0) is None
    assert len(queue) == 1
    assert queue.pop_if_before(2.0 + 1e-12) == SampleEvent(0, 2.0)


def test_time_if_before_does_not_remove():
    queue = TimeOrderedQueue([SampleEvent(0, 1.5), SampleEvent(1, 0.5)])

    assert queue.time_if_before(1.0) == 0.5
    assert queue.time_if_before(0.5) is None
    assert len(queue) == 2


event_times = st.floats(min_value=0.0, max_value=10.0, allow_nan=False, allow_infinity=False)


@given(times=st.lists(event_times, max_size=60), threshold=event_times)
@settings(max_examples=100, deadline=1000)
def test_pops_minimum_below_threshold(times, threshold):
    """Never returns an item at or after the threshold; always the minimum."""
    queue = TimeOrderedQueue(SampleEvent(i, t) for i, t in enumerate(times))

    popped = []
    event = queue.pop_if_before(threshold)
    while event is not None:
        popped.append(event.time)
        event = queue.pop_if_before(threshold)

    assert popped == sorted(t for t in times if t < threshold)
    assert len(queue) == sum(1 for t in times if t >= threshold)


def test_equal_times_pop_in_insertion_order():
    queue = TimeOrderedQueue()
    for i in range(5):
        queue.push(SampleEvent(i, 1.0))

    order = [queue.pop_if_before(2.0).sampler_index for _ in range(5)]

    assert order == [0, 1, 2, 3, 4]


def test_holds_synaptic_events():
    queue = TimeOrderedQueue()
    queue.push_many([
        PostsynapticSpikeEvent(CellMember(1, 0), 3.0, 0.5),
        PostsynapticSpikeEvent(CellMember(0, 2), 1.0, 0.1),
    ])

    first = queue.pop_if_before(5.0)

    assert first.target == CellMember(0, 2)
    assert queue.peek_time() == 3.0


def test_clear():
    queue = TimeOrderedQueue([SampleEvent(0, 1.0), SampleEvent(1, 2.0)])
    queue.clear()
    assert len(queue) == 0
