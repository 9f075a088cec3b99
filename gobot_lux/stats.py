"""Derived statistics over the configured stats-bucket sizes."""

from typing import Sequence

from gobot_lux.errors import EmptyIntervalsError


def interval_min(intervals: Sequence[int]) -> int:
    """Return the smallest bucket size in seconds.

    Raises:
        EmptyIntervalsError: If ``intervals`` is empty.
    """
    if not intervals:
        raise EmptyIntervalsError("empty array provided")

    smallest = intervals[0]
    for value in intervals:
        if value < smallest:
            smallest = value
    return smallest


def interval_max(intervals: Sequence[int]) -> int:
    """Return the largest bucket size in seconds.

    Raises:
        EmptyIntervalsError: If ``intervals`` is empty.
    """
    if not intervals:
        raise EmptyIntervalsError("empty array provided")

    largest = intervals[0]
    for value in intervals:
        if value > largest:
            largest = value
    return largest
