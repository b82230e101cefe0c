"""Interval utilities for peak windows in retention time and m/z."""


def is_within_range(start1: float, end1: float, start2: float, end2: float) -> bool:
    """
    Check whether two open intervals intersect.

    Touching endpoints (``end1 == start2``) are not an overlap. Intervals
    sharing the same start point overlap when both have a positive width.

    Args:
        start1, end1: First interval
        start2, end2: Second interval

    Returns:
        True if the intervals share a stretch of positive length
    """
    if start1 < start2:
        return end1 > start2
    if start1 > start2:
        return end2 > start1
    return end1 > start1 and end2 > start2


def overlap_fraction(start: float, end: float, other_start: float, other_end: float) -> float:
    """Fraction of [start, end] covered by [other_start, other_end]."""
    width = end - start
    if width <= 0:
        return 0.0
    lo = max(start, other_start)
    hi = min(end, other_end)
    return max(hi - lo, 0.0) / width


def within_relative_tolerance(reference: float, value: float, tolerance: float) -> bool:
    """True if value lies strictly inside reference * (1 +- tolerance), or equals it."""
    if value == reference:
        return True
    lo = reference * (1 - tolerance)
    hi = reference * (1 + tolerance)
    if lo > hi:
        lo, hi = hi, lo
    return lo < value < hi


def windows_within(start1: float, end1: float, start2: float, end2: float, tolerance: float) -> bool:
    """True if the gap between two windows is at most ``tolerance``."""
    return start1 - tolerance <= end2 and start2 - tolerance <= end1
