from __future__ import annotations

Interval = tuple[int, int]


def intersect(a: Interval, b: Interval) -> Interval | None:
    """Return the overlap of two half-open minute intervals, or None."""
    start = max(a[0], b[0])
    end = min(a[1], b[1])
    if start >= end:
        return None
    return (start, end)


def subtract_one(interval: Interval, blocker: Interval) -> list[Interval]:
    """Remove blocker from interval. Returns zero, one or two non-empty pieces."""
    overlap = intersect(interval, blocker)
    if overlap is None:
        return [interval]

    start, end = interval
    block_start, block_end = overlap
    pieces: list[Interval] = []
    if block_start > start:
        pieces.append((start, block_start))
    if block_end < end:
        pieces.append((block_end, end))
    return pieces


def subtract_many(intervals: list[Interval], blockers: list[Interval]) -> list[Interval]:
    current = list(intervals)
    for blocker in blockers:
        remaining: list[Interval] = []
        for interval in current:
            remaining.extend(subtract_one(interval, blocker))
        current = remaining
    return current
