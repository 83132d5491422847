"""Bounded incremental scan for filters that cannot be pushed into SQL.

The scanner pulls batches from a :class:`BatchSource` until either enough rows
have matched or a cap on rows examined is hit. It knows nothing about the
database, so tests drive it with in-memory sources.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Generic, Iterable, Protocol, Sequence, TypeVar

T = TypeVar("T")


class BatchSource(Protocol[T]):
    def next_batch(self) -> Sequence[T]:
        """Return the next batch, or an empty sequence once exhausted."""
        raise NotImplementedError


class OffsetBatchSource(Generic[T]):
    """Pages through ``fetch(offset, limit)`` in fixed-size steps."""

    def __init__(self, fetch: Callable[[int, int], Sequence[T]], batch_size: int) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._fetch = fetch
        self._batch_size = batch_size
        self._offset = 0
        self._done = False

    def next_batch(self) -> Sequence[T]:
        if self._done:
            return []
        batch = self._fetch(self._offset, self._batch_size)
        self._offset += self._batch_size
        if len(batch) < self._batch_size:
            self._done = True
        return batch


@dataclass
class ScanResult(Generic[T]):
    matches: list[T] = field(default_factory=list)
    scanned: int = 0
    batches: int = 0
    exhausted: bool = False
    capped: bool = False


def scan(
    source: BatchSource[T],
    keep: Callable[[Sequence[T]], Iterable[T]],
    *,
    target: int,
    scan_cap: int,
) -> ScanResult[T]:
    """Accumulate up to ``target`` rows accepted by ``keep``.

    ``keep`` receives a whole batch so it can hydrate it with one lookup. The
    scan stops when the target is reached, the source is exhausted, or
    ``scan_cap`` rows have been examined. Reaching the cap with rows still
    available sets ``capped`` and returns the matches gathered so far; the
    source is asked for one more batch to tell the two apart.
    """
    result: ScanResult[T] = ScanResult()
    if target <= 0:
        return result
    while len(result.matches) < target:
        if result.scanned >= scan_cap:
            if source.next_batch():
                result.capped = True
            else:
                result.exhausted = True
            break
        batch = source.next_batch()
        if not batch:
            result.exhausted = True
            break
        result.batches += 1
        result.scanned += len(batch)
        for item in keep(batch):
            result.matches.append(item)
            if len(result.matches) >= target:
                break
    return result
