# mediable/common/iter.py
from __future__ import annotations

from typing import Iterable, Iterator, TypeVar

T = TypeVar("T")


def chunked(it: Iterable[T], size: int) -> Iterator[list[T]]:
    """Yield lists of at most `size` items; used to batch executemany inserts."""
    if size < 1:
        raise ValueError("chunk size must be >= 1")
    batch: list[T] = []
    for item in it:
        batch.append(item)
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch
