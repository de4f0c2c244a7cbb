"""Fixed-size batching shared by the segmentation and correction stages.

Batches run one after another; items inside a batch run concurrently. The
batch size is therefore the ceiling on outstanding external calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Iterator, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_CONCURRENCY = 10


@dataclass
class Batch(Generic[T]):
    """A slice of the input sequence.

    Attributes:
        index: Zero-based batch number
        offset: Input index of the first item in the batch
        items: The items themselves, in input order
    """

    index: int
    offset: int
    items: Sequence[T]

    def indexed(self) -> Iterator[tuple[int, T]]:
        """Yield ``(input_index, item)`` pairs."""
        for position, item in enumerate(self.items):
            yield self.offset + position, item


def validate_concurrency(concurrency: int) -> int:
    if not isinstance(concurrency, int) or isinstance(concurrency, bool) or concurrency < 1:
        raise ValueError(f"concurrency must be a positive integer, got {concurrency!r}")
    return concurrency


def iter_batches(items: Sequence[T], batch_size: int) -> Iterator[Batch[T]]:
    validate_concurrency(batch_size)
    for batch_index, offset in enumerate(range(0, len(items), batch_size)):
        yield Batch(index=batch_index, offset=offset, items=items[offset : offset + batch_size])
