"""Address-ordered first-fit pool allocator.

GenPool keeps a list of chunks (ranges added with add_range) sorted by
base address. Each chunk tracks its free extents, also address-ordered.
Allocation takes the first extent large enough, scanning chunks from the
lowest address; freeing coalesces the extent with its neighbours inside
the same chunk.
"""

import bisect
import threading
from dataclasses import dataclass, field

from srampool.domain.errors import AllocatorError, ConfigurationError, PoolExhaustedError
from srampool.domain.value_objects import PoolAllocation

DEFAULT_GRANULARITY = 32


@dataclass
class _Chunk:
    """One contiguous range added to the pool.

    free_extents holds absolute (start, size) pairs sorted by start.
    """

    base: int
    size: int
    free_extents: list[tuple[int, int]] = field(default_factory=list)

    @property
    def end(self) -> int:
        return self.base + self.size


class GenPool:
    """Thread-safe address-ordered pool over incrementally added ranges.

    Allocation sizes are rounded up to ``granularity``. Allocations start
    at a granularity multiple from the start of their chunk.

    Thread safety:
    - THREAD-SAFE: All operations protected by internal lock.

    Example:
        >>> pool = GenPool(granularity=32)
        >>> pool.add_range(0x1000, 256)
        >>> handle = pool.allocate(40)
        >>> (hex(handle.address), handle.size)
        ('0x1000', 64)
        >>> pool.available()
        192
        >>> pool.free(handle)
        >>> pool.available()
        256
    """

    def __init__(self, granularity: int = DEFAULT_GRANULARITY) -> None:
        """Initialize an empty pool.

        Args:
            granularity: Allocation unit in bytes; must be a power of two.

        Raises:
            ConfigurationError: If granularity is not a positive power of two.
        """
        if granularity <= 0 or granularity & (granularity - 1) != 0:
            raise ConfigurationError(
                f"granularity must be a power of two, got {granularity}"
            )

        self._granularity = granularity
        self._lock = threading.Lock()

        # Sorted by base; _bases mirrors it for bisect lookups
        self._chunks: list[_Chunk] = []
        self._bases: list[int] = []

        # address -> rounded size of outstanding allocations
        self._allocated: dict[int, int] = {}

    @property
    def granularity(self) -> int:
        return self._granularity

    def add_range(self, base: int, size: int) -> None:
        """Add a free range to the pool.

        Raises:
            AllocatorError: If size <= 0, base < 0 or the range overlaps a chunk.
        """
        if size <= 0:
            raise AllocatorError(f"chunk size must be > 0, got {size}")
        if base < 0:
            raise AllocatorError(f"chunk base must be >= 0, got {base:#x}")

        with self._lock:
            idx = bisect.bisect_right(self._bases, base)

            if idx > 0 and self._chunks[idx - 1].end > base:
                prev = self._chunks[idx - 1]
                raise AllocatorError(
                    f"chunk {base:#x}-{base + size:#x} overlaps "
                    f"{prev.base:#x}-{prev.end:#x}"
                )
            if idx < len(self._chunks) and self._chunks[idx].base < base + size:
                nxt = self._chunks[idx]
                raise AllocatorError(
                    f"chunk {base:#x}-{base + size:#x} overlaps "
                    f"{nxt.base:#x}-{nxt.end:#x}"
                )

            chunk = _Chunk(base=base, size=size, free_extents=[(base, size)])
            self._chunks.insert(idx, chunk)
            self._bases.insert(idx, base)

    def allocate(self, size: int) -> PoolAllocation:
        """Allocate from the lowest-addressed extent that fits.

        Raises:
            AllocatorError: If size <= 0.
            PoolExhaustedError: If no extent is large enough.
        """
        if size <= 0:
            raise AllocatorError(f"allocation size must be > 0, got {size}")

        rounded = self._round_up(size)

        with self._lock:
            for chunk in self._chunks:
                for i, (start, length) in enumerate(chunk.free_extents):
                    if length < rounded:
                        continue

                    remaining = length - rounded
                    if remaining > 0:
                        chunk.free_extents[i] = (start + rounded, remaining)
                    else:
                        del chunk.free_extents[i]

                    self._allocated[start] = rounded
                    return PoolAllocation(address=start, size=rounded)

            raise PoolExhaustedError(
                f"Requested {size} bytes ({rounded} rounded) but largest free extent is "
                f"{self._largest_extent()} bytes. Pool capacity: {self._capacity()}, "
                f"available: {self._available()}"
            )

    def free(self, handle: PoolAllocation) -> None:
        """Return an allocation to its chunk and coalesce neighbours.

        Raises:
            AllocatorError: If the handle was not allocated by this pool
                or was already freed.
        """
        with self._lock:
            size = self._allocated.get(handle.address)
            if size is None or size != handle.size:
                raise AllocatorError(
                    f"Allocation at {handle.address:#x} is not outstanding (double-free?)"
                )

            chunk = self._chunk_for(handle.address)
            if chunk is None:
                raise AllocatorError(
                    f"Allocation at {handle.address:#x} lies outside every chunk"
                )

            del self._allocated[handle.address]
            self._insert_extent(chunk, handle.address, size)

    def available(self) -> int:
        with self._lock:
            return self._available()

    def capacity(self) -> int:
        with self._lock:
            return self._capacity()

    def chunks(self) -> list[tuple[int, int]]:
        """(base, size) of every chunk, in address order."""
        with self._lock:
            return [(c.base, c.size) for c in self._chunks]

    def has_address(self, address: int) -> bool:
        """Check whether ``address`` falls inside any chunk."""
        with self._lock:
            return self._chunk_for(address) is not None

    def _round_up(self, size: int) -> int:
        mask = self._granularity - 1
        return (size + mask) & ~mask

    def _capacity(self) -> int:
        return sum(c.size for c in self._chunks)

    def _available(self) -> int:
        return self._capacity() - sum(self._allocated.values())

    def _largest_extent(self) -> int:
        return max(
            (length for c in self._chunks for _, length in c.free_extents),
            default=0,
        )

    def _chunk_for(self, address: int) -> _Chunk | None:
        idx = bisect.bisect_right(self._bases, address) - 1
        if idx < 0:
            return None
        chunk = self._chunks[idx]
        return chunk if address < chunk.end else None

    @staticmethod
    def _insert_extent(chunk: _Chunk, start: int, size: int) -> None:
        extents = chunk.free_extents
        i = bisect.bisect_left(extents, (start, 0))
        extents.insert(i, (start, size))

        # Merge with next free extent
        if i + 1 < len(extents):
            next_start, next_size = extents[i + 1]
            if start + size == next_start:
                extents[i] = (start, size + next_size)
                del extents[i + 1]

        # Merge with previous free extent
        if i > 0:
            prev_start, prev_size = extents[i - 1]
            cur_start, cur_size = extents[i]
            if prev_start + prev_size == cur_start:
                extents[i - 1] = (prev_start, prev_size + cur_size)
                del extents[i]
