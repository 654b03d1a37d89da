"""Domain services for region reservation and partitioning.

Services are stateless - they operate on value objects passed as
parameters. The only side effect of partitioning is the sequence of
``add_range`` calls made on the pool handed in by the caller.
"""

from collections.abc import Iterable, Iterator
from typing import Protocol

from srampool.domain.errors import AllocatorError, ConfigurationError
from srampool.domain.value_objects import (
    FreeChunk,
    MemoryRegion,
    Reservation,
    ReservedRange,
)


class FreeRangeSink(Protocol):
    """Anything that accepts free address ranges (usually a pool)."""

    def add_range(self, base: int, size: int) -> None: ...


def collect_reservations(
    region: MemoryRegion,
    ranges: Iterable[ReservedRange],
) -> list[Reservation]:
    """Convert declared reserved blocks into region-relative reservations.

    Disabled descriptors are skipped. The end-of-region sentinel is
    appended last.

    Args:
        region: Region the blocks must fall into.
        ranges: Raw descriptors in any order.

    Returns:
        One Reservation per enabled descriptor, followed by the sentinel.

    Raises:
        ConfigurationError: If a descriptor is empty or lies outside the region.

    Example:
        >>> region = MemoryRegion(base=0x1000, size=0x100)
        >>> collect_reservations(region, [ReservedRange(0x1000, 0x1010)])
        [Reservation(offset=0, size=16, name=''), Reservation(offset=256, size=0, name='<end>')]
    """
    reservations: list[Reservation] = []
    for child in ranges:
        if not child.enabled:
            continue

        if child.end <= child.start:
            raise ConfigurationError(
                f"reserved block {child.name or '?'} has empty range "
                f"{child.start:#x}-{child.end:#x}",
                offset=child.start - region.base,
            )

        if not region.contains(child.start, child.end):
            raise ConfigurationError(
                f"reserved block {child.name or '?'} outside the sram area",
                offset=child.start - region.base,
            )

        reservations.append(
            Reservation(
                offset=child.start - region.base,
                size=child.size,
                name=child.name,
            )
        )

    reservations.append(Reservation.sentinel(region.size))
    return reservations


def iter_free_chunks(
    region_size: int,
    reservations: Iterable[Reservation],
) -> Iterator[FreeChunk]:
    """Yield the free gaps between reservations in address order.

    Chunks are yielded lazily, so a caller consuming them one at a time
    has already received every gap below the first conflicting block when
    the overlap error is raised.

    Args:
        region_size: Size of the region in bytes.
        reservations: Reservations in any order, with or without sentinel.
            Zero-size entries other than the sentinel are ignored.

    Yields:
        FreeChunk for every maximal non-empty gap.

    Raises:
        ConfigurationError: If a reservation exceeds the region (raised before
            the first chunk) or two reservations overlap.
    """
    blocks = list(reservations)
    sentinel = Reservation.sentinel(region_size)
    if sentinel not in blocks:
        blocks.append(sentinel)

    for block in blocks:
        if block.end > region_size:
            raise ConfigurationError(
                f"block at {block.offset:#x} (size {block.size:#x}) "
                f"exceeds region size {region_size:#x}",
                offset=block.offset,
            )

    # Zero-size blocks cover nothing; only the sentinel closes the last gap
    blocks = [b for b in blocks if b.size > 0 or b == sentinel]
    blocks.sort(key=lambda r: (r.offset, r.size))

    cursor = 0
    for block in blocks:
        # Only happens if blocks overlap
        if block.offset < cursor:
            raise ConfigurationError(
                f"block at {block.offset:#x} starts after current offset {cursor:#x}",
                offset=block.offset,
            )

        if block.offset > cursor:
            yield FreeChunk(offset=cursor, size=block.offset - cursor)

        cursor = block.end


def compute_free_chunks(
    region_size: int,
    reservations: Iterable[Reservation],
) -> list[FreeChunk]:
    """Return all free gaps; see iter_free_chunks()."""
    return list(iter_free_chunks(region_size, reservations))


class RegionPartitioner:
    """Hands every free gap of a region to a pool.

    Sorting plus a single monotonic-cursor sweep computes the maximal free
    runs in O(N log N). A reservation at offset 0 or touching the region
    end needs no special handling.

    Chunks added before an error are not rolled back.

    Example:
        >>> region = MemoryRegion(base=0x1000, size=4096)
        >>> RegionPartitioner().partition(region, [Reservation(0, 512)], pool)
        >>> pool.chunks()  # any PoolPort
        [(4608, 3584)]
    """

    def partition(
        self,
        region: MemoryRegion,
        reservations: Iterable[Reservation],
        pool: FreeRangeSink,
    ) -> None:
        """Add the free sub-ranges of ``region`` to ``pool``.

        Args:
            region: Region being partitioned.
            reservations: Reservations in any order, with or without sentinel.
            pool: Receiver of ``add_range(region.base + offset, size)`` calls.

        Raises:
            ConfigurationError: Out-of-bounds or overlapping reservation.
            AllocatorError: The pool rejected a chunk.
        """
        for chunk in iter_free_chunks(region.size, reservations):
            try:
                pool.add_range(region.base + chunk.offset, chunk.size)
            except AllocatorError as e:
                raise AllocatorError(
                    f"failed to add chunk {chunk.offset:#x}-{chunk.end:#x}: {e}"
                ) from e
