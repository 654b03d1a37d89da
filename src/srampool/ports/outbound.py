"""Outbound port interfaces (driven adapters).

These ports define the contracts for the application core to interact
with external systems: the pool allocator, region mapping and clock
gating. Implementations are provided by outbound adapters.

All interfaces use Protocol (PEP 544) for structural typing, allowing
implicit implementation without inheritance.
"""

from typing import Protocol

from srampool.domain.value_objects import MemoryRegion, PoolAllocation


class PoolPort(Protocol):
    """Port for an address-ordered pool allocator.

    Granularity is fixed at construction; all sizes are rounded up to it
    internally. Implementations must be safe for concurrent allocate/free.
    """

    @property
    def granularity(self) -> int:
        """Allocation unit in bytes (power of two)."""
        ...

    def add_range(self, base: int, size: int) -> None:
        """Add a free range of memory to the pool.

        Args:
            base: Physical start address of the range.
            size: Length in bytes.

        Raises:
            AllocatorError: If the range is empty or overlaps an existing chunk.
        """
        ...

    def allocate(self, size: int) -> PoolAllocation:
        """Allocate ``size`` bytes (rounded up to granularity).

        Raises:
            AllocatorError: If size is not positive.
            PoolExhaustedError: If no free extent is large enough.
        """
        ...

    def free(self, handle: PoolAllocation) -> None:
        """Return an allocation to the pool.

        Raises:
            AllocatorError: If the handle is unknown (double free?).
        """
        ...

    def available(self) -> int:
        """Bytes not currently allocated."""
        ...

    def capacity(self) -> int:
        """Total bytes added to the pool."""
        ...

    def chunks(self) -> list[tuple[int, int]]:
        """(base, size) of every added range, in address order."""
        ...


class RegionMapperPort(Protocol):
    """Port for claiming and mapping a physical memory region."""

    def map(self, region: MemoryRegion) -> memoryview:
        """Claim ``region`` and return an addressable view of it.

        Raises:
            ResourceError: If the region is already claimed or cannot be mapped.
        """
        ...

    def unmap(self, region: MemoryRegion) -> None:
        """Release a region previously returned by map()."""
        ...


class ClockPort(Protocol):
    """Port for a gate clock feeding the memory."""

    def prepare_enable(self) -> None: ...

    def disable_unprepare(self) -> None: ...


class ClockProviderPort(Protocol):
    """Port for looking up clocks by name."""

    def get(self, name: str | None) -> ClockPort:
        """Return the clock called ``name``.

        Raises:
            ResourceError: If no such clock exists (or name is None).
        """
        ...
