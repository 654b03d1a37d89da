"""Domain value objects (immutable data structures).

Value objects are immutable data structures that represent concepts
from the domain model. They have no identity - two instances with
the same values are considered equal.
"""

from dataclasses import dataclass, field

from srampool.domain.errors import ConfigurationError

SRAM_COMPATIBLE = "mmio-sram"


@dataclass(frozen=True)
class MemoryRegion:
    """Physical address range backing the on-chip memory.

    Attributes:
        base: Physical start address.
        size: Length in bytes (always > 0).
    """

    base: int
    size: int

    def __post_init__(self) -> None:
        if self.base < 0:
            raise ConfigurationError(f"region base must be >= 0, got {self.base:#x}")
        if self.size <= 0:
            raise ConfigurationError(f"region size must be > 0, got {self.size}")

    @property
    def end(self) -> int:
        """First address past the region."""
        return self.base + self.size

    def contains(self, start: int, end: int) -> bool:
        """Check whether the absolute range [start, end) lies inside the region."""
        return self.base <= start and end <= self.end


@dataclass(frozen=True)
class ReservedRange:
    """Raw reserved-block descriptor as declared in static configuration.

    Addresses are absolute; ``end`` is exclusive.

    Attributes:
        start: First reserved address.
        end: First address past the reserved block.
        name: Node name used in diagnostics.
        enabled: False for descriptors marked disabled; those are skipped.
    """

    start: int
    end: int
    name: str = ""
    enabled: bool = True

    @property
    def size(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class Reservation:
    """Region-relative sub-range that must not be handed to the pool.

    Attributes:
        offset: Bytes from region base.
        size: Length in bytes. Zero only for the end-of-region sentinel.
        name: Node name used in diagnostics (ignored for equality).

    Example:
        >>> Reservation(offset=0, size=512)
        Reservation(offset=0, size=512, name='')
        >>> Reservation.sentinel(4096).size
        0
    """

    offset: int
    size: int
    name: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise ConfigurationError(
                f"reservation offset must be >= 0, got {self.offset}", offset=self.offset
            )
        if self.size < 0:
            raise ConfigurationError(
                f"reservation size must be >= 0, got {self.size}", offset=self.offset
            )

    @classmethod
    def sentinel(cls, region_size: int) -> "Reservation":
        """Zero-size marker for the end of a region of ``region_size`` bytes."""
        return cls(offset=region_size, size=0, name="<end>")

    @property
    def end(self) -> int:
        return self.offset + self.size


@dataclass(frozen=True)
class FreeChunk:
    """Region-relative free range between reservations."""

    offset: int
    size: int

    @property
    def end(self) -> int:
        return self.offset + self.size


@dataclass(frozen=True)
class PoolAllocation:
    """Handle for memory served by a pool.

    Attributes:
        address: Physical start address of the allocation.
        size: Allocated size, rounded up to the pool granularity.
    """

    address: int
    size: int


@dataclass(frozen=True)
class SramDevice:
    """One discovered SRAM region with its static reservations.

    Attributes:
        name: Device node name (e.g. "sram@10000000").
        region: Physical region backing the device.
        reserved: Declared reserved blocks, in declaration order.
        clock: Name of the optional gate clock, or None.
    """

    name: str
    region: MemoryRegion
    reserved: tuple[ReservedRange, ...] = ()
    clock: str | None = None


@dataclass(frozen=True)
class DeviceTree:
    """Everything loaded from a single device description."""

    devices: tuple[SramDevice, ...]
    clocks: tuple[str, ...] = ()
