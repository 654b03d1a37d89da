"""Bytearray-backed region mapper.

Stands in for an I/O remap of the SRAM window: each claimed region gets a
zero-filled buffer of the region size. Claims are exclusive - a second
claim on an overlapping address range fails, like a busy memory resource.
"""

import threading

from srampool.domain.errors import ResourceError
from srampool.domain.value_objects import MemoryRegion


class BufferRegionMapper:
    """Claims regions and hands out writable views of host buffers.

    Thread safety:
    - THREAD-SAFE: claim bookkeeping is protected by an internal lock.
    """

    def __init__(self, max_region_size: int = 64 * 1024 * 1024) -> None:
        """Initialize the mapper.

        Args:
            max_region_size: Largest region that may be mapped, in bytes.
        """
        self._max_region_size = max_region_size
        self._lock = threading.Lock()
        self._buffers: dict[MemoryRegion, bytearray] = {}

    def map(self, region: MemoryRegion) -> memoryview:
        """Claim ``region`` and return a view of its backing buffer.

        Raises:
            ResourceError: If the region is too large or overlaps a claimed region.
        """
        if region.size > self._max_region_size:
            raise ResourceError(
                f"region {region.base:#x}-{region.end:#x} exceeds mappable size "
                f"{self._max_region_size:#x}"
            )

        with self._lock:
            for claimed in self._buffers:
                if region.base < claimed.end and claimed.base < region.end:
                    raise ResourceError(
                        f"could not request region {region.base:#x}-{region.end:#x}: "
                        f"busy ({claimed.base:#x}-{claimed.end:#x})"
                    )

            buffer = bytearray(region.size)
            self._buffers[region] = buffer
            return memoryview(buffer)

    def unmap(self, region: MemoryRegion) -> None:
        """Release a claimed region. Unknown regions are ignored."""
        with self._lock:
            self._buffers.pop(region, None)

    def is_mapped(self, region: MemoryRegion) -> bool:
        with self._lock:
            return region in self._buffers
