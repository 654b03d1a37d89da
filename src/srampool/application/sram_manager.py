"""SRAM device lifecycle: probe and teardown.

SramManager wires the outbound ports together: it maps the region,
builds the pool, partitions the region around the reserved blocks,
optionally enables the gate clock and publishes the pool. All resource
acquisition happens here; the partitioning itself stays pure.
"""

from collections.abc import Callable
from types import TracebackType

from srampool.adapters.config.logging import get_logger
from srampool.adapters.outbound.gen_pool import DEFAULT_GRANULARITY, GenPool
from srampool.domain.errors import ResourceError, SramError
from srampool.domain.services import RegionPartitioner, collect_reservations
from srampool.domain.value_objects import DeviceTree, SramDevice
from srampool.ports.outbound import (
    ClockPort,
    ClockProviderPort,
    PoolPort,
    RegionMapperPort,
)

logger = get_logger(__name__)

PoolFactory = Callable[[int], PoolPort]


class SramManager:
    """Owns one SRAM device from probe to removal.

    Thread Safety:
    - probe() and remove() are not thread-safe; call them from one thread.
    - The published pool is safe for concurrent allocate/free.

    Example:
        >>> manager = SramManager(device, mapper=BufferRegionMapper())
        >>> pool = manager.probe()
        >>> handle = pool.allocate(64)
        >>> pool.free(handle)
        >>> manager.remove()
    """

    def __init__(
        self,
        device: SramDevice,
        mapper: RegionMapperPort,
        clocks: ClockProviderPort | None = None,
        granularity: int = DEFAULT_GRANULARITY,
        pool_factory: PoolFactory = GenPool,
    ) -> None:
        """Initialize manager with injected adapters.

        Args:
            device: Region and reserved blocks to manage.
            mapper: Claims and maps the physical region.
            clocks: Clock lookup; None means the device runs without a clock.
            granularity: Pool allocation unit in bytes.
            pool_factory: Builds the pool from the granularity.
        """
        self.device = device
        self._mapper = mapper
        self._clocks = clocks
        self._granularity = granularity
        self._pool_factory = pool_factory
        self._partitioner = RegionPartitioner()

        self._pool: PoolPort | None = None
        self._clock: ClockPort | None = None
        self._view: memoryview | None = None

    @property
    def pool(self) -> PoolPort:
        """The published pool.

        Raises:
            ResourceError: If probe() has not completed.
        """
        if self._pool is None:
            raise ResourceError(f"{self.device.name}: pool not available before probe")
        return self._pool

    @property
    def view(self) -> memoryview:
        """Addressable view of the mapped region."""
        if self._view is None:
            raise ResourceError(f"{self.device.name}: region not mapped")
        return self._view

    @property
    def clock(self) -> ClockPort | None:
        return self._clock

    @property
    def is_probed(self) -> bool:
        return self._pool is not None

    def probe(self) -> PoolPort:
        """Bring the device up and publish its pool.

        Returns:
            The populated pool.

        Raises:
            ResourceError: If the region cannot be mapped, or already probed.
            ConfigurationError: If reserved blocks are out of bounds or overlap.
            AllocatorError: If the pool rejects a free chunk.
        """
        if self._pool is not None:
            raise ResourceError(f"{self.device.name}: already probed")

        device = self.device
        region = device.region
        log = logger.bind(device=device.name)

        try:
            view = self._mapper.map(region)
        except ResourceError as e:
            log.error("region_map_failed", error=str(e))
            raise

        try:
            pool = self._pool_factory(self._granularity)

            reservations = collect_reservations(region, device.reserved)
            for block in reservations[:-1]:
                log.debug(
                    "reserved_block_found",
                    name=block.name,
                    start=hex(block.offset),
                    end=hex(block.end),
                )

            self._partitioner.partition(region, reservations, pool)

            for base, size in pool.chunks():
                log.debug(
                    "pool_chunk_added",
                    start=hex(base - region.base),
                    end=hex(base - region.base + size),
                )

            clock = self._acquire_clock()
            if clock is not None:
                clock.prepare_enable()
        except SramError as e:
            log.error("reservation_failed", error=str(e))
            self._mapper.unmap(region)
            raise
        except Exception:
            self._mapper.unmap(region)
            raise

        self._clock = clock
        self._view = view
        self._pool = pool

        log.info(
            "sram_pool_ready",
            size_kib=pool.capacity() // 1024,
            base=hex(region.base),
        )
        return pool

    def remove(self) -> None:
        """Tear the device down.

        Outstanding allocations and clock failures are logged but never
        block removal; the region is always released.
        """
        if self._pool is None:
            return

        log = logger.bind(device=self.device.name)

        if self._pool.available() < self._pool.capacity():
            log.error(
                "removed_while_allocated",
                outstanding=self._pool.capacity() - self._pool.available(),
            )

        try:
            if self._clock is not None:
                self._clock.disable_unprepare()
        except ResourceError as e:
            log.error("clock_disable_failed", error=str(e))
        finally:
            self._clock = None
            self._mapper.unmap(self.device.region)
            self._view = None
            self._pool = None

    def _acquire_clock(self) -> ClockPort | None:
        if self._clocks is None or self.device.clock is None:
            return None
        try:
            return self._clocks.get(self.device.clock)
        except ResourceError as e:
            logger.debug("clock_unavailable", device=self.device.name, error=str(e))
            return None

    def __enter__(self) -> PoolPort:
        return self.probe()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.remove()


def create_managers(
    tree: DeviceTree,
    mapper: RegionMapperPort,
    clocks: ClockProviderPort | None = None,
    granularity: int = DEFAULT_GRANULARITY,
    pool_factory: PoolFactory = GenPool,
) -> list[SramManager]:
    """Build one SramManager per device in ``tree``.

    Managers are returned unprobed, in declaration order.
    """
    return [
        SramManager(
            device,
            mapper=mapper,
            clocks=clocks,
            granularity=granularity,
            pool_factory=pool_factory,
        )
        for device in tree.devices
    ]
