"""Unit tests for the GenPool address-ordered allocator.

Covers:
- Chunk bookkeeping (add_range, overlap rejection, capacity)
- First-fit allocation order and granularity rounding
- Free with coalescing, double-free detection
- Property: available + outstanding = capacity
- Concurrent allocate/free
"""

import threading

import pytest
from hypothesis import given
from hypothesis import strategies as st

from srampool.adapters.outbound.gen_pool import DEFAULT_GRANULARITY, GenPool
from srampool.domain.errors import AllocatorError, ConfigurationError, PoolExhaustedError
from srampool.domain.value_objects import PoolAllocation

pytestmark = pytest.mark.unit


@pytest.fixture
def pool() -> GenPool:
    """Pool with two separate 256-byte chunks."""
    pool = GenPool(granularity=32)
    pool.add_range(0x1000, 256)
    pool.add_range(0x2000, 256)
    return pool


class TestGenPoolConstruction:
    def test_default_granularity(self) -> None:
        assert GenPool().granularity == DEFAULT_GRANULARITY == 32

    @pytest.mark.parametrize("granularity", [0, -8, 3, 48])
    def test_rejects_non_power_of_two(self, granularity: int) -> None:
        with pytest.raises(ConfigurationError, match="power of two"):
            GenPool(granularity=granularity)

    def test_empty_pool(self) -> None:
        pool = GenPool()

        assert pool.capacity() == 0
        assert pool.available() == 0
        assert pool.chunks() == []


class TestAddRange:
    def test_chunks_sorted_by_address(self) -> None:
        pool = GenPool()
        pool.add_range(0x3000, 64)
        pool.add_range(0x1000, 128)

        assert pool.chunks() == [(0x1000, 128), (0x3000, 64)]
        assert pool.capacity() == 192
        assert pool.available() == 192

    def test_adjacent_chunks_allowed(self) -> None:
        pool = GenPool()
        pool.add_range(0x1000, 0x100)
        pool.add_range(0x1100, 0x100)

        assert pool.capacity() == 0x200

    @pytest.mark.parametrize(
        ("base", "size"),
        [(0x1000, 256), (0x10F0, 32), (0xF00, 0x101), (0x0, 0x3000)],
    )
    def test_overlap_rejected(self, pool: GenPool, base: int, size: int) -> None:
        with pytest.raises(AllocatorError, match="overlaps"):
            pool.add_range(base, size)

    def test_zero_size_rejected(self) -> None:
        with pytest.raises(AllocatorError, match="size must be > 0"):
            GenPool().add_range(0x1000, 0)

    def test_negative_base_rejected(self) -> None:
        with pytest.raises(AllocatorError, match="base must be >= 0"):
            GenPool().add_range(-32, 64)

    def test_has_address(self, pool: GenPool) -> None:
        assert pool.has_address(0x1000)
        assert pool.has_address(0x10FF)
        assert not pool.has_address(0x1100)
        assert not pool.has_address(0xFFF)


class TestAllocate:
    def test_rounds_up_to_granularity(self, pool: GenPool) -> None:
        handle = pool.allocate(33)

        assert handle == PoolAllocation(address=0x1000, size=64)
        assert pool.available() == 512 - 64

    def test_first_fit_in_address_order(self, pool: GenPool) -> None:
        first = pool.allocate(32)
        second = pool.allocate(32)

        assert first.address == 0x1000
        assert second.address == 0x1020

    def test_spills_into_next_chunk(self, pool: GenPool) -> None:
        pool.allocate(200)
        handle = pool.allocate(64)

        assert handle.address == 0x2000

    def test_request_larger_than_any_chunk(self, pool: GenPool) -> None:
        with pytest.raises(PoolExhaustedError, match="Requested 300 bytes"):
            pool.allocate(300)

    def test_exhaustion(self, pool: GenPool) -> None:
        pool.allocate(256)
        pool.allocate(256)

        assert pool.available() == 0
        with pytest.raises(PoolExhaustedError):
            pool.allocate(1)

    @pytest.mark.parametrize("size", [0, -1])
    def test_non_positive_size_rejected(self, pool: GenPool, size: int) -> None:
        with pytest.raises(AllocatorError, match="must be > 0"):
            pool.allocate(size)

    def test_tail_shorter_than_granule_unusable(self) -> None:
        pool = GenPool(granularity=32)
        pool.add_range(0x1000, 40)

        pool.allocate(32)
        with pytest.raises(PoolExhaustedError):
            pool.allocate(1)
        assert pool.available() == 8


class TestFree:
    def test_free_restores_available(self, pool: GenPool) -> None:
        handle = pool.allocate(100)
        pool.free(handle)

        assert pool.available() == pool.capacity() == 512

    def test_freed_space_reused_first(self, pool: GenPool) -> None:
        first = pool.allocate(64)
        pool.allocate(64)
        pool.free(first)

        assert pool.allocate(32).address == 0x1000

    def test_coalesces_neighbours(self, pool: GenPool) -> None:
        a = pool.allocate(64)
        b = pool.allocate(64)
        c = pool.allocate(128)

        pool.free(a)
        pool.free(c)
        pool.free(b)

        # Whole first chunk is one extent again
        assert pool.allocate(256).address == 0x1000

    def test_double_free_rejected(self, pool: GenPool) -> None:
        handle = pool.allocate(32)
        pool.free(handle)

        with pytest.raises(AllocatorError, match="double-free"):
            pool.free(handle)

    def test_foreign_handle_rejected(self, pool: GenPool) -> None:
        with pytest.raises(AllocatorError, match="not outstanding"):
            pool.free(PoolAllocation(address=0x1040, size=32))

    def test_size_mismatch_rejected(self, pool: GenPool) -> None:
        handle = pool.allocate(64)

        with pytest.raises(AllocatorError):
            pool.free(PoolAllocation(address=handle.address, size=32))

    def test_bookkeeping_outside_chunks_rejected(self, pool: GenPool) -> None:
        pool._allocated[0x9000] = 32

        with pytest.raises(AllocatorError, match="outside every chunk"):
            pool.free(PoolAllocation(address=0x9000, size=32))


class TestGenPoolProperties:
    @given(
        sizes=st.lists(st.integers(min_value=1, max_value=200), max_size=30),
        free_mask=st.lists(st.booleans(), min_size=30, max_size=30),
    )
    def test_property_available_plus_outstanding_equals_capacity(
        self, sizes: list[int], free_mask: list[bool]
    ) -> None:
        pool = GenPool(granularity=16)
        pool.add_range(0x0, 1024)
        pool.add_range(0x4000, 2048)

        outstanding: list[PoolAllocation] = []
        for size in sizes:
            try:
                outstanding.append(pool.allocate(size))
            except PoolExhaustedError:
                pass

        for handle, release in zip(list(outstanding), free_mask):
            if release:
                pool.free(handle)
                outstanding.remove(handle)

        assert pool.available() + sum(h.size for h in outstanding) == pool.capacity()

        # Live allocations never overlap and stay aligned inside chunks
        ordered = sorted(outstanding, key=lambda h: h.address)
        for prev, nxt in zip(ordered, ordered[1:]):
            assert prev.address + prev.size <= nxt.address
        for handle in outstanding:
            assert handle.address % 16 == 0
            assert pool.has_address(handle.address)


class TestGenPoolConcurrency:
    def test_concurrent_allocate_free_keeps_accounting(self) -> None:
        pool = GenPool(granularity=32)
        pool.add_range(0x10000, 64 * 1024)
        errors: list[Exception] = []

        def worker() -> None:
            try:
                for _ in range(200):
                    handle = pool.allocate(96)
                    pool.free(handle)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert pool.available() == pool.capacity() == 64 * 1024
