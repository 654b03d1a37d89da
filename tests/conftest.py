"""Pytest configuration and shared fixtures.

This module defines:
- Test markers (unit, integration)
- Shared fixtures for fake port implementations
- Sample regions and device descriptions
"""

from unittest.mock import MagicMock

import pytest

from srampool.domain.value_objects import MemoryRegion, ReservedRange, SramDevice

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

REGION_BASE = 0x10000000
REGION_SIZE = 4096


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "unit: Fast unit tests with mocked boundaries",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests wiring real adapters together (YAML, mapper, pool)",
    )


@pytest.fixture
def region() -> MemoryRegion:
    """4 KiB region at REGION_BASE."""
    return MemoryRegion(base=REGION_BASE, size=REGION_SIZE)


@pytest.fixture
def device(region: MemoryRegion) -> SramDevice:
    """Device with a boot trampoline at the start and a stub near the end."""
    return SramDevice(
        name="sram@10000000",
        region=region,
        reserved=(
            ReservedRange(REGION_BASE + 0xF00, REGION_BASE + 0x1000, name="stub"),
            ReservedRange(REGION_BASE, REGION_BASE + 0x100, name="trampoline"),
        ),
        clock="sram_clk",
    )


# Fixtures for fake port implementations (used in unit tests)


@pytest.fixture
def fake_pool() -> MagicMock:
    """Fake PoolPort recording add_range calls.

    Returns a mock that implements the PoolPort protocol without
    tracking any free extents.
    """
    mock = MagicMock()
    mock.add_range.return_value = None
    mock.chunks.return_value = []
    mock.capacity.return_value = 0
    mock.available.return_value = 0
    return mock


@pytest.fixture
def fake_mapper() -> MagicMock:
    """Fake RegionMapperPort handing out a small buffer view."""
    mock = MagicMock()
    mock.map.side_effect = lambda region: memoryview(bytearray(region.size))
    return mock


@pytest.fixture
def fake_clock() -> MagicMock:
    """Fake ClockPort."""
    return MagicMock()


@pytest.fixture
def fake_clocks(fake_clock: MagicMock) -> MagicMock:
    """Fake ClockProviderPort returning fake_clock for any name."""
    mock = MagicMock()
    mock.get.return_value = fake_clock
    return mock
