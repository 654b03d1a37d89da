"""Domain layer for SRAM region partitioning.

This package contains pure logic with zero external dependencies.
All domain code uses only Python stdlib (typing, dataclasses) and
internal srampool.domain imports.

Modules:
    value_objects: Immutable value objects (MemoryRegion, Reservation, FreeChunk)
    services: Domain services (collect_reservations, RegionPartitioner)
    errors: Domain exception hierarchy
"""
