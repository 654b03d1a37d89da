"""srampool: Pool allocator for on-chip SRAM regions.

Carves a fixed memory region into free chunks around statically
declared reservations and serves allocations from them.

Architecture: Hexagonal (Ports & Adapters)
- Domain core: Reservation model and region partitioning (pure)
- Ports: Protocol-based interfaces (pool, region mapper, clocks)
- Adapters: GenPool allocator, buffer-backed mapper, YAML device loader
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
