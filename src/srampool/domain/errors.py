"""Domain exception hierarchy.

All domain-level errors inherit from SramError.
This allows clean exception handling at adapter boundaries.
"""


class SramError(Exception):
    """Base exception for all domain errors."""


class ConfigurationError(SramError):
    """Static configuration is malformed or conflicting.

    Raised for out-of-bounds or overlapping reservations, invalid regions
    and invalid pool granularity. Always fatal to probe.

    Attributes:
        offset: Region-relative offset of the offending block, if known.
    """

    def __init__(self, message: str, offset: int | None = None) -> None:
        super().__init__(message)
        self.offset = offset


class AllocatorError(SramError):
    """Pool rejected an add-range, allocate or free request."""


class PoolExhaustedError(AllocatorError):
    """No free extent in the pool is large enough for the request."""


class ResourceError(SramError):
    """External resource (region mapping, clock) could not be acquired."""
