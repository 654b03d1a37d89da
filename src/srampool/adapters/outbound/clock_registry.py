"""Software gate clocks looked up by name."""

import threading

from srampool.domain.errors import ResourceError


class SoftwareClock:
    """Reference-counted gate clock.

    The clock is running while its enable count is above zero.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._enable_count = 0
        self._lock = threading.Lock()

    @property
    def enable_count(self) -> int:
        return self._enable_count

    @property
    def enabled(self) -> bool:
        return self._enable_count > 0

    def prepare_enable(self) -> None:
        with self._lock:
            self._enable_count += 1

    def disable_unprepare(self) -> None:
        with self._lock:
            if self._enable_count == 0:
                raise ResourceError(f"clock {self.name} disabled while not enabled")
            self._enable_count -= 1


class ClockRegistry:
    """Named collection of SoftwareClock instances.

    Example:
        >>> clocks = ClockRegistry(["sram_clk"])
        >>> clocks.get("sram_clk").name
        'sram_clk'
    """

    def __init__(self, names: list[str] | tuple[str, ...] = ()) -> None:
        self._clocks: dict[str, SoftwareClock] = {name: SoftwareClock(name) for name in names}

    def get(self, name: str | None) -> SoftwareClock:
        """Return the clock called ``name``.

        Raises:
            ResourceError: If name is None or no such clock is registered.
        """
        if name is None:
            raise ResourceError("no clock specified")
        try:
            return self._clocks[name]
        except KeyError:
            raise ResourceError(f"clock {name} not found") from None

    def names(self) -> list[str]:
        return sorted(self._clocks)
