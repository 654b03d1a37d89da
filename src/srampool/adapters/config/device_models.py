"""Pydantic validation models for device description YAML files.

Validates YAML input and converts to frozen domain dataclasses.
"""

from __future__ import annotations

from typing import Literal, Self

from pydantic import BaseModel, Field, model_validator

from srampool.domain.value_objects import (
    SRAM_COMPATIBLE,
    DeviceTree,
    MemoryRegion,
    ReservedRange,
    SramDevice,
)


class RegModel(BaseModel):
    """Validated address range (base + size)."""

    base: int = Field(..., ge=0)
    size: int = Field(..., gt=0)


class ReservedBlockModel(BaseModel):
    """Validated reserved block declared under an SRAM device."""

    name: str = Field(..., min_length=1, max_length=80)
    reg: RegModel
    status: Literal["okay", "disabled"] = "okay"

    def to_domain(self) -> ReservedRange:
        """Convert to frozen domain ReservedRange."""
        return ReservedRange(
            start=self.reg.base,
            end=self.reg.base + self.reg.size,
            name=self.name,
            enabled=self.status == "okay",
        )


class SramDeviceModel(BaseModel):
    """Validated SRAM device node."""

    name: str = Field(..., min_length=1, max_length=80)
    compatible: list[str] = Field(default_factory=lambda: [SRAM_COMPATIBLE])
    reg: RegModel
    clock: str | None = None
    reserved: list[ReservedBlockModel] = Field(default_factory=list)

    @property
    def is_sram(self) -> bool:
        return SRAM_COMPATIBLE in self.compatible

    def to_domain(self) -> SramDevice:
        """Convert to frozen domain SramDevice."""
        return SramDevice(
            name=self.name,
            region=MemoryRegion(base=self.reg.base, size=self.reg.size),
            reserved=tuple(r.to_domain() for r in self.reserved),
            clock=self.clock,
        )


class DeviceTreeModel(BaseModel):
    """Validated top-level device description."""

    clocks: list[str] = Field(default_factory=list)
    devices: list[SramDeviceModel] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_device_names(self) -> Self:
        seen: set[str] = set()
        for device in self.devices:
            if device.name in seen:
                raise ValueError(f"duplicate device name '{device.name}'")
            seen.add(device.name)
        return self

    def to_domain(self) -> DeviceTree:
        """Convert to frozen domain DeviceTree, keeping only mmio-sram devices."""
        return DeviceTree(
            devices=tuple(d.to_domain() for d in self.devices if d.is_sram),
            clocks=tuple(self.clocks),
        )
