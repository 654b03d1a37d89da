"""YAML device description loader.

Loads device description files, validates via Pydantic, and returns
frozen domain dataclasses.
"""

from __future__ import annotations

from pathlib import Path

import yaml

from srampool.adapters.config.device_models import DeviceTreeModel
from srampool.domain.value_objects import DeviceTree, SramDevice


def load_device_tree(path: Path) -> DeviceTree:
    """Load and validate a YAML device description.

    Args:
        path: Path to the YAML file.

    Returns:
        Validated DeviceTree with only mmio-sram compatible devices.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        yaml.YAMLError: If the file contains invalid YAML.
        pydantic.ValidationError: If the content fails schema validation.
    """
    raw = yaml.safe_load(path.read_text()) or {}
    model = DeviceTreeModel.model_validate(raw)
    return model.to_domain()


def discover_device_files(directory: Path) -> dict[str, Path]:
    """Find all *.yaml device descriptions in a directory.

    Returns:
        Dict mapping description ID (from filename stem) to file path.
    """
    files: dict[str, Path] = {}
    if not directory.is_dir():
        return files
    for path in sorted(directory.glob("*.yaml")):
        files[path.stem] = path
    return files


def load_device_directory(directory: Path) -> DeviceTree:
    """Load every description in ``directory`` into one tree.

    Files are read in name order; devices and clocks are concatenated.

    Raises:
        ValueError: If two files declare a device with the same name.
            Also raised (as pydantic.ValidationError) for invalid files.
    """
    devices: list[SramDevice] = []
    clocks: list[str] = []
    origin: dict[str, Path] = {}
    for path in discover_device_files(directory).values():
        tree = load_device_tree(path)
        for device in tree.devices:
            if device.name in origin:
                raise ValueError(
                    f"duplicate device name '{device.name}' "
                    f"in {origin[device.name].name} and {path.name}"
                )
            origin[device.name] = path
        devices.extend(tree.devices)
        clocks.extend(c for c in tree.clocks if c not in clocks)
    return DeviceTree(devices=tuple(devices), clocks=tuple(clocks))
