"""CLI entrypoint for SRAM pool layout inspection.

Usage:
    python -m srampool.entrypoints.cli layout devices.yaml
    python -m srampool.entrypoints.cli layout boards/ --granularity 64
"""

from pathlib import Path

import typer
import yaml

from srampool import __version__
from srampool.adapters.config.device_loader import load_device_directory, load_device_tree
from srampool.adapters.config.logging import configure_logging
from srampool.adapters.config.settings import get_settings
from srampool.adapters.outbound.buffer_region_mapper import BufferRegionMapper
from srampool.adapters.outbound.clock_registry import ClockRegistry
from srampool.application.sram_manager import create_managers
from srampool.domain.errors import SramError
from srampool.domain.services import collect_reservations
from srampool.domain.value_objects import DeviceTree

app = typer.Typer(
    name="srampool",
    help="On-chip SRAM pool allocator",
    add_completion=False,
)


def _load(path: Path) -> DeviceTree:
    if path.is_dir():
        return load_device_directory(path)
    return load_device_tree(path)


@app.command()
def layout(
    path: Path = typer.Argument(
        None,
        help="Device description file or directory (default: from settings)",
    ),
    granularity: int = typer.Option(
        None,
        "--granularity",
        "-g",
        help="Pool allocation unit in bytes (default: from settings)",
    ),
    log_level: str = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level (default: from settings)",
    ),
) -> None:
    """Probe every SRAM device and print its reservations and free chunks.

    Example:
        $ srampool layout devices.yaml
        $ srampool layout boards/ -g 64 -l DEBUG
    """
    settings = get_settings()

    final_path = path or Path(settings.pool.device_file)
    final_granularity = granularity or settings.pool.granularity
    configure_logging(log_level or settings.logging.level, settings.logging.json_output)

    try:
        tree = _load(final_path)
    except (OSError, yaml.YAMLError, ValueError) as e:
        typer.echo(f"error: cannot load {final_path}: {e}", err=True)
        raise typer.Exit(code=1) from e

    if not tree.devices:
        typer.echo(f"error: {final_path}: no devices compatible with mmio-sram", err=True)
        raise typer.Exit(code=1)

    managers = create_managers(
        tree,
        mapper=BufferRegionMapper(),
        clocks=ClockRegistry(tree.clocks),
        granularity=final_granularity,
    )

    failed = False
    for manager in managers:
        device = manager.device
        region = device.region
        typer.echo(f"{device.name}: {region.base:#x}-{region.end:#x} ({region.size} bytes)")

        try:
            with manager as pool:
                for block in collect_reservations(region, device.reserved)[:-1]:
                    typer.echo(
                        f"  reserved {block.offset:#08x}-{block.end:#08x} "
                        f"{block.size:>8}  {block.name}"
                    )
                for base, size in pool.chunks():
                    offset = base - region.base
                    typer.echo(f"  free     {offset:#08x}-{offset + size:#08x} {size:>8}")
                clock = "on" if manager.clock is not None else "none"
                typer.echo(
                    f"  pool: {pool.capacity()} bytes, granularity {final_granularity}, "
                    f"clock {clock}"
                )
        except SramError as e:
            typer.echo(f"error: {device.name}: {e}", err=True)
            failed = True

    if failed:
        raise typer.Exit(code=1)


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"srampool v{__version__}")


@app.command()
def config() -> None:
    """Show current configuration."""
    settings = get_settings()

    typer.echo("=" * 60)
    typer.echo("srampool - Configuration")
    typer.echo("=" * 60)
    typer.echo()
    typer.echo("[Pool]")
    typer.echo(f"  Granularity: {settings.pool.granularity}")
    typer.echo(f"  Device file: {settings.pool.device_file}")
    typer.echo()
    typer.echo("[Logging]")
    typer.echo(f"  Level: {settings.logging.level}")
    typer.echo(f"  JSON output: {settings.logging.json_output}")
    typer.echo("=" * 60)


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
