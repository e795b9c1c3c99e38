#!/usr/bin/env python3

import logging
import os
import sys
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.table import Table
from rich import box

from . import __version__
from .config import DEFAULT_CONFIG_FILE, load_config
from .errors import AsciiMapError
from .pipeline import PlotResult, plot
from .reporting import configure_logging

logger = logging.getLogger(__name__)


def terminal_size() -> Tuple[int, int]:
    try:
        size = os.get_terminal_size()
        return size.columns, size.lines
    except OSError:
        return 80, 24


def parse_dimension(value: Optional[str], terminal_size: int) -> Optional[int]:
    """Parse a dimension value that can be a number or percentage.

    Args:
        value: String value like "100", "80%", or None
        terminal_size: The terminal dimension to use for percentage calculation

    Returns:
        Parsed integer value or None
    """
    if not value:
        return None

    value = value.strip()

    if value.endswith('%'):
        try:
            percentage = float(value[:-1])
        except ValueError:
            logger.warning("Invalid percentage value: %s", value)
            return None
        if 0 < percentage <= 100:
            return max(1, int(terminal_size * percentage / 100))
        logger.warning("Percentage must be between 0 and 100, got %s%%", percentage)
        return None

    try:
        size = int(value)
    except ValueError:
        logger.warning("Invalid size value: %s", value)
        return None
    if size > 0:
        return size
    logger.warning("Size must be positive, got %d", size)
    return None


def render_summary(result: PlotResult, console: Optional[Console] = None) -> None:
    """Print the bounds and point tallies of a run as a table."""
    console = console or Console()
    bounds = result.bounds
    table = Table(title="Run summary", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta", justify="right")
    table.add_row("Latitude", f"{bounds.min_lat:.4f} to {bounds.max_lat:.4f}")
    table.add_row("Longitude", f"{bounds.min_lon:.4f} to {bounds.max_lon:.4f}")
    table.add_row("Points in bounds (pass 1)", str(bounds.point_count))
    table.add_row("Points placed (pass 2)", str(result.points_placed))
    table.add_row("Parse errors (pass 2)", str(result.parse_errors))
    table.add_row("Outside bounds (pass 2)", str(result.out_of_bounds))
    table.add_row("Max points per cell", str(result.grid.max_count()))
    console.print(table)


@click.command()
@click.option('--config', '-c', 'config_path', default=DEFAULT_CONFIG_FILE, help='Config file path')
@click.option('--file', '-f', 'file_path', help='Data file to plot (overrides input.file_path)')
@click.option('--width', help='Map width in cells (e.g., 60) or percentage of terminal (e.g., "80%")')
@click.option('--height', help='Map height in rows (e.g., 20) or percentage of terminal (e.g., "50%")')
@click.option('--parallel/--sequential', default=None, help='Scan the file with worker processes')
@click.option('--workers', type=int, help='Number of worker processes for --parallel')
@click.option('--max-errors', type=int, help='Per-line errors to report individually (-1 for all)')
@click.option('--summary', is_flag=True, help='Print a table of bounds and point counts after the map')
@click.option('--verbose', '-v', is_flag=True, help='Show debug logging')
@click.version_option(__version__, prog_name='asciimap')
def main(config_path: str, file_path: Optional[str], width: Optional[str], height: Optional[str],
         parallel: Optional[bool], workers: Optional[int], max_errors: Optional[int],
         summary: bool, verbose: bool):
    """Plot the density of latitude/longitude points in a delimited text file as an ASCII map.

    Settings are read from a YAML config file; command line options override it.

    Example:
      asciimap -c asciimap.yaml --file points.csv --width 80% --height 30 --parallel
    """
    configure_logging(verbose)

    term_width, term_height = terminal_size()
    overrides = {
        'input.file_path': file_path,
        'map.width': parse_dimension(width, term_width),
        'map.height': parse_dimension(height, term_height),
        'processing.parallel': parallel,
        'processing.workers': workers,
        'processing.error_count': max_errors,
    }

    try:
        config = load_config(config_path, overrides)
    except AsciiMapError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    logger.info("Starting ASCII Map Plotter")
    logger.info("Input data file: %s", config.file_path)
    logger.info("Map size: %d x %d", config.map_width, config.map_height)
    logger.info("Delimiter: '%s', skip header lines: %d", config.delimiter, config.skip_header_lines)
    if config.html_enabled:
        logger.warning("HTML output is not supported; ignoring output.html_path=%s", config.html_path)

    try:
        result = plot(config)
    except AsciiMapError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(result.text)
    if summary:
        render_summary(result)


if __name__ == '__main__':
    main()
