import sys
from dataclasses import asdict
from pathlib import Path

import click

import hexagg


@click.command(help="Convert ASCII grids to H3 cells and write them to a vector file.")
@click.argument("sources", type=click.STRING, nargs=-1, required=True)
@click.argument("destination", type=click.STRING)
@click.option("--column", default="population_density", type=click.STRING)
@click.option("--compact/--no-compact", default=False)
@click.option("--scheduler", default="processes", type=click.STRING)
def convert(sources, destination, column, compact, scheduler):
    if Path(destination).exists():
        raise ValueError("Destination file already exists.")

    results = hexagg.convert.convert_files(sources, scheduler=scheduler)
    failed = [result for result in results if not result.ok]
    for result in failed:
        click.echo(f"Failed to convert {result.source}: {result.error}", err=True)

    hex_map = hexagg.hexmap.merge_hex_maps(
        result.hex_map for result in results if result.ok
    )
    if compact:
        hex_map = hexagg.hexmap.compact_hex_map(hex_map)

    if hex_map:
        hexagg.hexmap.hex_map_to_geodataframe(hex_map, column).to_file(destination)
        click.echo(f"Wrote {len(hex_map)} cells to {destination}.")
    else:
        click.echo("No cells to write.", err=True)

    if failed:
        sys.exit(1)


@click.command(help="Print the header of an ASCII grid.")
@click.argument("source", type=click.STRING)
def header(source):
    for key, value in asdict(hexagg.ascii_grid.read_header(source)).items():
        click.echo(f"{key} {value}")


@click.group()
def cli():
    pass


cli.add_command(convert)
cli.add_command(header)
