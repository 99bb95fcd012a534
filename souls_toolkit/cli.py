"""Souls Toolkit CLI."""

import logging
import shutil
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .errors import SoulsFormatError


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """Souls Toolkit - Unpack FromSoftware DCX containers and BND4 archives.

    \b
    dcx:     DCX container -> raw payload
    extract: (DCX-wrapped) BND4 archive -> member files
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: input without .dcx, or with .out appended)",
)
def dcx(input_file: Path, output: Optional[Path]):
    """Decompress a DCX container."""
    from .dcx import DCXReader

    if output is None:
        if input_file.suffix.lower() == ".dcx":
            output = input_file.with_suffix("")
        else:
            output = input_file.with_name(input_file.name + ".out")

    click.echo(f"Opening: {input_file}")

    try:
        with open(input_file, "rb") as source:
            with DCXReader(source) as reader:
                click.echo(f"Algorithm: {reader.header.algorithm_name}")
                click.echo(f"Size:      {reader.header.size}")
                with open(output, "wb") as target:
                    shutil.copyfileobj(reader, target)

        click.echo(f"Created: {output}")

    except (SoulsFormatError, OSError, EOFError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    help="Output directory (default: <archive_name>_extracted)",
)
@click.option(
    "--list-only",
    is_flag=True,
    help="List files without extracting",
)
def extract(archive: Path, output: Optional[Path], list_only: bool):
    """Extract files from a BND4 archive.

    Archives wrapped in a DCX container are decompressed first.
    """
    from .bnd4 import BND4Reader
    from .dcx import decompress_dcx, is_dcx

    click.echo(f"Opening: {archive}")

    try:
        data = archive.read_bytes()
        if is_dcx(data):
            click.echo("Decompressing DCX container...")
            data = decompress_dcx(data)

        with BND4Reader(data) as reader:
            count = reader.entry_count()

            if list_only:
                click.echo(f"\nFiles in archive ({count}):")
                for index, name, size in reader.list_files():
                    click.echo(f"  [{index}] {name or '<unnamed>'} ({size} bytes)")
                return

            if output is None:
                output = archive.parent / f"{archive.name.split('.')[0]}_extracted"

            click.echo(f"Output:  {output}")
            click.echo()

            with click.progressbar(
                list(reader.extract_all(output)),
                label="Extracting",
                item_show_func=lambda x: (x[1] or "") if x else "",
            ) as items:
                extracted_count = sum(1 for _ in items)

            click.echo()
            click.echo(f"Extracted: {extracted_count} files")
            if extracted_count < count:
                click.echo(f"Skipped:   {count - extracted_count} files (unsupported compression)")

    except (SoulsFormatError, OSError, EOFError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
