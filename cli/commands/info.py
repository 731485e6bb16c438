"""
Info command - display capture log header and stream summary.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from cli.display.log_setup import setup_logging
from cli.display.tables import display_header_info, display_song_info
from vgmswan.config import CompilerConfig
from vgmswan.errors import VGMSwanError
from vgmswan.formats.vgm.reader import VGMReader

console = Console()
app = typer.Typer()


@app.command()
def info(
    ctx: typer.Context,
    file: Optional[Path] = typer.Argument(None, help="VGM capture log (.vgm, .vgz)"),
    header_only: bool = typer.Option(
        False, "--header", "-H", help="Only show the header, do not parse commands"
    ),
    disable_resampling: bool = typer.Option(
        False, "--disable-resampling", help="Relabel samples instead of resampling"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show parser log output"),
) -> None:
    """
    Display capture log information.

    Shows the normalized header and, unless --header is given, a summary
    of the parsed command stream.

    Examples:

        vgmswan info song.vgm

        vgmswan info song.vgz --header
    """
    setup_logging(verbose)

    if file is None:
        console.print("[red]Error: Missing capture log[/red]")
        console.print(ctx.get_help())
        raise typer.Exit(1)

    if not file.exists():
        console.print(f"[red]Error: File not found: {file}[/red]")
        raise typer.Exit(1)

    reader = VGMReader(CompilerConfig(disable_resampling=disable_resampling))

    try:
        if header_only:
            display_header_info(VGMReader.read_header(file), str(file))
            return

        song = reader.parse_file(file)
    except VGMSwanError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    display_header_info(reader.header, str(file))
    display_song_info(song, reader.parser)


if __name__ == "__main__":
    app()
