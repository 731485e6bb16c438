"""
Compile command - build sequencer data or a flashable image.
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from cli.display.log_setup import setup_logging
from cli.display.tables import display_compile_summary
from vgmswan.compiler import compile_songs
from vgmswan.config import CompilerConfig
from vgmswan.errors import VGMSwanError
from vgmswan.formats.swan.image import FirmwareAsset
from vgmswan.formats.vgm.reader import VGMReader

console = Console()
app = typer.Typer()


@app.command()
def compile_cmd(
    ctx: typer.Context,
    inputs: Optional[List[Path]] = typer.Argument(None, help="VGM capture logs (.vgm, .vgz)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path"),
    disable_pcm: bool = typer.Option(False, "--disable-pcm", help="Disable PCM samples"),
    disable_resampling: bool = typer.Option(
        False, "--disable-resampling", help="Relabel samples instead of resampling"
    ),
    enable_24khz: bool = typer.Option(
        False, "--enable-24khz-samples", help="Enable 24kHz samples (without resampling)"
    ),
    image: bool = typer.Option(False, "--image", "-t", help="Output a playback ROM image"),
    firmware: Optional[Path] = typer.Option(
        None, "--firmware", "-f", help="Sequencer firmware for --image"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed progress"),
) -> None:
    """
    Compile VGM capture logs into WonderSwan sequencer data.

    Songs are stored in the order given on the command line.

    Examples:

        vgmswan compile title.vgm stage1.vgm -o songs.bin

        vgmswan compile title.vgm -o music.ws --image --firmware engine.bin
    """
    setup_logging(verbose)

    if not inputs or output is None:
        missing = "input files" if not inputs else "--output"
        console.print(f"[red]Error: Missing {missing}[/red]")
        console.print(ctx.get_help())
        raise typer.Exit(1)

    for path in inputs:
        if not path.exists():
            console.print(f"[red]Error: Source file not found: {path}[/red]")
            raise typer.Exit(1)

    if image and firmware is None:
        console.print("[red]Error: --image requires --firmware[/red]")
        raise typer.Exit(1)

    config = CompilerConfig(
        disable_pcm=disable_pcm,
        disable_resampling=disable_resampling,
        enable_24khz_samples=enable_24khz,
        build_image=image,
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=not verbose,
    ) as progress:
        task = progress.add_task("Parsing...", total=None)

        try:
            songs = []
            for path in inputs:
                progress.update(task, description=f"Parsing {path.name}...")
                songs.append(VGMReader.read(path, config))

            progress.update(task, description="Encoding...")
            asset = FirmwareAsset.load(firmware) if image else None
            result = compile_songs(songs, config, asset)

        except (VGMSwanError, OSError) as e:
            console.print(f"[red]Error: {e}[/red]")
            if verbose:
                console.print_exception()
            raise typer.Exit(1)

        progress.update(task, description="Done!")

    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "wb") as f:
        f.write(result.data)

    console.print(f"[green]Compiled:[/green] {len(inputs)} song(s) -> {output}")
    display_compile_summary(result)


if __name__ == "__main__":
    app()
