"""
vgmswan - VGM to WonderSwan sequencer data compiler.

A CLI tool for compiling WonderSwan VGM capture logs.
"""

import typer
from rich.console import Console

from cli.commands.compile import compile_cmd
from cli.commands.info import info
from vgmswan import __version__

console = Console()

# Main app
app = typer.Typer(
    name="vgmswan",
    help="Compile WonderSwan VGM capture logs into sequencer data.",
    add_completion=False,
    rich_markup_mode="rich",
)

app.command(name="compile")(compile_cmd)
app.command(name="info")(info)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]vgmswan[/bold] version {__version__}")
    console.print("[dim]VGM to WonderSwan sequencer data compiler[/dim]")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version_flag: bool = typer.Option(False, "--version", "-V", help="Show version"),
) -> None:
    """
    vgmswan - Compile WonderSwan VGM capture logs.

    [bold]Quick Start:[/bold]

        vgmswan compile song.vgm -o songs.bin            # Song data only
        vgmswan compile *.vgz -o music.ws -t -f engine.bin  # Playable ROM
        vgmswan info song.vgm                            # Header and stream summary

    Use --help with any command for more details.
    """
    if version_flag:
        version()
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
