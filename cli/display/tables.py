"""
Rich displays for capture logs and compile results.
"""

from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from vgmswan.compiler import CompileResult
from vgmswan.formats.vgm.header import VGM_SAMPLES_PER_SECOND, VGMHeader
from vgmswan.formats.vgm.parser import VGMCommandParser
from vgmswan.models.commands import PlaySample, Wait, WriteMemory, WritePort
from vgmswan.models.song import Song

console = Console()


def format_duration(samples: int) -> str:
    """Format a 44100 Hz sample count as m:ss.ss"""
    seconds = samples / VGM_SAMPLES_PER_SECOND
    return f"{int(seconds // 60)}:{seconds % 60:05.2f}"


def format_offset(offset: int) -> str:
    return f"0x{offset:X}" if offset else "[dim]none[/dim]"


def display_header_info(header: VGMHeader, filepath: str = "") -> None:
    """Display a normalized VGM header."""
    status = "[green]Valid[/green]" if header.is_valid() else "[red]Invalid[/red]"
    ws_clock = (
        f"{header.clock_wonderswan} Hz"
        if header.clock_wonderswan
        else "[red]not set (not a WonderSwan log)[/red]"
    )

    header_content = f"""[bold]File:[/bold] {filepath or "N/A"}
[bold]Version:[/bold] {header.version_string} ({header.header_length} byte header)
[bold]Status:[/bold] {status}
[bold]WonderSwan Clock:[/bold] {ws_clock}
[bold]Length:[/bold] {format_duration(header.sample_count)} ({header.sample_count} samples)
[bold]Loop Length:[/bold] {format_duration(header.loop_sample_count)}"""

    console.print(
        Panel(
            header_content,
            title="[bold blue]VGM Header[/bold blue]",
            border_style="blue",
            expand=False,
        )
    )

    offset_table = Table(
        title="Offsets", box=box.ROUNDED, show_header=True, header_style="bold magenta"
    )
    offset_table.add_column("Field", style="cyan", width=14)
    offset_table.add_column("Absolute", width=12)

    offset_table.add_row("Data", format_offset(header.data_offset))
    offset_table.add_row("Loop", format_offset(header.loop_offset))
    offset_table.add_row("Extra header", format_offset(header.extra_header_offset))
    offset_table.add_row("GD3", format_offset(header.gd3_offset))

    console.print(offset_table)


def display_song_info(song: Song, parser: Optional[VGMCommandParser] = None) -> None:
    """Display a summary of a parsed command stream."""
    counts = {"Port writes": 0, "Memory writes": 0, "Waits": 0, "Sample starts": 0, "Sample stops": 0}
    for frame in song.frames:
        for command in frame.commands:
            if isinstance(command, WritePort):
                counts["Port writes"] += 1
            elif isinstance(command, WriteMemory):
                counts["Memory writes"] += 1
            elif isinstance(command, Wait):
                counts["Waits"] += 1
            elif isinstance(command, PlaySample):
                counts["Sample stops" if command.is_stop else "Sample starts"] += 1

    table = Table(title="Command Stream", box=box.ROUNDED, show_header=True, header_style="bold green")
    table.add_column("Item", style="cyan", width=16)
    table.add_column("Count", justify="right", width=10)

    table.add_row("Frames", str(len(song.frames)))
    for name, count in counts.items():
        table.add_row(name, str(count))
    if parser is not None:
        table.add_row("PCM blocks", str(len(parser.blocks)))
        table.add_row("DAC streams", str(len(parser.streams)))
    table.add_row("Samples", str(len(song.samples)))
    table.add_row("Loop position", format_duration(song.loop_position))

    console.print(table)

    if song.samples:
        sample_table = Table(title="Samples", box=box.SIMPLE, show_header=True, header_style="dim")
        sample_table.add_column("#", style="dim", width=3)
        sample_table.add_column("Rate", justify="right", width=8)
        sample_table.add_column("Bytes", justify="right", width=8)
        for index, sample in enumerate(song.samples):
            sample_table.add_row(str(index), f"{sample.frequency}", str(len(sample.data)))
        console.print(sample_table)


def display_compile_summary(result: CompileResult) -> None:
    """Display what a compile run produced."""
    stats = result.stats

    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Property", style="cyan", width=22)
    table.add_column("Value", justify="right", width=14)

    table.add_row("Songs", str(len(result.bank.songs)))
    table.add_row("Unique samples", str(len(result.bank.samples)))
    table.add_row("Sample bytes", str(stats.sample_bytes))
    table.add_row("Frames", str(stats.frames))
    table.add_row("Frame references", str(stats.frame_references))
    table.add_row("Wavetable references", str(stats.wavetable_references))
    table.add_row("Bank switches", str(stats.bank_switches))
    table.add_row("Song data size", f"{result.song_data_size} bytes")
    table.add_row("Output size", f"{len(result.data)} bytes")

    console.print(table)
