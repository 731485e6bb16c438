"""
Song and batch models.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from vgmswan.models.commands import Command, Wait
from vgmswan.models.sample import ConvertedSample


@dataclass
class CommandFrame:
    """
    Commands executed between two non-zero waits.

    Attributes:
        commands: Ordered commands, normally ending with a Wait
        loop_frame: The capture's loop point falls inside this frame
        position: Absolute output position, once emitted
    """

    commands: List[Command] = field(default_factory=list)
    loop_frame: bool = False
    position: Optional[int] = None

    def key(self) -> Tuple:
        """Structural key; frames with equal keys encode identically."""
        return tuple(cmd.key() for cmd in self.commands)

    @property
    def ends_with_wait(self) -> bool:
        return bool(self.commands) and isinstance(self.commands[-1], Wait)

    @property
    def last_command(self) -> Optional[Command]:
        return self.commands[-1] if self.commands else None

    def __len__(self) -> int:
        return len(self.commands)


@dataclass
class Song:
    """
    One parsed capture log.

    Attributes:
        frames: Ordered command frames
        samples: Converted samples first referenced by this song
        loop_position: Sample position (44100 Hz) of the loop point
        name: Source name, for reporting
    """

    frames: List[CommandFrame] = field(default_factory=list)
    samples: List[ConvertedSample] = field(default_factory=list)
    loop_position: int = 0
    name: str = ""

    @property
    def command_count(self) -> int:
        return sum(len(frame) for frame in self.frames)


@dataclass
class BankData:
    """All songs of a batch plus the globally deduplicated sample list."""

    songs: List[Song] = field(default_factory=list)
    samples: List[ConvertedSample] = field(default_factory=list)

    @property
    def sample_bytes(self) -> int:
        return sum(len(sample.data) for sample in self.samples)
