"""
Command intermediate representation.

A song is a list of frames, and a frame is a list of these commands. The
set of command kinds is closed: the encoder matches on exactly these five
classes and rejects anything else.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from vgmswan.models.sample import ConvertedSample

# Highest chip memory address (exclusive) that holds wavetable data
MEMORY_ADDRESS_LIMIT = 0x40

# Number of sound I/O ports (0x80-0x9F) addressable by port writes
PORT_ADDRESS_LIMIT = 0x20

# Size of one wavetable run in chip memory
WAVETABLE_SIZE = 16


@dataclass
class WriteMemory:
    """
    A run of bytes written to chip memory.

    Attributes:
        address: First chip memory address (below 0x40)
        data: Bytes written starting at address
    """

    address: int
    data: bytes

    def key(self) -> Tuple:
        return ("mem", self.address, bytes(self.data))

    @property
    def is_wavetable(self) -> bool:
        """Check if this is a complete, 16-aligned wavetable write."""
        return (
            self.address & 0x0F == 0
            and self.address < MEMORY_ADDRESS_LIMIT
            and len(self.data) == WAVETABLE_SIZE
        )


@dataclass
class WritePort:
    """
    A write of one or two bytes to consecutive I/O ports.

    Attributes:
        address: Port offset of the first byte
        data: One or two bytes
    """

    address: int
    data: bytes

    def key(self) -> Tuple:
        return ("port", self.address, bytes(self.data))


@dataclass
class Wait:
    """Wait for a number of sequencer ticks (120 Hz)."""

    ticks: int

    def key(self) -> Tuple:
        return ("wait", self.ticks)


@dataclass
class PlaySample:
    """
    Start or stop PCM playback.

    Attributes:
        sample: Converted sample to play, or None to stop playback
        offset: Byte offset into the sample
        length: Number of bytes to play (0 plays the whole sample)
        repeat: Loop playback
        reverse: Play backwards
    """

    sample: Optional[ConvertedSample] = None
    offset: int = 0
    length: int = 0
    repeat: bool = False
    reverse: bool = False

    @property
    def is_stop(self) -> bool:
        return self.sample is None

    def key(self) -> Tuple:
        if self.sample is None:
            return ("stop",)
        return (
            "play",
            self.sample.content_key(),
            self.sample.file_position,
            self.offset,
            self.length,
            self.repeat,
            self.reverse,
        )


@dataclass
class Jump:
    """Jump to a sample position in the song (reserved, never encoded)."""

    target: int

    def key(self) -> Tuple:
        return ("jump", self.target)


Command = Union[WriteMemory, WritePort, Wait, PlaySample, Jump]
