"""
PCM sample data models.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

# Playback rates supported by the sequencer, indexed by frequency class
SAMPLE_RATES = (4000, 6000, 12000, 24000)


@dataclass(frozen=True)
class RawSampleBlock:
    """
    A PCM block uploaded by the capture log.

    Attributes:
        data: Unsigned 8-bit PCM bytes
        offset: Start of the block in the capture's sample address space
        block_type: Data block type byte from the upload command
    """

    data: bytes
    offset: int
    block_type: int = 0

    @property
    def end(self) -> int:
        return self.offset + len(self.data)

    def contains(self, offset: int, length: int) -> bool:
        """Check if [offset, offset + length) lies inside this block."""
        return offset >= self.offset and offset + length <= self.end


@dataclass(eq=False)
class ConvertedSample:
    """
    Sample data at one of the supported playback rates.

    Instances are shared by every PlaySample command that refers to the
    same (block, source frequency) pair. Equality between samples is by
    content, see content_key().

    Attributes:
        data: Unsigned 8-bit PCM bytes at `frequency`
        frequency: One of SAMPLE_RATES
        file_position: Absolute position in the output image, once placed
    """

    data: bytes
    frequency: int
    file_position: Optional[int] = None

    def content_key(self) -> Tuple[int, bytes]:
        return (self.frequency, self.data)


@dataclass
class DacStream:
    """Per-stream playback state tracked while parsing."""

    ctrl_a: int = 0
    ctrl_d: int = 0
    frequency: int = 0
