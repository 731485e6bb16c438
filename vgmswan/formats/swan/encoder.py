"""
WonderSwan sequencer bytecode encoder.

Output layout:
    N x 3       Song pointers (bank-relative positions)
    3           FF FF FF marker (image builds only)
    ...         Deduplicated sample data (must end inside bank 0)
    ...         Song bytecode, switching banks with F7 as needed

Bytecode (all positions are little-endian, low 16 bits):
    40+a dd             Write 1 byte to port a
    60+a d0 d1          Write 2 bytes to ports a, a+1
    aa ll dd...         Write ll bytes to memory at aa (aa < 0x40)
    EF pp pp            Run the frame at pp (frame back-reference)
    EF+n                Wait n ticks (n = 1..7)
    F7                  Switch to next bank (rest of bank is FF padding)
    F8 nn               Wait nn ticks
    F9 nn nn            Wait nnnn ticks
    FA pp pp bb         End of song, loop to bank-relative position
    FB 00               Stop sample
    FB cc pp pp ll ll   Play sample
    FC+(a>>4) pp pp     Write 16 bytes from pp to memory at a
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from vgmswan.config import CompilerConfig
from vgmswan.errors import SampleBankOverflow, UnknownCommandShape, UnknownFrequencyClass
from vgmswan.models.commands import (
    PORT_ADDRESS_LIMIT,
    Command,
    PlaySample,
    Wait,
    WriteMemory,
    WritePort,
)
from vgmswan.models.sample import ConvertedSample
from vgmswan.models.song import BankData, CommandFrame, Song

logger = logging.getLogger(__name__)

BANK_SIZE = 0x10000

# Opcodes
OP_WRITE_PORT_1 = 0x40
OP_WRITE_PORT_2 = 0x60
OP_FRAME_REFERENCE = 0xEF
OP_SHORT_WAIT = 0xEF
OP_BANK_SWITCH = 0xF7
OP_WAIT_BYTE = 0xF8
OP_WAIT_WORD = 0xF9
OP_END = 0xFA
OP_SAMPLE = 0xFB
OP_WAVETABLE_REFERENCE = 0xFC

BANK_FILL = 0xFF
TEST_MARKER = b"\xff\xff\xff"
POINTER_SIZE = 3

# Playback control bits
SAMPLE_ACTIVE = 0x80
SAMPLE_REVERSE = 0x40
SAMPLE_REPEAT = 0x08
FREQUENCY_CLASS = {4000: 0, 6000: 1, 12000: 2, 24000: 3}

# A wavetable write starting at or past this bank offset is never cached
WAVETABLE_CACHE_LIMIT = 0xFFE8


def bank_position(reference: int, target: int) -> bytes:
    """
    Encode `target` as seen from `reference`.

    Args:
        reference: Absolute position the player is at
        target: Absolute position to encode

    Returns:
        3 bytes: low 16 bits of target, then the bank delta
    """
    delta = ((target & 0xFF0000) - (reference & 0xFF0000)) >> 16
    return bytes([target & 0xFF, (target >> 8) & 0xFF, delta & 0xFF])


def deduplicate_samples(songs: List[Song]) -> BankData:
    """
    Collect the samples of all songs, dropping content duplicates.

    Args:
        songs: Parsed songs, in output order

    Returns:
        BankData holding the songs and the unique samples
    """
    bank = BankData(songs=list(songs))
    seen: Dict[Tuple[int, bytes], ConvertedSample] = {}

    for song in songs:
        for sample in song.samples:
            key = sample.content_key()
            if key not in seen:
                seen[key] = sample
                bank.samples.append(sample)

    logger.info(
        "%d songs share %d unique samples (%d bytes)",
        len(bank.songs),
        len(bank.samples),
        bank.sample_bytes,
    )
    return bank


@dataclass
class EncodeStats:
    """Counters collected while encoding."""

    frames: int = 0
    frame_references: int = 0
    wavetable_references: int = 0
    bank_switches: int = 0
    sample_bytes: int = 0


class SongEncoder:
    """
    Encoder for a batch of songs.

    Example:
        bank = deduplicate_samples(songs)
        data = SongEncoder(CompilerConfig()).to_bytes(bank)
    """

    def __init__(self, config: Optional[CompilerConfig] = None):
        self.config = config or CompilerConfig()
        self.stats = EncodeStats()
        self._buffer: bytearray = bytearray()
        self._frame_cache: Dict[Tuple, int] = {}
        self._wavetable_cache: Dict[bytes, int] = {}

    @property
    def position(self) -> int:
        return len(self._buffer)

    def to_bytes(self, bank: BankData) -> bytes:
        """
        Encode a batch of songs.

        Args:
            bank: Songs and deduplicated samples

        Returns:
            Pointer table, sample data and song bytecode
        """
        self._buffer = bytearray()
        self.stats = EncodeStats()
        self._reset_caches()

        # Song pointers are patched once each song is placed
        self._buffer += bytes(POINTER_SIZE * len(bank.songs))
        if self.config.build_image:
            self._buffer += TEST_MARKER

        if not self.config.disable_pcm:
            self._place_samples(bank)

        for index, song in enumerate(bank.songs):
            self._encode_song(index, song)

        return bytes(self._buffer)

    # ------------------------------------------------------------------
    # Samples
    # ------------------------------------------------------------------

    def _place_samples(self, bank: BankData) -> None:
        placed: Dict[bytes, int] = {}
        canonical: Dict[Tuple[int, bytes], ConvertedSample] = {}

        for sample in bank.samples:
            canonical[sample.content_key()] = sample

            if sample.data in placed:
                sample.file_position = placed[sample.data]
                logger.debug("Sample reuses data at 0x%X", sample.file_position)
                continue

            end = self.position + len(sample.data)
            if end > BANK_SIZE:
                raise SampleBankOverflow(end)

            sample.file_position = self.position
            placed[sample.data] = self.position
            self._buffer += sample.data
            self.stats.sample_bytes += len(sample.data)
            logger.debug(
                "Sample placed at 0x%X: %d bytes at %d Hz",
                sample.file_position,
                len(sample.data),
                sample.frequency,
            )

        # Duplicates dropped from the bank share their canonical position
        for song in bank.songs:
            for sample in song.samples:
                sample.file_position = canonical[sample.content_key()].file_position

    # ------------------------------------------------------------------
    # Songs
    # ------------------------------------------------------------------

    def _reset_caches(self) -> None:
        self._frame_cache = {}
        self._wavetable_cache = {}

    def _ensure_room(self, size: int) -> bool:
        """
        Switch to the next bank unless `size` bytes plus a switch marker fit.

        Returns:
            True if a bank switch was written
        """
        position = self.position
        if position >> 16 == (position + size + 1) >> 16:
            return False

        self._buffer.append(OP_BANK_SWITCH)
        padding = -self.position % BANK_SIZE
        self._buffer += bytes([BANK_FILL]) * padding
        self._reset_caches()
        self.stats.bank_switches += 1
        logger.info("Bank switch at 0x%X", position)
        return True

    def _emit_command(self, command: Command) -> None:
        data = self.encode_command(command)
        if self._ensure_room(len(data)):
            # References cannot reach into the previous bank
            data = self.encode_command(command)
        if isinstance(command, WriteMemory) and data[0] >= OP_WAVETABLE_REFERENCE:
            self.stats.wavetable_references += 1
        self._buffer += data

    def _encode_song(self, index: int, song: Song) -> None:
        start = self.position
        loop_position = start
        pointer = POINTER_SIZE * index
        self._buffer[pointer : pointer + POINTER_SIZE] = bank_position(0, start)

        for frame in song.frames:
            if frame.loop_frame:
                loop_position = self.position
            self._encode_frame(frame)

        self._ensure_room(1 + POINTER_SIZE)
        end = self.position
        self._buffer.append(OP_END)
        self._buffer += bank_position(end, loop_position)

        logger.info(
            "Song %d (%s): %d frames, 0x%X-0x%X",
            index,
            song.name or "unnamed",
            len(song.frames),
            start,
            self.position,
        )

    def _encode_frame(self, frame: CommandFrame) -> None:
        self.stats.frames += 1

        if self.config.emit_frame_references:
            key = frame.key()
            # A bank switch empties the cache, so the frame is emitted in full
            if key in self._frame_cache and not self._ensure_room(3):
                target = self._frame_cache[key]
                self._buffer += bytes([OP_FRAME_REFERENCE, target & 0xFF, (target >> 8) & 0xFF])
                self.stats.frame_references += 1
                return
            # Only wait-terminated frames tell the player where to return
            if frame.ends_with_wait:
                frame.position = self.position
                self._frame_cache[key] = frame.position
        else:
            frame.position = self.position

        for command in frame.commands:
            self._emit_command(command)

    def encode_command(self, command: Command) -> bytes:
        """
        Encode a single command at the current position.

        Args:
            command: Command to encode

        Returns:
            Bytecode for the command

        Raises:
            UnknownCommandShape: The command has no bytecode form
        """
        if isinstance(command, WritePort):
            if command.address + len(command.data) > PORT_ADDRESS_LIMIT:
                raise UnknownCommandShape(command)
            if len(command.data) == 1:
                return bytes([OP_WRITE_PORT_1 + command.address]) + command.data
            if len(command.data) == 2:
                return bytes([OP_WRITE_PORT_2 + command.address]) + command.data
            raise UnknownCommandShape(command)

        if isinstance(command, WriteMemory):
            return self._encode_memory(command)

        if isinstance(command, Wait):
            return self._encode_wait(command.ticks)

        if isinstance(command, PlaySample):
            return self._encode_sample(command)

        raise UnknownCommandShape(command)

    def _encode_memory(self, command: WriteMemory) -> bytes:
        if (
            self.config.emit_wavetable_references
            and command.is_wavetable
            and self.position & 0xFFFF < WAVETABLE_CACHE_LIMIT
        ):
            key = bytes(command.data)
            target = self._wavetable_cache.get(key)
            if target is not None:
                return bytes(
                    [OP_WAVETABLE_REFERENCE + (command.address >> 4), target & 0xFF, target >> 8]
                )
            # Data follows the address and length bytes
            self._wavetable_cache[key] = (self.position + 2) & 0xFFFF

        return bytes([command.address, len(command.data)]) + command.data

    @staticmethod
    def _encode_wait(ticks: int) -> bytes:
        if ticks >= 256:
            return bytes([OP_WAIT_WORD, ticks & 0xFF, (ticks >> 8) & 0xFF])
        if ticks > 7:
            return bytes([OP_WAIT_BYTE, ticks])
        if ticks > 0:
            return bytes([OP_SHORT_WAIT + ticks])
        return b""

    @staticmethod
    def _encode_sample(command: PlaySample) -> bytes:
        if command.sample is None:
            return bytes([OP_SAMPLE, 0x00])

        sample = command.sample
        if sample.frequency not in FREQUENCY_CLASS:
            raise UnknownFrequencyClass(sample.frequency)

        ctrl = SAMPLE_ACTIVE | FREQUENCY_CLASS[sample.frequency]
        position = ((sample.file_position or 0) + command.offset) & 0xFFFF
        length = (command.length or len(sample.data)) & 0xFFFF

        if command.reverse:
            position = (position + length - 1) & 0xFFFF
            ctrl |= SAMPLE_REVERSE
        if command.repeat:
            ctrl |= SAMPLE_REPEAT

        return bytes(
            [
                OP_SAMPLE,
                ctrl,
                position & 0xFF,
                position >> 8,
                length & 0xFF,
                length >> 8,
            ]
        )
