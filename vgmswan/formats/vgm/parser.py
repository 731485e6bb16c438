"""
VGM command stream parser.

Turns the command stream that follows the header into command frames for
the WonderSwan sequencer.

Handled opcodes:
    0x61 nn nn          Wait n samples
    0x62                Wait 735 samples (1/60 s)
    0x63                Wait 882 samples (1/50 s)
    0x66                End of sound data
    0x67 66 tt ss*4     PCM data block
    0x90 ii tt pp cc    DAC stream setup (control bytes)
    0x91 ii dd ll bb    DAC stream data (skipped)
    0x92 ii ff*4        DAC stream frequency
    0x93 ii oo*4 ff ll*4  Start stream at offset/length
    0x94 ii             Stop stream
    0x95 ii bb bb ff    Start stream from block
    0xBC aa dd          WonderSwan I/O port write
    0xC6 mm ll dd       WonderSwan memory write (address big-endian)
"""

import logging
import struct
from typing import BinaryIO, Dict, List, Optional

from vgmswan.config import CompilerConfig
from vgmswan.converters.sample_converter import SampleConverter
from vgmswan.errors import (
    MissingSampleBlock,
    SampleRangeNotFound,
    TruncatedStream,
    UnknownCommand,
    UnsupportedMemoryAddress,
    UnsupportedPortAddress,
)
from vgmswan.formats.vgm.header import VGMHeader
from vgmswan.models.commands import (
    MEMORY_ADDRESS_LIMIT,
    PORT_ADDRESS_LIMIT,
    Command,
    PlaySample,
    Wait,
    WriteMemory,
    WritePort,
)
from vgmswan.models.sample import ConvertedSample, DacStream, RawSampleBlock
from vgmswan.models.song import CommandFrame, Song

logger = logging.getLogger(__name__)

# Sequencer tick rate against the 44100 Hz sample clock
TICKS_PER_SECOND = 120

# I/O ports used by the sequencer for its own timer and interrupts
RESERVED_PORTS = (0x0F, 0x11)

# Sound control port and its bits
SOUND_CONTROL_PORT = 0x10
SOUND_CONTROL_CH2_ENABLE = 0x02
SOUND_CONTROL_CH2_VOICE = 0x20

# Start-stream length modes (flags & 0x03)
LENGTH_MODE_COMMANDS = 1
LENGTH_MODE_MSEC = 2
MSEC_LENGTH_FACTOR = 44


def samples_to_ticks(delta: int) -> int:
    """
    Convert a sample-position delta to sequencer ticks, rounding up.

    Args:
        delta: Samples at 44100 Hz

    Returns:
        Ticks at 120 Hz
    """
    return (delta * TICKS_PER_SECOND + 440) // 441


class VGMCommandParser:
    """
    State machine over the VGM command stream.

    The parser is single-use: create one per capture log.

    Example:
        parser = VGMCommandParser(CompilerConfig())
        song = parser.parse(stream, header)
    """

    def __init__(self, config: CompilerConfig):
        self.config = config
        self.converter = SampleConverter(config)
        self.blocks: List[RawSampleBlock] = []
        self.streams: Dict[int, DacStream] = {}

        self._stream: Optional[BinaryIO] = None
        self._song = Song()
        self._frame = CommandFrame()
        self._sample_offset = 0
        self._sample_pos = 0
        self._new_sample_pos = 0
        self._reset_requested = False

    # ------------------------------------------------------------------
    # Low level reads
    # ------------------------------------------------------------------

    def _read(self, fmt: str) -> tuple:
        size = struct.calcsize(fmt)
        position = self._stream.tell()
        data = self._stream.read(size)
        if len(data) < size:
            raise TruncatedStream(position, size)
        return struct.unpack(fmt, data)

    def _read_u8(self) -> int:
        return self._read("<B")[0]

    def _read_bytes(self, size: int) -> bytes:
        position = self._stream.tell()
        data = self._stream.read(size)
        if len(data) < size:
            raise TruncatedStream(position, size)
        return data

    def _skip(self, size: int) -> None:
        self._read_bytes(size)

    def _dac_stream(self, stream_id: int) -> DacStream:
        """Get the state for a stream id, creating it on first use."""
        stream = self.streams.get(stream_id)
        if stream is None:
            stream = DacStream()
            self.streams[stream_id] = stream
        return stream

    def _read_dac_stream(self) -> DacStream:
        return self._dac_stream(self._read_u8())

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse(self, stream: BinaryIO, header: VGMHeader) -> Song:
        """
        Parse the command stream of a capture log.

        Args:
            stream: Seekable binary stream over the whole file
            header: Header previously read from `stream`

        Returns:
            The parsed Song
        """
        self._stream = stream
        stream.seek(header.data_offset)

        running = True
        while running:
            position = stream.tell()
            if position == header.loop_offset:
                self._reset_requested = True
                self._song.loop_position = self._sample_pos
                self._frame.loop_frame = True

            opcode_data = stream.read(1)
            if not opcode_data:
                raise TruncatedStream(position, 1)
            opcode = opcode_data[0]

            if opcode == 0x66:
                running = False
            else:
                self._dispatch(opcode, position)

            self._advance()

        if self._frame.commands:
            self._song.frames.append(self._frame)
            self._frame = CommandFrame()

        logger.info(
            "Parsed %d frames, %d commands, %d PCM blocks, %d samples",
            len(self._song.frames),
            self._song.command_count,
            len(self.blocks),
            len(self._song.samples),
        )
        return self._song

    def _dispatch(self, opcode: int, position: int) -> None:
        if opcode == 0x61:
            self._new_sample_pos = self._sample_pos + self._read("<H")[0]
        elif opcode == 0x62:
            self._new_sample_pos = self._sample_pos + 735
        elif opcode == 0x63:
            self._new_sample_pos = self._sample_pos + 882
        elif opcode == 0x67:
            self._data_block()
        elif opcode == 0x90:
            stream = self._read_dac_stream()
            self._skip(1)  # chip type
            stream.ctrl_a, stream.ctrl_d = self._read("<BB")
        elif opcode == 0x91:
            # Stream data setup is not used by the sequencer
            self._skip(4)
        elif opcode == 0x92:
            stream = self._read_dac_stream()
            stream.frequency = self._read("<I")[0]
        elif opcode == 0x93:
            self._start_stream()
        elif opcode == 0x94:
            self._skip(1)
            if not self.config.disable_pcm:
                self._append(PlaySample())
            self._reset_requested = False
        elif opcode == 0x95:
            self._start_stream_block()
        elif opcode == 0xBC:
            self._write_port()
        elif opcode == 0xC6:
            self._write_memory()
        else:
            raise UnknownCommand(opcode, position)

    def _advance(self) -> None:
        """Close the current frame if the pending delay is at least one tick."""
        if self._new_sample_pos <= self._sample_pos:
            return

        ticks = samples_to_ticks(self._new_sample_pos - self._sample_pos)
        if ticks > 0:
            self._append(Wait(ticks))
            self._song.frames.append(self._frame)
            self._frame = CommandFrame()
        self._sample_pos = self._new_sample_pos

    def _append(self, command: Command) -> None:
        self._frame.commands.append(command)

    # ------------------------------------------------------------------
    # PCM
    # ------------------------------------------------------------------

    def _data_block(self) -> None:
        self._skip(1)  # 0x66 compatibility byte
        block_type, length = self._read("<BI")
        data = self._read_bytes(length)

        self.blocks.append(RawSampleBlock(data=data, offset=self._sample_offset, block_type=block_type))
        self._sample_offset += length
        logger.debug("PCM block %d: %d bytes", len(self.blocks) - 1, length)

    def _find_block(self, offset: int, length: int) -> int:
        for index, block in enumerate(self.blocks):
            if block.contains(offset, length):
                return index
        raise SampleRangeNotFound(offset, length)

    def _start_stream(self) -> None:
        stream = self._read_dac_stream()
        offset, flags, length = self._read("<IBI")

        if not self.config.disable_pcm:
            if flags & 0x03 == LENGTH_MODE_MSEC:
                length *= MSEC_LENGTH_FACTOR
            # LENGTH_MODE_COMMANDS is not supported and reads as raw bytes

            block_id = self._find_block(offset, length)
            block = self.blocks[block_id]
            sample = self._convert(block_id, stream)

            ratio = 1.0
            if not self.config.disable_resampling:
                ratio = sample.frequency / stream.frequency

            self._append(
                PlaySample(
                    sample=sample,
                    offset=int((offset - block.offset) * ratio) & 0xFFFF,
                    length=int(length * ratio) & 0xFFFF,
                    repeat=bool(flags & 0x80),
                    reverse=bool(flags & 0x10),
                )
            )
        self._reset_requested = True

    def _start_stream_block(self) -> None:
        stream = self._read_dac_stream()
        block_id, flags = self._read("<HB")

        if not self.config.disable_pcm:
            if block_id >= len(self.blocks):
                raise MissingSampleBlock(block_id)
            sample = self._convert(block_id, stream)
            self._append(
                PlaySample(
                    sample=sample,
                    repeat=bool(flags & 0x01),
                    reverse=bool(flags & 0x10),
                )
            )
        self._reset_requested = True

    def _convert(self, block_id: int, stream: DacStream) -> ConvertedSample:
        sample, is_new = self.converter.convert(block_id, stream.frequency, self.blocks[block_id])
        if is_new:
            self._song.samples.append(sample)
        return sample

    # ------------------------------------------------------------------
    # Chip writes
    # ------------------------------------------------------------------

    def _write_port(self) -> None:
        address, data = self._read("<BB")
        if address in RESERVED_PORTS:
            return
        if address >= PORT_ADDRESS_LIMIT:
            raise UnsupportedPortAddress(address)

        # Enabling channel 2 in wave mode halts DMA playback on hardware
        if (
            not self.config.disable_pcm
            and self._reset_requested
            and address == SOUND_CONTROL_PORT
            and data & SOUND_CONTROL_CH2_VOICE == 0
            and data & SOUND_CONTROL_CH2_ENABLE
        ):
            self._append(PlaySample())
            self._reset_requested = False

        last = self._frame.last_command
        if isinstance(last, WritePort) and len(last.data) == 1:
            if last.address == address + 1:
                last.data = bytes([data, last.data[0]])
                last.address = address
                return
            if last.address == address - 1:
                last.data = last.data + bytes([data])
                return

        self._append(WritePort(address=address, data=bytes([data])))

    def _write_memory(self) -> None:
        address, data = self._read(">HB")
        if address >= MEMORY_ADDRESS_LIMIT:
            raise UnsupportedMemoryAddress(address)

        last = self._frame.last_command
        if (
            isinstance(last, WriteMemory)
            and last.address == address - len(last.data)
            and address & 0x0F != 0
        ):
            last.data = last.data + bytes([data])
            return

        self._append(WriteMemory(address=address, data=bytes([data])))
