"""
Error types raised while compiling capture logs.

Every error aborts the whole batch; there is no partial output.
"""

from typing import Optional


class VGMSwanError(Exception):
    """Base class for all compiler errors."""

    pass


# -- capture log parsing -----------------------------------------------------


class VGMParseError(VGMSwanError):
    """The capture log cannot be interpreted safely."""

    pass


class InvalidHeader(VGMParseError):
    """The file does not start with the capture log magic."""

    def __init__(self, magic: bytes):
        self.magic = magic
        super().__init__(f"Invalid VGM header: bad magic {magic!r}")


class CorruptCompressedFile(VGMParseError):
    """A gzip-compressed capture log that cannot be inflated."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Corrupt compressed VGM file: {reason}")


class UnsupportedVersion(VGMParseError):
    """The header version is outside the supported range."""

    def __init__(self, version: int):
        self.version = version
        super().__init__(f"Unsupported VGM version: 0x{version:03X}")


class UnsupportedSongFile(VGMParseError):
    """The capture log does not target the WonderSwan sound chip."""

    def __init__(self, reason: str = "no WonderSwan clock in header"):
        super().__init__(f"Unsupported song file: {reason}")


class TruncatedStream(VGMParseError):
    """The command stream ended in the middle of a command."""

    def __init__(self, position: int, needed: int):
        self.position = position
        self.needed = needed
        super().__init__(f"Unexpected end of data at 0x{position:X} (needed {needed} bytes)")


class UnknownCommand(VGMParseError):
    """An opcode that this compiler does not handle."""

    def __init__(self, opcode: int, position: int):
        self.opcode = opcode
        self.position = position
        super().__init__(f"Unknown command {opcode:02X} at 0x{position:X}")


class UnsupportedMemoryAddress(VGMParseError):
    """A chip memory write outside the wavetable area."""

    def __init__(self, address: int):
        self.address = address
        super().__init__(f"Unsupported WonderSwan memory address: {address:04X}")


class UnsupportedPortAddress(VGMParseError):
    """A chip I/O write outside the sound port range."""

    def __init__(self, address: int):
        self.address = address
        super().__init__(f"Unsupported WonderSwan port address: {address:02X}")


class SampleRangeNotFound(VGMParseError):
    """No uploaded PCM block covers the requested offset range."""

    def __init__(self, offset: int, length: int):
        self.offset = offset
        self.length = length
        super().__init__(f"Could not find sample data for offset {offset} (length {length})")


class MissingSampleBlock(VGMParseError):
    """A block-indexed stream start refers to a block that was never uploaded."""

    def __init__(self, block_id: int):
        self.block_id = block_id
        super().__init__(f"Missing PCM data block {block_id}")


class InvalidSampleFrequency(VGMParseError):
    """A stream was started before a usable playback frequency was set."""

    def __init__(self, frequency: int, stream_id: Optional[int] = None):
        self.frequency = frequency
        self.stream_id = stream_id
        where = f" on stream {stream_id}" if stream_id is not None else ""
        super().__init__(f"Cannot resample from {frequency} Hz{where}")


# -- bytecode encoding -------------------------------------------------------


class EncodeError(VGMSwanError):
    """The intermediate representation cannot be encoded."""

    pass


class SampleBankOverflow(EncodeError):
    """Sample data does not fit into the first 64KB bank."""

    def __init__(self, end_position: int):
        self.end_position = end_position
        super().__init__(f"Sample data bank too big: ends at 0x{end_position:X}")


class UnknownFrequencyClass(EncodeError):
    """A converted sample has a rate the player cannot play."""

    def __init__(self, frequency: int):
        self.frequency = frequency
        super().__init__(f"Unknown sample frequency {frequency}")


class UnknownCommandShape(EncodeError):
    """A command that has no bytecode form."""

    def __init__(self, command: object):
        self.command = command
        super().__init__(f"Unknown command shape {command!r}")


# -- image assembly ----------------------------------------------------------


class ImageError(VGMSwanError):
    """The flashable image cannot be built."""

    pass


class ImageTooLarge(ImageError):
    """Song data plus firmware exceed the largest supported image."""

    def __init__(self, size: int):
        self.size = size
        super().__init__(f"Image too large: {size} bytes")


class InvalidFirmwareAsset(ImageError):
    """The firmware asset is too short for its patch sites."""

    def __init__(self, size: int):
        self.size = size
        super().__init__(f"Invalid firmware asset: {size} bytes")
