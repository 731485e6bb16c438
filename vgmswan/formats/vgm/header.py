"""
VGM header reader.

VGM header layout (little-endian, 0xE4 bytes at version 1.71):
    Offset  Size    Description
    0x00    4       Magic "Vgm "
    0x04    4       EOF offset (relative)
    0x08    4       Version (BCD, e.g. 0x171)
    0x0C    4       SN76489 clock
    0x1C    4       Loop offset (relative to 0x1C)
    0x34    4       Data offset (relative to 0x34, 1.50+)
    0xBC    4       Extra header offset (relative to 0xBC, 1.70+)
    0xC0    4       WonderSwan clock (1.71+)

Older versions declare shorter headers; fields past the declared length
read as zero.
"""

import io
import logging
import struct
from dataclasses import dataclass, fields
from typing import BinaryIO, List, Tuple

from vgmswan.errors import InvalidHeader, UnsupportedVersion

logger = logging.getLogger(__name__)

VGM_MAGIC = b"Vgm "
VGM_MIN_VERSION = 0x100
VGM_MAX_VERSION = 0x171
VGM_SAMPLES_PER_SECOND = 44100

# Anchors that relative offsets are measured from
LOOP_OFFSET_ANCHOR = 0x1C
DATA_OFFSET_ANCHOR = 0x34
EXTRA_HEADER_ANCHOR = 0xBC

# Data offset for files that predate the data offset field
LEGACY_DATA_OFFSET = 0x40

# (minimum version, header length), highest band first
HEADER_BANDS: List[Tuple[int, int]] = [
    (0x171, 0xE4),
    (0x170, 0xC0),
    (0x161, 0xB8),
    (0x151, 0x80),
    (0x150, 0x38),
    (0x110, 0x34),
    (0x101, 0x28),
]
LEGACY_HEADER_LENGTH = 0x24

# Field name and struct code, in file order
HEADER_FIELDS: List[Tuple[str, str]] = [
    ("magic", "4s"),
    ("eof_offset", "I"),
    ("version", "I"),
    ("clock_sn76489", "I"),
    ("clock_ym2413", "I"),
    ("gd3_offset", "I"),
    ("sample_count", "I"),
    ("loop_offset", "I"),
    ("loop_sample_count", "I"),
    ("rate", "I"),
    ("feedback_sn76489", "H"),
    ("shift_register_width_sn76489", "B"),
    ("flags_sn76489", "B"),
    ("clock_ym2612", "I"),
    ("clock_ym2151", "I"),
    ("data_offset", "I"),
    ("clock_sega_pcm", "I"),
    ("interface_register_sega_pcm", "I"),
    ("clock_rf5c68", "I"),
    ("clock_ym2203", "I"),
    ("clock_ym2608", "I"),
    ("clock_ym2610", "I"),
    ("clock_ym3812", "I"),
    ("clock_ym3526", "I"),
    ("clock_y8950", "I"),
    ("clock_ymf262", "I"),
    ("clock_ymf278b", "I"),
    ("clock_ymf271", "I"),
    ("clock_ymz280b", "I"),
    ("clock_rf5c164", "I"),
    ("clock_pwm", "I"),
    ("clock_ay8910", "I"),
    ("type_ay8910", "B"),
    ("flags_ay8910", "B"),
    ("flags_ay8910_ym2203", "B"),
    ("flags_ay8910_ym2608", "B"),
    ("volume_modifier", "B"),
    ("_reserved_7d", "B"),
    ("loop_base", "B"),
    ("loop_modifier", "B"),
    ("clock_dmg", "I"),
    ("clock_n2a03", "I"),
    ("clock_multi_pcm", "I"),
    ("clock_upd7759", "I"),
    ("clock_okim6258", "I"),
    ("flags_okim6258", "B"),
    ("flags_k054539", "B"),
    ("chip_type_c140", "B"),
    ("_reserved_97", "B"),
    ("clock_okim6295", "I"),
    ("clock_k051649", "I"),
    ("clock_k054539", "I"),
    ("clock_huc6280", "I"),
    ("clock_c140", "I"),
    ("clock_k053260", "I"),
    ("clock_pokey", "I"),
    ("clock_qsound", "I"),
    ("clock_scsp", "I"),
    ("extra_header_offset", "I"),
    ("clock_wonderswan", "I"),
    ("clock_vsu", "I"),
    ("clock_saa1099", "I"),
    ("clock_es5503", "I"),
    ("clock_es5505", "I"),
    ("output_channels_es5503", "B"),
    ("output_channels_es5505", "B"),
    ("clock_divider_c352", "B"),
    ("_reserved_d7", "B"),
    ("clock_x1010", "I"),
    ("clock_c352", "I"),
    ("clock_ga20", "I"),
]

HEADER_FORMAT = "<" + "".join(code for _, code in HEADER_FIELDS)
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)


def _field_offsets() -> dict:
    offsets = {}
    position = 0
    for name, code in HEADER_FIELDS:
        offsets[name] = position
        position += struct.calcsize("<" + code)
    return offsets


FIELD_OFFSETS = _field_offsets()


@dataclass
class VGMHeader:
    """
    Normalized VGM header.

    All offsets are absolute file positions. A loop_offset of 0 means the
    song does not loop.
    """

    magic: bytes
    eof_offset: int
    version: int
    clock_sn76489: int
    clock_ym2413: int
    gd3_offset: int
    sample_count: int
    loop_offset: int
    loop_sample_count: int
    rate: int
    feedback_sn76489: int
    shift_register_width_sn76489: int
    flags_sn76489: int
    clock_ym2612: int
    clock_ym2151: int
    data_offset: int
    clock_sega_pcm: int
    interface_register_sega_pcm: int
    clock_rf5c68: int
    clock_ym2203: int
    clock_ym2608: int
    clock_ym2610: int
    clock_ym3812: int
    clock_ym3526: int
    clock_y8950: int
    clock_ymf262: int
    clock_ymf278b: int
    clock_ymf271: int
    clock_ymz280b: int
    clock_rf5c164: int
    clock_pwm: int
    clock_ay8910: int
    type_ay8910: int
    flags_ay8910: int
    flags_ay8910_ym2203: int
    flags_ay8910_ym2608: int
    volume_modifier: int
    _reserved_7d: int
    loop_base: int
    loop_modifier: int
    clock_dmg: int
    clock_n2a03: int
    clock_multi_pcm: int
    clock_upd7759: int
    clock_okim6258: int
    flags_okim6258: int
    flags_k054539: int
    chip_type_c140: int
    _reserved_97: int
    clock_okim6295: int
    clock_k051649: int
    clock_k054539: int
    clock_huc6280: int
    clock_c140: int
    clock_k053260: int
    clock_pokey: int
    clock_qsound: int
    clock_scsp: int
    extra_header_offset: int
    clock_wonderswan: int
    clock_vsu: int
    clock_saa1099: int
    clock_es5503: int
    clock_es5505: int
    output_channels_es5503: int
    output_channels_es5505: int
    clock_divider_c352: int
    _reserved_d7: int
    clock_x1010: int
    clock_c352: int
    clock_ga20: int
    header_length: int = LEGACY_HEADER_LENGTH

    @property
    def has_loop(self) -> bool:
        return self.loop_offset != 0

    @property
    def version_string(self) -> str:
        """Version in dotted form, e.g. "1.71"."""
        return f"{self.version >> 8:X}.{self.version & 0xFF:02X}"

    def is_valid(self) -> bool:
        return self.magic == VGM_MAGIC


def header_length_for_version(version: int) -> int:
    """
    Get the declared header length for a VGM version.

    Args:
        version: BCD version number (e.g. 0x150)

    Returns:
        Header length in bytes
    """
    for minimum, length in HEADER_BANDS:
        if version >= minimum:
            return length
    return LEGACY_HEADER_LENGTH


class VGMHeaderReader:
    """
    Reader for the versioned VGM header.

    Example:
        with open("song.vgm", "rb") as f:
            header = VGMHeaderReader.read(f)
        print(header.version_string, hex(header.data_offset))
    """

    @classmethod
    def read(cls, stream: BinaryIO) -> VGMHeader:
        """
        Read and normalize the header at the current stream position.

        Args:
            stream: Binary stream positioned at the start of the file

        Returns:
            Normalized VGMHeader

        Raises:
            InvalidHeader: Magic is missing
            UnsupportedVersion: Version outside 1.00 - 1.71
        """
        buffer = bytearray(HEADER_SIZE)

        legacy = stream.read(LEGACY_HEADER_LENGTH)
        buffer[: len(legacy)] = legacy

        magic = bytes(buffer[0:4])
        if magic != VGM_MAGIC:
            raise InvalidHeader(magic)

        version = struct.unpack_from("<I", buffer, 0x08)[0]
        if version < VGM_MIN_VERSION or version > VGM_MAX_VERSION:
            raise UnsupportedVersion(version)

        header_length = header_length_for_version(version)
        if header_length > LEGACY_HEADER_LENGTH:
            extra = stream.read(header_length - LEGACY_HEADER_LENGTH)
            buffer[LEGACY_HEADER_LENGTH : LEGACY_HEADER_LENGTH + len(extra)] = extra

        values = struct.unpack(HEADER_FORMAT, bytes(buffer))
        header = VGMHeader(*values, header_length=header_length)
        cls._normalize(header)

        logger.debug(
            "VGM %s header: %d bytes, data at 0x%X, loop at 0x%X",
            header.version_string,
            header_length,
            header.data_offset,
            header.loop_offset,
        )
        return header

    @classmethod
    def read_bytes(cls, data: bytes) -> VGMHeader:
        """Read the header from an in-memory capture log."""
        return cls.read(io.BytesIO(data))

    @staticmethod
    def _normalize(header: VGMHeader) -> None:
        """Convert relative offsets to absolute ones and clear unused fields."""
        version = header.version

        if header.loop_offset == 0xFFFFFFFF:
            header.loop_offset = 0
        elif header.loop_offset != 0:
            header.loop_offset += LOOP_OFFSET_ANCHOR

        if version < 0x150:
            header.data_offset = LEGACY_DATA_OFFSET
        else:
            header.data_offset += DATA_OFFSET_ANCHOR

        if version < 0x171:
            header.clock_scsp = 0
        if version < 0x160:
            header.volume_modifier = 0
            header.loop_base = 0
        if version < 0x151:
            header.flags_sn76489 = 0

        if version >= 0x170 and header.extra_header_offset != 0:
            header.extra_header_offset += EXTRA_HEADER_ANCHOR

        # Header bytes at or past the data start belong to the command stream
        limit = max(header.data_offset, DATA_OFFSET_ANCHOR + 4)
        if limit < header.header_length:
            for f in fields(header):
                offset = FIELD_OFFSETS.get(f.name)
                if offset is not None and offset >= limit:
                    setattr(header, f.name, 0)
