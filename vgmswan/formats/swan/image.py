"""
Flashable cartridge image assembly.

Image layout:
    ...         Song data (pointers, samples, bytecode)
    ...         0xFF padding up to the image size
    ...         Firmware asset, ending with the cartridge header

The firmware asset is opaque except for two patch sites, both counted
from its end:
    len - 6     ROM size class byte
    len - 2     16-bit additive checksum (little-endian)
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple, Union

from vgmswan.errors import ImageTooLarge, InvalidFirmwareAsset
from vgmswan.utils.checksum import additive_checksum, fill_checksum

logger = logging.getLogger(__name__)

# (image size, header size class), ascending
ROM_SIZES: List[Tuple[int, int]] = [
    (128 * 1024, 0),
    (256 * 1024, 1),
    (512 * 1024, 2),
    (1024 * 1024, 3),
    (2 * 1024 * 1024, 4),
    (4 * 1024 * 1024, 6),
    (8 * 1024 * 1024, 8),
    (16 * 1024 * 1024, 9),
]

PAD_BYTE = 0xFF


@dataclass(frozen=True)
class FirmwareAsset:
    """
    Sequencer firmware with its patch contract.

    Attributes:
        data: Firmware bytes, placed at the end of the image
        size_class_offset: Offset of the size class byte, from the end
        checksum_offset: Offset of the checksum word, from the end
    """

    data: bytes
    size_class_offset: int = 6
    checksum_offset: int = 2

    @classmethod
    def load(cls, filepath: Union[str, Path]) -> "FirmwareAsset":
        """Load firmware bytes from a file."""
        with open(filepath, "rb") as f:
            return cls(f.read())

    def validate(self) -> None:
        minimum = max(self.size_class_offset, self.checksum_offset)
        if len(self.data) < minimum or self.checksum_offset < 2:
            raise InvalidFirmwareAsset(len(self.data))


def select_rom_size(size: int) -> Tuple[int, int]:
    """
    Find the smallest image that holds `size` bytes.

    Args:
        size: Song data plus firmware size

    Returns:
        Tuple of (image size, size class)

    Raises:
        ImageTooLarge: No supported image is large enough
    """
    for rom_size, size_class in ROM_SIZES:
        if size <= rom_size:
            return rom_size, size_class
    raise ImageTooLarge(size)


class ImageAssembler:
    """
    Builds a flashable image from song data and firmware.

    Example:
        firmware = FirmwareAsset.load("engine.bin")
        image = ImageAssembler(firmware).assemble(song_data)
    """

    def __init__(self, firmware: FirmwareAsset):
        firmware.validate()
        self.firmware = firmware
        self.rom_size = 0
        self.size_class = 0
        self.checksum = 0

    def assemble(self, data: bytes) -> bytes:
        """
        Pad song data and append the patched firmware.

        Args:
            data: Encoded song data

        Returns:
            Complete image
        """
        firmware = bytearray(self.firmware.data)
        self.rom_size, self.size_class = select_rom_size(len(data) + len(firmware))

        checksum = additive_checksum(data)
        firmware[len(firmware) - self.firmware.size_class_offset] = self.size_class

        checksum_at = len(firmware) - self.firmware.checksum_offset
        checksum = additive_checksum(firmware[:checksum_at], checksum)
        checksum = additive_checksum(firmware[checksum_at + 2 :], checksum)

        padding = self.rom_size - len(firmware) - len(data)
        checksum = fill_checksum(padding, PAD_BYTE, checksum)

        firmware[checksum_at] = checksum & 0xFF
        firmware[checksum_at + 1] = checksum >> 8
        self.checksum = checksum

        logger.info(
            "Image: %d KB (size class %d), %d bytes padding, checksum %04X",
            self.rom_size // 1024,
            self.size_class,
            padding,
            checksum,
        )
        return bytes(data) + bytes([PAD_BYTE]) * padding + bytes(firmware)
