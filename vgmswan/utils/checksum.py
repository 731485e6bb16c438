"""
16-bit additive checksum used by the WonderSwan cartridge header.

The checksum is the sum of every byte of the image except the two
checksum bytes themselves, truncated to 16 bits.
"""

from typing import Union


def additive_checksum(data: Union[bytes, bytearray], initial: int = 0) -> int:
    """
    Add the bytes of `data` to a running 16-bit checksum.

    Args:
        data: Bytes to add
        initial: Running checksum so far

    Returns:
        Updated checksum (0-0xFFFF)
    """
    return (initial + sum(data)) & 0xFFFF


def fill_checksum(count: int, value: int, initial: int = 0) -> int:
    """Add `count` copies of the byte `value` to a running checksum."""
    return (initial + count * value) & 0xFFFF


def verify_image_checksum(image: Union[bytes, bytearray]) -> bool:
    """
    Verify the checksum stored in the last two bytes of an image.

    Args:
        image: Complete cartridge image

    Returns:
        True if the stored checksum matches
    """
    if len(image) < 2:
        return False
    stored = image[-2] | (image[-1] << 8)
    return additive_checksum(image[:-2]) == stored
