"""Utility functions for vgmswan."""

from vgmswan.utils.checksum import additive_checksum, fill_checksum, verify_image_checksum

__all__ = ["additive_checksum", "fill_checksum", "verify_image_checksum"]
