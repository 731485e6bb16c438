"""VGM capture log handlers."""

from vgmswan.formats.vgm.header import VGMHeader, VGMHeaderReader
from vgmswan.formats.vgm.parser import VGMCommandParser, samples_to_ticks
from vgmswan.formats.vgm.reader import VGMReader

__all__ = ["VGMHeader", "VGMHeaderReader", "VGMCommandParser", "VGMReader", "samples_to_ticks"]
