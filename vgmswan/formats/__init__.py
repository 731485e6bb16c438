"""Format handlers for VGM capture logs and WonderSwan sequencer data."""

from vgmswan.formats.swan import ImageAssembler, SongEncoder
from vgmswan.formats.vgm import VGMHeaderReader, VGMReader

__all__ = ["ImageAssembler", "SongEncoder", "VGMHeaderReader", "VGMReader"]
