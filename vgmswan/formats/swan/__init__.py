"""WonderSwan sequencer output handlers."""

from vgmswan.formats.swan.encoder import SongEncoder, bank_position, deduplicate_samples
from vgmswan.formats.swan.image import FirmwareAsset, ImageAssembler

__all__ = ["SongEncoder", "bank_position", "deduplicate_samples", "FirmwareAsset", "ImageAssembler"]
