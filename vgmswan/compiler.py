"""
Batch compiler: capture logs in, sequencer data (or a full image) out.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from vgmswan.config import CompilerConfig
from vgmswan.formats.swan.encoder import EncodeStats, SongEncoder, deduplicate_samples
from vgmswan.formats.swan.image import FirmwareAsset, ImageAssembler
from vgmswan.formats.vgm.reader import VGMReader
from vgmswan.models.song import BankData, Song

logger = logging.getLogger(__name__)


@dataclass
class CompileResult:
    """
    Output of a compile run.

    Attributes:
        data: Bytes to write (song data, or the full image)
        bank: Songs and deduplicated samples
        stats: Encoder counters
        song_data_size: Size of the song data before image padding
    """

    data: bytes
    bank: BankData
    stats: EncodeStats = field(default_factory=EncodeStats)
    song_data_size: int = 0


def compile_songs(
    songs: List[Song],
    config: Optional[CompilerConfig] = None,
    firmware: Optional[FirmwareAsset] = None,
) -> CompileResult:
    """
    Encode parsed songs, optionally into a flashable image.

    Args:
        songs: Parsed songs, in output order
        config: Compiler options
        firmware: Firmware asset, required when config.build_image is set

    Returns:
        CompileResult
    """
    config = config or CompilerConfig()
    if config.build_image and firmware is None:
        raise ValueError("A firmware asset is required to build an image")

    bank = deduplicate_samples(songs)
    encoder = SongEncoder(config)
    data = encoder.to_bytes(bank)
    song_data_size = len(data)

    if config.build_image:
        data = ImageAssembler(firmware).assemble(data)

    return CompileResult(data=data, bank=bank, stats=encoder.stats, song_data_size=song_data_size)


def compile_files(
    filepaths: Iterable[Union[str, Path]],
    config: Optional[CompilerConfig] = None,
    firmware: Optional[FirmwareAsset] = None,
) -> CompileResult:
    """
    Parse capture logs and compile them as one batch.

    Songs are emitted in the order of `filepaths`. Any error aborts the
    whole batch.

    Args:
        filepaths: Capture log paths
        config: Compiler options
        firmware: Firmware asset for image builds

    Returns:
        CompileResult
    """
    config = config or CompilerConfig()
    songs = [VGMReader.read(path, config) for path in filepaths]
    if not songs:
        raise ValueError("At least one song is required")
    return compile_songs(songs, config, firmware)
