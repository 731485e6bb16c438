"""
vgmswan - VGM to WonderSwan sequencer data compiler.

This library provides tools to:
- Read WonderSwan VGM capture logs (.vgm, .vgz)
- Convert PCM samples to the sequencer's playback rates
- Encode songs into banked sequencer bytecode
- Build flashable images with the sequencer firmware appended

Example usage:
    from vgmswan import CompilerConfig, compile_files

    result = compile_files(["title.vgm", "stage1.vgz"], CompilerConfig())
    with open("songs.bin", "wb") as f:
        f.write(result.data)
"""

__version__ = "2.0.0"
__author__ = "vgmswan Contributors"

from vgmswan.compiler import CompileResult, compile_files, compile_songs
from vgmswan.config import CompilerConfig
from vgmswan.errors import VGMSwanError
from vgmswan.formats.swan.encoder import SongEncoder
from vgmswan.formats.swan.image import FirmwareAsset, ImageAssembler
from vgmswan.formats.vgm.header import VGMHeader, VGMHeaderReader
from vgmswan.formats.vgm.reader import VGMReader
from vgmswan.models.song import BankData, CommandFrame, Song

__all__ = [
    "CompileResult",
    "compile_files",
    "compile_songs",
    "CompilerConfig",
    "VGMSwanError",
    "SongEncoder",
    "FirmwareAsset",
    "ImageAssembler",
    "VGMHeader",
    "VGMHeaderReader",
    "VGMReader",
    "BankData",
    "CommandFrame",
    "Song",
]
