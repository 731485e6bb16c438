"""
VGM file reader.

Reads .vgm / .vgz capture logs and parses them into Song objects.
"""

import gzip
import io
import logging
import zlib
from pathlib import Path
from typing import Optional, Union

from vgmswan.config import CompilerConfig
from vgmswan.errors import CorruptCompressedFile, UnsupportedSongFile
from vgmswan.formats.vgm.header import VGM_MAGIC, VGMHeader, VGMHeaderReader
from vgmswan.formats.vgm.parser import VGMCommandParser
from vgmswan.models.song import Song

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"


def decompress_if_needed(data: bytes) -> bytes:
    """
    Inflate gzip-compressed (.vgz) data, return anything else unchanged.

    Raises:
        CorruptCompressedFile: The gzip stream is truncated or damaged
    """
    if data[:2] != GZIP_MAGIC:
        return data
    try:
        return gzip.decompress(data)
    except (EOFError, zlib.error, gzip.BadGzipFile) as e:
        raise CorruptCompressedFile(str(e) or type(e).__name__) from e


class VGMReader:
    """
    Reader for WonderSwan VGM capture logs.

    Example:
        song = VGMReader.read("stage1.vgz", CompilerConfig())
        print(f"{len(song.frames)} frames, {len(song.samples)} samples")
    """

    def __init__(self, config: Optional[CompilerConfig] = None):
        self.config = config or CompilerConfig()
        self.header: Optional[VGMHeader] = None
        self.parser: Optional[VGMCommandParser] = None

    @classmethod
    def read(cls, filepath: Union[str, Path], config: Optional[CompilerConfig] = None) -> Song:
        """
        Read a capture log and return a Song.

        Args:
            filepath: Path to .vgm or .vgz file
            config: Compiler options

        Returns:
            Parsed Song
        """
        reader = cls(config)
        return reader.parse_file(filepath)

    def parse_file(self, filepath: Union[str, Path]) -> Song:
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")

        with open(filepath, "rb") as f:
            data = f.read()

        logger.info("Parsing %s", filepath)
        song = self.parse_bytes(data)
        song.name = filepath.name
        return song

    def parse_bytes(self, data: bytes) -> Song:
        """
        Parse a capture log from bytes.

        Args:
            data: Raw (optionally gzip-compressed) file contents

        Returns:
            Parsed Song

        Raises:
            UnsupportedSongFile: The log has no WonderSwan clock
        """
        stream = io.BytesIO(decompress_if_needed(data))

        self.header = VGMHeaderReader.read(stream)
        if self.header.clock_wonderswan == 0:
            raise UnsupportedSongFile()

        self.parser = VGMCommandParser(self.config)
        return self.parser.parse(stream, self.header)

    @classmethod
    def read_header(cls, filepath: Union[str, Path]) -> VGMHeader:
        """Read only the header of a capture log."""
        with open(filepath, "rb") as f:
            data = decompress_if_needed(f.read())
        return VGMHeaderReader.read(io.BytesIO(data))

    @classmethod
    def can_read(cls, filepath: Union[str, Path]) -> bool:
        """
        Check if a file looks like a capture log.

        Args:
            filepath: Path to check

        Returns:
            True if the file starts with the VGM magic
        """
        filepath = Path(filepath)

        if not filepath.exists():
            return False

        try:
            with open(filepath, "rb") as f:
                data = f.read()
            return decompress_if_needed(data)[:4] == VGM_MAGIC
        except (OSError, CorruptCompressedFile):
            return False

