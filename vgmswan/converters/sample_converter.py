"""
Sample rate conversion for PCM blocks.

The sequencer only plays samples at 4000, 6000, 12000 or 24000 Hz. Each
(block, source frequency) pair is converted once and cached, so repeated
stream starts share one ConvertedSample.
"""

import logging
from math import gcd
from typing import Dict, Tuple

import numpy as np
from scipy.signal import resample_poly

from vgmswan.config import CompilerConfig
from vgmswan.errors import InvalidSampleFrequency
from vgmswan.models.sample import ConvertedSample, RawSampleBlock

logger = logging.getLogger(__name__)


def bucket_frequency(frequency: int, enable_24khz: bool = False) -> int:
    """
    Pick the playback rate used when samples are not resampled.

    Args:
        frequency: Source playback frequency in Hz
        enable_24khz: Allow the 24000 Hz bucket

    Returns:
        One of 4000, 6000, 12000, 24000
    """
    if enable_24khz and frequency > 16000:
        return 24000
    if frequency <= 4800:
        return 4000
    if frequency <= 8000:
        return 6000
    return 12000


def resample_target(frequency: int) -> int:
    """Pick the rate a sample is resampled to."""
    if frequency <= 4500:
        return 4000
    if frequency <= 7000:
        return 6000
    return 12000


def resample_pcm(data: bytes, source_rate: int, target_rate: int, quality: float = 10.0) -> bytes:
    """
    Resample unsigned 8-bit PCM.

    Samples are centered with (byte - 127.5) / 127.5, filtered through a
    Kaiser-windowed polyphase resampler and quantized back to unsigned
    8-bit.

    Args:
        data: Unsigned 8-bit PCM
        source_rate: Rate of `data` in Hz
        target_rate: Output rate in Hz
        quality: Kaiser window beta

    Returns:
        floor(len(data) * target_rate / source_rate) bytes
    """
    out_length = (len(data) * target_rate) // source_rate
    if out_length == 0:
        return b""

    samples = (np.frombuffer(data, dtype=np.uint8).astype(np.float32) - 127.5) / 127.5

    divisor = gcd(target_rate, source_rate)
    up, down = target_rate // divisor, source_rate // divisor
    resampled = resample_poly(samples, up, down, window=("kaiser", quality))

    if len(resampled) < out_length:
        resampled = np.pad(resampled, (0, out_length - len(resampled)))
    resampled = resampled[:out_length]

    quantized = np.clip(resampled * 127.5 + 127.5, 0, 255).astype(np.uint8)
    return quantized.tobytes()


class SampleConverter:
    """
    Converts raw PCM blocks to playable samples, with caching.

    One converter is used per capture log, since block ids are only
    meaningful within one file.

    Example:
        converter = SampleConverter(CompilerConfig())
        sample, is_new = converter.convert(0, 8000, block)
    """

    def __init__(self, config: CompilerConfig):
        self.config = config
        self._cache: Dict[Tuple[int, int], ConvertedSample] = {}

    def __len__(self) -> int:
        return len(self._cache)

    def convert(
        self, block_id: int, frequency: int, block: RawSampleBlock
    ) -> Tuple[ConvertedSample, bool]:
        """
        Get the converted sample for a block played at a frequency.

        Args:
            block_id: Index of the block in the capture's block catalog
            frequency: Source playback frequency in Hz
            block: The raw block

        Returns:
            Tuple of (sample, is_new); is_new is False on a cache hit

        Raises:
            InvalidSampleFrequency: Resampling from a zero frequency
        """
        if self.config.disable_resampling:
            key = (block_id, bucket_frequency(frequency, self.config.enable_24khz_samples))
        else:
            key = (block_id, frequency)

        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Sample cache hit: block %d at %d Hz", block_id, frequency)
            return cached, False

        if self.config.disable_resampling:
            sample = ConvertedSample(data=block.data, frequency=key[1])
        else:
            if frequency <= 0:
                raise InvalidSampleFrequency(frequency)
            target = resample_target(frequency)
            data = resample_pcm(block.data, frequency, target, self.config.resample_quality)
            logger.info(
                "Resampled sample %d: %d Hz (%d bytes) to %d Hz (%d bytes)",
                block_id,
                frequency,
                len(block.data),
                target,
                len(data),
            )
            sample = ConvertedSample(data=data, frequency=target)

        self._cache[key] = sample
        return sample, True
