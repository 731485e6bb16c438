"""Tests for sample rate conversion."""

import pytest

from vgmswan.config import CompilerConfig
from vgmswan.converters.sample_converter import (
    SampleConverter,
    bucket_frequency,
    resample_pcm,
    resample_target,
)
from vgmswan.errors import InvalidSampleFrequency
from vgmswan.models.sample import RawSampleBlock


class TestRateSelection:
    """Test rate buckets and resampling targets."""

    @pytest.mark.parametrize(
        "frequency,expected",
        [
            (0, 4000),
            (4000, 4000),
            (4800, 4000),
            (4801, 6000),
            (8000, 6000),
            (8001, 12000),
            (16000, 12000),
            (22050, 12000),
        ],
    )
    def test_bucket(self, frequency, expected):
        assert bucket_frequency(frequency) == expected

    @pytest.mark.parametrize(
        "frequency,expected",
        [(16000, 12000), (16001, 24000), (44100, 24000), (8000, 6000)],
    )
    def test_bucket_24khz(self, frequency, expected):
        assert bucket_frequency(frequency, enable_24khz=True) == expected

    @pytest.mark.parametrize(
        "frequency,expected",
        [(4000, 4000), (4500, 4000), (4501, 6000), (7000, 6000), (7001, 12000), (24000, 12000)],
    )
    def test_resample_target(self, frequency, expected):
        assert resample_target(frequency) == expected


class TestResamplePCM:
    """Test the resampler itself."""

    @pytest.mark.parametrize(
        "length,source,target,expected",
        [
            (800, 8000, 12000, 1200),
            (1000, 7000, 6000, 857),
            (441, 44100, 12000, 120),
            (3, 44100, 4000, 0),
        ],
    )
    def test_output_length(self, length, source, target, expected):
        assert len(resample_pcm(b"\x80" * length, source, target)) == expected

    def test_empty(self):
        assert resample_pcm(b"", 8000, 12000) == b""

    def test_silence_stays_centered(self):
        out = resample_pcm(b"\x80" * 400, 8000, 4000)
        assert all(127 <= b <= 128 for b in out[10:-10])

    def test_output_is_unsigned_bytes(self):
        pcm = bytes([0x00, 0xFF] * 200)
        out = resample_pcm(pcm, 8000, 6000)
        assert isinstance(out, bytes)
        assert len(out) == 300


class TestSampleConverter:
    """Test conversion caching."""

    BLOCK = RawSampleBlock(data=bytes(range(256)), offset=0)

    def test_bucket_mode_keeps_bytes(self):
        converter = SampleConverter(CompilerConfig(disable_resampling=True))
        sample, is_new = converter.convert(0, 7000, self.BLOCK)

        assert is_new
        assert sample.data == self.BLOCK.data
        assert sample.frequency == 6000

    def test_bucket_mode_shares_bucket(self):
        converter = SampleConverter(CompilerConfig(disable_resampling=True))
        first, _ = converter.convert(0, 7000, self.BLOCK)
        second, is_new = converter.convert(0, 7500, self.BLOCK)

        assert second is first
        assert not is_new
        assert len(converter) == 1

    def test_resample_mode_keys_on_source_rate(self):
        converter = SampleConverter(CompilerConfig())
        first, _ = converter.convert(0, 7000, self.BLOCK)
        second, is_new = converter.convert(0, 7500, self.BLOCK)

        assert second is not first
        assert is_new
        assert len(first.data) == 256 * 6000 // 7000
        assert len(second.data) == 256 * 12000 // 7500

    def test_cache_hit(self):
        converter = SampleConverter(CompilerConfig())
        first, _ = converter.convert(3, 8000, self.BLOCK)
        second, is_new = converter.convert(3, 8000, self.BLOCK)
        assert second is first
        assert not is_new

    def test_blocks_cached_separately(self):
        converter = SampleConverter(CompilerConfig(disable_resampling=True))
        first, _ = converter.convert(0, 8000, self.BLOCK)
        second, is_new = converter.convert(1, 8000, self.BLOCK)
        assert second is not first
        assert is_new

    def test_zero_frequency(self):
        converter = SampleConverter(CompilerConfig())
        with pytest.raises(InvalidSampleFrequency):
            converter.convert(0, 0, self.BLOCK)
