"""Sample conversion."""

from vgmswan.converters.sample_converter import (
    SampleConverter,
    bucket_frequency,
    resample_pcm,
    resample_target,
)

__all__ = ["SampleConverter", "bucket_frequency", "resample_pcm", "resample_target"]
