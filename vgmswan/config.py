"""
Compiler configuration.

A single immutable value carrying every switch that changes how capture
logs are parsed and encoded. It is built once (usually by the CLI) and
handed to the parser, the sample converter and the encoder.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CompilerConfig:
    """
    Options for one compile run.

    Attributes:
        disable_pcm: Drop all PCM playback commands and sample data
        disable_resampling: Relabel samples into the nearest rate bucket
            instead of resampling them
        enable_24khz_samples: Allow the 24000 Hz bucket when not resampling
        build_image: Produce a flashable image with the firmware appended
        emit_frame_references: Replace repeated frames by back-references
        emit_wavetable_references: Replace repeated 16-byte wavetable
            writes by back-references
        resample_quality: Kaiser window beta used by the resampler
    """

    disable_pcm: bool = False
    disable_resampling: bool = False
    enable_24khz_samples: bool = False
    build_image: bool = False
    emit_frame_references: bool = True
    emit_wavetable_references: bool = True
    resample_quality: float = 10.0
