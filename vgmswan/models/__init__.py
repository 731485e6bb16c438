"""Data models for the command intermediate representation."""

from vgmswan.models.commands import Command, Jump, PlaySample, Wait, WriteMemory, WritePort
from vgmswan.models.sample import SAMPLE_RATES, ConvertedSample, DacStream, RawSampleBlock
from vgmswan.models.song import BankData, CommandFrame, Song

__all__ = [
    "Command",
    "Jump",
    "PlaySample",
    "Wait",
    "WriteMemory",
    "WritePort",
    "SAMPLE_RATES",
    "ConvertedSample",
    "DacStream",
    "RawSampleBlock",
    "BankData",
    "CommandFrame",
    "Song",
]
