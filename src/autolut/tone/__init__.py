"""Tone profiles and tone transfer tables."""

from autolut.tone.profile import (
    ChannelTone,
    ChannelToneDetailed,
    ToneProfile,
    ToneProfileDetailed,
    create_detailed_transfer_lut,
    create_transfer_lut,
)

__all__ = [
    "ChannelTone",
    "ChannelToneDetailed",
    "ToneProfile",
    "ToneProfileDetailed",
    "create_transfer_lut",
    "create_detailed_transfer_lut",
]
