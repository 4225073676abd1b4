#!/usr/bin/env python3
"""
Models Package Initialization

This package contains all data model definitions for StreamVerse.
It exports the channel, playback and configuration models.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""
from .channel import Channel
from .playback import TransportKind, PlaybackState, PlaybackRequest, PlaybackHandle, PlaybackEvent
from .status import ChannelHealth, ChannelStatus, ValidationResult
from .config import SourceConfig, FilterConfig, ValidationConfig, AppConfig

# hold the necessary modules
__all__ = [
    "Channel",
    "TransportKind",
    "PlaybackState",
    "PlaybackRequest",
    "PlaybackHandle",
    "PlaybackEvent",
    "ChannelHealth",
    "ChannelStatus",
    "ValidationResult",
    "SourceConfig",
    "FilterConfig",
    "ValidationConfig",
    "AppConfig",
]
