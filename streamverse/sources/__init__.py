#!/usr/bin/env python3
"""
Sources Package Initialization

This package contains all channel source implementations for StreamVerse.
It exports the base class, the concrete M3U and Xtream sources, the
verified channel override loader and the channel validator.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the necessary imports
from .base import ChannelSource
from .xtream import XtreamSource
from .m3u import M3USource
from .verified import VerifiedChannelsSource
from .validator import ChannelValidator

# now hold the modules
__all__ = ["ChannelSource", "XtreamSource", "M3USource", "VerifiedChannelsSource", "ChannelValidator"]
