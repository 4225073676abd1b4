#!/usr/bin/env python3
"""
StreamVerse Application Package Initialization

This package contains the StreamVerse channel directory and playback routing
components. It exports the version identifier for the application.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# hold the version of the application
__version__ = "1.0.0"
