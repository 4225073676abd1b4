#!/usr/bin/env python3
"""
Core Package Initialization

This package contains the core components for StreamVerse.
It exports the main StreamVerse class for application use.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""
from .streamverse import StreamVerse

__all__ = ["StreamVerse"]
