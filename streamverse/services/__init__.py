#!/usr/bin/env python3
"""
Services Package Initialization

This package contains all service layer components for StreamVerse.
It exports playlist parsing, filtering, catalog merging, source resolution
and playback session management.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""
from .playlist_parser import PlaylistParser, parse_playlist
from .channel_filter import ChannelFilter
from .catalog_merger import CatalogMerger, Directory, by_category, search, find_alternatives
from .source_resolver import SourceResolver
from .engines import MediaSink, SegmentedStreamEngine, PeerSwarmEngine, Swarm, SwarmFile
from .playback_session import PlaybackSessionManager

# hold the necessary modules
__all__ = [
    "PlaylistParser",
    "parse_playlist",
    "ChannelFilter",
    "CatalogMerger",
    "Directory",
    "by_category",
    "search",
    "find_alternatives",
    "SourceResolver",
    "MediaSink",
    "SegmentedStreamEngine",
    "PeerSwarmEngine",
    "Swarm",
    "SwarmFile",
    "PlaybackSessionManager",
]
