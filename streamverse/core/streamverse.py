#!/usr/bin/env python3
"""
StreamVerse Core Module

This module contains the main StreamVerse class that orchestrates the
channel directory: it manages the sources, refreshes them, applies the
filters and merges everything with the verified overrides.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import asyncio, logging, aiohttp
from typing import Callable, Dict, List, Optional
from streamverse.models import AppConfig, Channel, ValidationResult
from streamverse.services import (
    CatalogMerger,
    ChannelFilter,
    Directory,
    MediaSink,
    PeerSwarmEngine,
    PlaybackSessionManager,
    SegmentedStreamEngine,
    SourceResolver,
    find_alternatives
)
from streamverse.sources import ChannelSource, ChannelValidator, M3USource, XtreamSource, VerifiedChannelsSource

# setup the logger
logger = logging.getLogger(__name__)

# source types we know how to build
SOURCE_TYPES = {
    'm3u': M3USource,
    'xtream': XtreamSource,
}

"""
Main application orchestrator class

Coordinates the sources, filtering and merging into one directory.
"""
class StreamVerse:

    """
    Initialize StreamVerse
    Sets up all core components and prepares the application for operation.

    @param config: AppConfig Application configuration object
    """
    def __init__(self, config: AppConfig):

        # hold our class options
        self.config = config
        self.session: Optional[aiohttp.ClientSession] = None
        self.channel_filter = ChannelFilter(config.filters)
        self.merger = CatalogMerger()
        self.resolver = SourceResolver()
        self.sources: Dict[str, ChannelSource] = {}
        self.verified: Optional[VerifiedChannelsSource] = None
        self.validator: Optional[ChannelValidator] = None
        self.directory = Directory()
        self.refresh_task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    """
    Initialize the application
    Creates the HTTP session, sets up the sources, loads everything once and
    starts the background refresh task.

    @param start_refresh_loop: bool Start the background refresh task
    @return None
    """
    async def initialize(self, start_refresh_loop: bool = True):

        # setup the session
        timeout = aiohttp.ClientTimeout(total=120, connect=30)
        self.session = aiohttp.ClientSession(timeout=timeout)
        self.validator = ChannelValidator(self.session, self.config.validation)

        # loop over the sources
        for source_config in self.config.sources:

            # find the source class
            source_class = SOURCE_TYPES.get(source_config.type)
            if source_class is None:
                logger.warning(f"Unknown source type: {source_config.type}")
                continue

            # hold the source
            self.sources[source_config.name] = source_class(source_config, self.session)

        # the verified override list
        if self.config.verified_channels:
            self.verified = VerifiedChannelsSource(self.config.verified_channels, self.session)

        # load everything once, then keep it fresh
        await self.refresh_all_sources()
        if start_refresh_loop:
            self.refresh_task = asyncio.create_task(self._refresh_loop())

    """
    Cleanup resources
    Cancels the background task and closes the HTTP session.

    @return None
    """
    async def cleanup(self):

        # if this is a refresher task
        if self.refresh_task:

            # cancel it and wait for it to go away
            self.refresh_task.cancel()
            try:
                await self.refresh_task
            except asyncio.CancelledError:
                pass
            self.refresh_task = None

        # if we have a session... close it
        if self.session:
            await self.session.close()
            self.session = None

    """
    Background task to refresh sources
    Refreshes the sources that are due at the configured interval.

    @return None
    """
    async def _refresh_loop(self):

        # while we're still looping...
        while True:

            # try to refresh after the interval
            try:
                await asyncio.sleep(self.config.refresh_interval)
                await self.refresh_all_sources()

            # whoops, we are in a cancelation...
            except asyncio.CancelledError:
                break

            # whoopsie... there's an error in the loop
            except Exception as e:
                logger.error(f"Error in refresh loop: {e}")

    """
    Refresh all sources and rebuild the directory

    @param force: bool Refresh sources even if their interval has not elapsed
    @return Directory: The rebuilt directory
    """
    async def refresh_all_sources(self, force: bool = False) -> Directory:

        # setup the refresh tasks for the enabled sources
        tasks = [source.refresh_channels(force) for source in self.sources.values() if source.config.enabled]
        if self.verified is not None:
            tasks.append(self.verified.refresh())

        # gather up all tasks if there are any
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        # now rebuild the directory
        return await self.rebuild_directory()

    """
    Rebuild the directory from the current source channels
    Sources are folded in configuration order, overrides last.

    @return Directory: The rebuilt directory
    """
    async def rebuild_directory(self) -> Directory:

        # make sure we have a lock
        async with self._lock:

            # filter each enabled source
            sources = []
            for source in self.sources.values():
                if not source.config.enabled:
                    continue
                sources.append((source.label, self.channel_filter.apply(source.channels)))

            # merge with the overrides
            overrides = self.verified.channels if self.verified is not None else []
            self.directory = self.merger.merge(sources, overrides)

        # return it
        return self.directory

    """
    Find alternatives for a channel that failed to play

    @param channel: Channel The failed channel
    @param limit: int Maximum number of alternatives
    @return list: Alternative channels
    """
    def alternatives_for(self, channel: Channel, limit: int = 5) -> List[Channel]:
        return find_alternatives(self.directory, channel, limit, self.validator)

    """
    Create a playback session manager bound to this directory's resolver
    The caller owns the returned manager and its transport collaborators.

    @return PlaybackSessionManager: A new session manager
    """
    def create_player(
        self,
        segmented_engine_factory: Callable[[], SegmentedStreamEngine],
        swarm_engine: PeerSwarmEngine,
        media_sink: MediaSink
    ) -> PlaybackSessionManager:
        return PlaybackSessionManager(segmented_engine_factory, swarm_engine, media_sink, self.resolver)

    """
    Check whether a channel answers
    The result also lands in the validator's status cache.

    @param channel: Channel The channel to check
    @return ValidationResult: The outcome of the check
    @throws RuntimeError: When the application is not initialized
    """
    async def validate_channel(self, channel: Channel) -> ValidationResult:
        if self.validator is None:
            raise RuntimeError("StreamVerse is not initialized")
        return await self.validator.validate_channel(channel)

    """
    Check several directory channels

    @param channel_ids: list Channel ids, every channel when omitted
    @return list: Results for the known ids, in order
    @throws RuntimeError: When the application is not initialized
    """
    async def validate_channels(self, channel_ids: Optional[List[str]] = None) -> List[ValidationResult]:
        if self.validator is None:
            raise RuntimeError("StreamVerse is not initialized")

        # unknown ids are skipped
        if channel_ids is None:
            channels = self.directory.channels()
        else:
            channels = [c for c in map(self.directory.get, channel_ids) if c is not None]
        return await self.validator.validate_channels(channels)
