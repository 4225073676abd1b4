#!/usr/bin/env python3
"""
Base Channel Source Module

This module defines the base class for all channel sources.
It provides common functionality for refresh timing and channel storage.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import asyncio, logging, aiohttp
from datetime import datetime
from typing import List, Optional
from streamverse.models import Channel, SourceConfig

# setup the logger
logger = logging.getLogger(__name__)

# response codes we accept from providers
OK_STATUSES = (200, 206, 304)

"""
Base class for channel sources

Provides common functionality for source management, refresh logic, and channel storage.
"""
class ChannelSource:

    """
    Initialize the ChannelSource
    Sets up source configuration, HTTP session, and channel storage.

    @param config: SourceConfig Source configuration object
    @param session: aiohttp.ClientSession HTTP session for requests
    """
    def __init__(self, config: SourceConfig, session: aiohttp.ClientSession):

        # setup the internals
        self.config = config
        self.session = session
        self.channels: List[Channel] = []
        self.last_refresh: Optional[datetime] = None
        self.last_error: Optional[str] = None
        self._refresh_lock = asyncio.Lock()

    @property
    def label(self) -> str:
        return self.config.name

    """
    Check if source needs refreshing
    Determines if enough time has elapsed since last refresh based on refresh interval.

    @return bool: True if refresh is needed, False otherwise
    """
    async def should_refresh(self) -> bool:

        # if we have not refreshed yet, return true
        if self.last_refresh is None:
            return True

        # check the last refresh time and return the comparison
        elapsed = datetime.now() - self.last_refresh
        return elapsed.total_seconds() >= self.config.refresh_interval

    """
    Refresh channel list from source
    Fetches the latest channels if the refresh interval has elapsed. On
    failure the previous channel list stays in place.

    @param force: bool Refresh even if the interval has not elapsed
    @return bool: True if refresh successful, False on error
    """
    async def refresh_channels(self, force: bool = False) -> bool:

        # one refresh at a time per source
        async with self._refresh_lock:
            if not force and not await self.should_refresh():
                return True

            # try to fetch the channels
            try:

                # hold the channels
                self.channels = await self._fetch_channels()
                self.last_refresh = datetime.now()
                self.last_error = None

                # log it and return true
                logger.info(f"Refreshed {len(self.channels)} channels from {self.config.name}")
                return True

            # whoops... there was an exception, and return false
            except Exception as e:
                self.last_error = str(e)
                logger.error(f"Failed to refresh channels from {self.config.name}: {e}")
                return False

    """
    Fetch channels from source (implemented by subclasses)

    @return list: List of Channel objects
    @throws NotImplementedError: Must be implemented by subclasses
    """
    async def _fetch_channels(self) -> List[Channel]:
        raise NotImplementedError
