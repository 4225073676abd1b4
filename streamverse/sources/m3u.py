#!/usr/bin/env python3
"""
M3U Playlist Source Module

Fetches M3U/M3U8 playlists from HTTP urls and parses them into channels.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""
# setup the imports
import logging
from typing import List
from streamverse.exceptions import SourceFetchError
from streamverse.models import Channel
from streamverse.services.playlist_parser import PlaylistParser
from streamverse.sources.base import ChannelSource, OK_STATUSES

# setup the logger
logger = logging.getLogger(__name__)

class M3USource(ChannelSource):

    def __init__(self, *args, **kwargs):

        super().__init__(*args, **kwargs)
        self.parser = PlaylistParser()

    """
    Fetch channels from M3U playlist
    Downloads the playlist and parses it into Channel objects.

    @return list: List of Channel objects parsed from playlist
    @throws SourceFetchError: When the provider answers with an error status
    """
    async def _fetch_channels(self) -> List[Channel]:

        # fire up the session to request the endpoint
        async with self.session.get(self.config.url) as resp:

            # if we don't have a valid response
            if resp.status not in OK_STATUSES:
                raise SourceFetchError(f"HTTP {resp.status} for playlist {self.config.url}")

            # get the response, providers are not always honest about the charset
            content = await resp.text(errors='replace')

        # parse it
        channels = self.parser.parse(content)
        if self.parser.dropped:
            logger.warning(f"Dropped {self.parser.dropped} malformed entries from {self.config.name}")

        # return the channels
        return channels
