#!/usr/bin/env python3
"""
Verified Channels Source Module

Loads the curated override list, a JSON document shaped
{version, lastUpdated, channels: [...]}, from an HTTP url or a local file.
Only the channels array is read; each record is validated at the boundary.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import json, logging, aiohttp
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional
from streamverse.exceptions import InvalidChannelRecord, SourceFetchError
from streamverse.models import Channel
from streamverse.sources.base import OK_STATUSES

# setup the logger
logger = logging.getLogger(__name__)

"""
Verified channel override loader

Keeps the last good list when a reload fails.
"""
class VerifiedChannelsSource:

    """
    Initialize the VerifiedChannelsSource

    @param location: str HTTP(S) url or file path of the JSON document
    @param session: aiohttp.ClientSession HTTP session for url locations
    """
    def __init__(self, location: str, session: Optional[aiohttp.ClientSession] = None):

        # setup the internals
        self.location = location
        self.session = session
        self.channels: List[Channel] = []
        self.version: str = ""
        self.last_updated: str = ""
        self.last_refresh: Optional[datetime] = None

    @property
    def is_remote(self) -> bool:
        return self.location.lower().startswith(('http://', 'https://'))

    """
    Reload the override list

    @return bool: True when the list was loaded, False on error
    """
    async def refresh(self) -> bool:

        # try to load the document
        try:
            document = await self._load_document()
            self.channels = self.parse_document(document)
            self.version = str(document.get('version', '')) if isinstance(document, dict) else ''
            self.last_updated = str(document.get('lastUpdated', '')) if isinstance(document, dict) else ''
            self.last_refresh = datetime.now()

            # log it
            logger.info(f"Loaded {len(self.channels)} verified channels from {self.location}")
            return True

        # whoops... keep what we had
        except Exception as e:
            logger.error(f"Failed to load verified channels from {self.location}: {e}")
            return False

    async def _load_document(self) -> Any:

        # a local file
        if not self.is_remote:
            return json.loads(Path(self.location).read_text(encoding='utf-8'))

        # a remote document
        if self.session is None:
            raise SourceFetchError("No HTTP session for a remote verified channel list")
        async with self.session.get(self.location) as resp:
            if resp.status not in OK_STATUSES:
                raise SourceFetchError(f"HTTP {resp.status} for {self.location}")
            return await resp.json(content_type=None)

    """
    Validate the channels of a document
    Unknown fields are ignored, invalid records are skipped.

    @param document: dict Decoded JSON document
    @return list: Validated channels
    """
    @staticmethod
    def parse_document(document: Any) -> List[Channel]:

        # hold the channels
        channels: List[Channel] = []
        if not isinstance(document, dict):
            logger.warning("Verified channel document is not an object")
            return channels

        # the channels array is all we read
        records = document.get('channels') or []
        if not isinstance(records, list):
            logger.warning("Verified channel document has no channels array")
            return channels

        # validate each record
        for index, record in enumerate(records):
            try:
                channels.append(Channel.from_dict(record))
            except InvalidChannelRecord as e:
                logger.warning(f"Skipping verified channel #{index}: {e}")

        # return the channels
        return channels
