#!/usr/bin/env python3
"""
Xtream Codes API Source Module

This module implements Xtream Codes API integration for fetching live
channels and, optionally, VOD content from Xtream-compatible providers.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlsplit, parse_qs
from streamverse.exceptions import SourceFetchError
from streamverse.models import Channel
from streamverse.sources.base import ChannelSource, OK_STATUSES

# setup the logger
logger = logging.getLogger(__name__)

"""
Xtream Codes API source

Fetches live channels (and VOD when enabled) from Xtream Codes API providers.
"""
class XtreamSource(ChannelSource):

    """
    Initialize the XtreamSource
    Sets up API endpoint and authentication parameters. Credentials missing
    from the config are taken from the url when it embeds them.

    @param args: Positional arguments passed to parent class
    @param kwargs: Keyword arguments passed to parent class
    """
    def __init__(self, *args, **kwargs):

        super().__init__(*args, **kwargs)

        # hold the server and credentials
        self.server = self.config.url.rstrip('/')
        self.username = self.config.username or ""
        self.password = self.config.password or ""

        # pull the credentials out of the url if we need to
        if not (self.username and self.password):
            parsed = self.parse_xtream_url(self.config.url)
            if parsed:
                self.server, self.username, self.password = parsed

        self.api_url = f"{self.server}/player_api.php"
        self.base_params = {
            'username': self.username,
            'password': self.password
        }

    """
    Parse an Xtream url
    Accepts credentials as query parameters (get.php / player_api.php urls)
    or as the first two path segments.

    @param url: str Xtream url
    @return tuple: (server, username, password) or None
    """
    @staticmethod
    def parse_xtream_url(url: str) -> Optional[Tuple[str, str, str]]:

        # try to split the url
        try:
            parts = urlsplit(url)
        except ValueError:
            return None
        if not parts.scheme or not parts.netloc:
            return None

        # hold the server
        server = f"{parts.scheme}://{parts.netloc}"

        # credentials as query parameters
        query = parse_qs(parts.query)
        if query.get('username') and query.get('password'):
            return server, query['username'][0], query['password'][0]

        # credentials in the path
        segments = [s for s in parts.path.split('/') if s]
        if len(segments) >= 2 and not any('.' in s for s in segments[:2]):
            return server, segments[0], segments[1]

        # nothing usable
        return None

    """
    Fetch channels from Xtream API
    Retrieves the categories, the live channels and, if enabled, VOD content.

    @return list: List of Channel objects
    """
    async def _fetch_channels(self) -> List[Channel]:

        # the live category map is optional
        categories = await self._fetch_categories('get_live_categories')

        # live channels are required
        channels = self._convert_live(await self._get_action('get_live_streams'), categories)

        # vod is optional, its category ids are a separate namespace
        if self.config.include_vod:
            channels.extend(await self._fetch_vod(await self._fetch_categories('get_vod_categories')))

        # return them
        return channels

    """
    Call a player API action

    @param action: str Action name
    @return list: The object records of the decoded JSON list
    @throws SourceFetchError: When the provider answers with an error status
    """
    async def _get_action(self, action: str) -> List[Dict[str, Any]]:

        # setup the parameters
        params = self.base_params.copy()
        params['action'] = action

        # utilize our session and call the action
        async with self.session.get(self.api_url, params=params) as resp:

            # make sure we have a valid response
            if resp.status not in OK_STATUSES:
                raise SourceFetchError(f"HTTP {resp.status} for {action} on {self.config.name}")

            # we do, so hold the data
            data = await resp.json(content_type=None)

        # providers answer with an object when the account is off
        if not isinstance(data, list):
            return []

        # and sometimes pad the list with nulls
        records = [item for item in data if isinstance(item, dict)]
        if len(records) < len(data):
            logger.warning(f"Skipped {len(data) - len(records)} non-object records in {action} from {self.config.name}")
        return records

    """
    Fetch a category map
    Live and VOD categories are fetched separately, providers reuse ids
    across the two.

    @param action: str get_live_categories or get_vod_categories
    @return dict: Category id to category name
    """
    async def _fetch_categories(self, action: str) -> Dict[str, str]:

        # hold the categories
        categories: Dict[str, str] = {}

        # try to get them
        try:
            for category in await self._get_action(action):
                categories[str(category.get('category_id', ''))] = str(category.get('category_name') or '')

        # whoopsie.. log the error
        except Exception as e:
            logger.error(f"Failed to fetch categories ({action}) from {self.config.name}: {e}")

        # return the categories
        return categories

    """
    Convert live streams to channels

    @param streams: list Raw live stream records
    @param categories: dict Live category map
    @return list: Channels
    """
    def _convert_live(self, streams: List[Dict[str, Any]], categories: Dict[str, str]) -> List[Channel]:

        # hold the channels
        channels = []

        # for each stream item in the response
        for stream in streams:

            # no id or no name, no channel
            stream_id = str(stream.get('stream_id') or '').strip()
            name = str(stream.get('name') or '').strip()
            if not stream_id or not name:
                continue

            # append it all to the channels
            channels.append(Channel(
                id=f"{self.config.name}-{stream_id}",
                name=name,
                url=f"{self.server}/live/{self.username}/{self.password}/{stream_id}.ts",
                logo=str(stream.get('stream_icon') or ''),
                group=self._category(stream, categories)
            ))

        # return the channels
        return channels

    """
    Fetch VOD (Video on Demand) streams from Xtream API
    Movies are direct files, addressed by their container extension.

    @param categories: dict VOD category map
    @return list: Channels for VOD content
    """
    async def _fetch_vod(self, categories: Dict[str, str]) -> List[Channel]:

        # hold the channels
        channels = []

        # try to get all vod streams
        try:
            streams = await self._get_action('get_vod_streams')

        # whoopsie.. log the error
        except Exception as e:
            logger.error(f"Failed to fetch VOD streams from {self.config.name}: {e}")
            return channels

        # loop the streams in the response
        for stream in streams:

            # no id or no name, no channel
            stream_id = str(stream.get('stream_id') or '').strip()
            name = str(stream.get('name') or '').strip()
            if not stream_id or not name:
                continue

            # setup the stream url
            extension = str(stream.get('container_extension') or 'mp4').lstrip('.')
            channels.append(Channel(
                id=f"{self.config.name}-vod-{stream_id}",
                name=name,
                url=f"{self.server}/movie/{self.username}/{self.password}/{stream_id}.{extension}",
                logo=str(stream.get('stream_icon') or ''),
                group=self._category(stream, categories)
            ))

        # return the channels
        return channels

    @staticmethod
    def _category(stream: Dict[str, Any], categories: Dict[str, str]) -> str:
        name = stream.get('category_name')
        if name:
            return str(name)
        return categories.get(str(stream.get('category_id', '')), '')
