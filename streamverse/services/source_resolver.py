#!/usr/bin/env python3
"""
Source Resolver Module

This module classifies a channel locator into the transport that can play
it: a peer swarm, a segmented stream, or a direct file.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import re
from urllib.parse import urlsplit
from streamverse.models import Channel, TransportKind, PlaybackRequest

# peer swarm descriptors: magnet links and bare info hashes
_MAGNET_PATTERN = re.compile(r'^magnet:\?', re.IGNORECASE)
_INFO_HASH_PATTERN = re.compile(r'^[0-9a-fA-F]{40}$')

# segmented stream playlist extension
SEGMENTED_EXTENSIONS = ('.m3u8',)

"""
Classifies locators into transport kinds

Pure and total: every locator maps to exactly one kind.
"""
class SourceResolver:

    """
    Classify a channel
    Peer swarm first, then segmented stream, then direct file. An empty
    locator is unplayable.

    @param channel: Channel Channel to classify
    @return TransportKind: The delivery transport
    """
    def classify(self, channel: Channel) -> TransportKind:
        return self.classify_locator(channel.url)

    def classify_locator(self, locator: str) -> TransportKind:

        # nothing to play
        locator = (locator or "").strip()
        if not locator:
            return TransportKind.UNPLAYABLE

        # magnet link or info hash
        if _MAGNET_PATTERN.match(locator) or _INFO_HASH_PATTERN.match(locator):
            return TransportKind.PEER_SWARM

        # check the path without the query and fragment
        try:
            path = urlsplit(locator).path
        except ValueError:
            path = locator.split('?', 1)[0].split('#', 1)[0]
        if path.lower().endswith(SEGMENTED_EXTENSIONS):
            return TransportKind.SEGMENTED_STREAM

        # anything else goes straight to the media sink
        return TransportKind.DIRECT_FILE

    """
    Resolve a channel into a playback request

    @param channel: Channel Selected channel
    @return PlaybackRequest: The channel, its transport kind and locator
    """
    def resolve(self, channel: Channel) -> PlaybackRequest:
        return PlaybackRequest(
            channel=channel,
            transport_kind=self.classify(channel),
            locator=(channel.url or "").strip()
        )
