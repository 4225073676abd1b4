#!/usr/bin/env python3
"""
Channel Filter Module

Keeps unwanted channels out of the directory. Each source's channels are
matched against the configured name and url patterns before merging.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import re, logging
from typing import Iterable, List, Pattern, Sequence
from streamverse.models import FilterConfig, Channel

# setup the logger
logger = logging.getLogger(__name__)


def _matches(patterns: Sequence[Pattern], text: str) -> bool:
    return any(pattern.search(text) for pattern in patterns)

"""
Pattern based channel filter

A channel is dropped when its name or url hits an exclusion. When
inclusions are configured for a field, the channel must hit one of them.
"""
class ChannelFilter:

    def __init__(self, config: FilterConfig):

        # hold the config and the compiled rules per field
        self.config = config
        self.exclude_names = self._compile(config.exclude_name_patterns)
        self.exclude_urls = self._compile(config.exclude_url_patterns)
        self.include_names = self._compile(config.include_name_patterns)
        self.include_urls = self._compile(config.include_url_patterns)

    @property
    def is_active(self) -> bool:
        return bool(self.exclude_names or self.exclude_urls or self.include_names or self.include_urls)

    """
    Compile a pattern list
    Matching is case-insensitive. A broken pattern is skipped on its own,
    the rest of the list still applies.

    @param patterns: list Regex strings from the config
    @return list: Compiled patterns
    """
    @staticmethod
    def _compile(patterns: Iterable[str]) -> List[Pattern]:

        # hold the compiled ones
        compiled = []
        for pattern in patterns or []:
            try:
                compiled.append(re.compile(pattern, re.IGNORECASE))
            except re.error as e:
                logger.warning(f"Skipping invalid filter pattern '{pattern}': {e}")
        return compiled

    def should_include(self, channel: Channel) -> bool:

        # exclusions always win
        if _matches(self.exclude_names, channel.name) or _matches(self.exclude_urls, channel.url):
            return False

        # each configured inclusion list must be hit
        if self.include_names and not _matches(self.include_names, channel.name):
            return False
        return not self.include_urls or _matches(self.include_urls, channel.url)

    """
    Filter a channel list

    @param channels: list Channels of one source
    @return list: The kept channels, in order
    """
    def apply(self, channels: Iterable[Channel]) -> List[Channel]:

        # nothing configured, keep everything
        channels = list(channels)
        if not self.is_active:
            return channels

        # filter and log what went
        kept = [c for c in channels if self.should_include(c)]
        if len(kept) < len(channels):
            logger.debug(f"Filtered out {len(channels) - len(kept)} of {len(channels)} channels")
        return kept
