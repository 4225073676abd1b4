#!/usr/bin/env python3
"""
Playlist Parser Module

This module turns raw M3U/M3U8 playlist text into an ordered list of
normalized channels. Parsing is best effort: malformed entries are dropped
and never raise, so bad input only makes the listing less complete.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import re, logging, hashlib
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set
from streamverse.exceptions import MalformedEntry
from streamverse.models import Channel

# setup the logger
logger = logging.getLogger(__name__)

# directive and comment sentinels
DIRECTIVE = "#EXTINF:"
GROUP_DIRECTIVE = "#EXTGRP:"

"""
Directive metadata waiting for its locator line

Transient, discarded once converted to a channel or rejected.
"""
@dataclass
class ParsedEntry:
    position: int
    title: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    extra_group: str = ""

    def attr(self, *keys: str) -> str:

        # first non-empty attribute wins
        for key in keys:
            value = self.attributes.get(key, "").strip()
            if value:
                return value
        return ""

"""
M3U playlist parser

Scans playlist text line by line, pairing each directive with the locator
line that follows it.
"""
class PlaylistParser:

    # pre-compiled regex patterns for directive parsing
    _DURATION_PATTERN = re.compile(r'^\s*(-?\d+(?:\.\d+)?)(?=[\s,]|$)')
    _ATTRIBUTE_PATTERN = re.compile(r'([A-Za-z0-9_-]+)\s*=\s*"([^"]*)"')
    _WHITESPACE_PATTERN = re.compile(r'\s+')

    # only real line breaks, not the extra separators str.splitlines() knows
    _LINE_BREAK_PATTERN = re.compile(r'\r\n|\r|\n')

    def __init__(self):

        # entries dropped during the last run
        self.dropped = 0

    """
    Parse playlist content
    Pure function of the text, never raises for string input.

    @param text: str Raw playlist content
    @return list: Channels in input order, ids unique within the run
    """
    def parse(self, text: str) -> List[Channel]:

        # hold the channels, the ids handed out and the pending directive
        channels: List[Channel] = []
        seen_ids: Set[str] = set()
        pending: Optional[ParsedEntry] = None
        self.dropped = 0

        # nothing to do
        if not text or not text.strip():
            return channels

        # loop over each line
        for position, line in enumerate(self._LINE_BREAK_PATTERN.split(text.lstrip('\ufeff'))):

            # strip start and end spaces
            line = line.strip()
            if not line:
                continue

            # a new directive replaces any orphaned one
            if line.upper().startswith(DIRECTIVE):
                if pending is not None:
                    self._drop(pending, "directive without locator")
                try:
                    pending = self._parse_directive(line, position)
                except MalformedEntry as e:
                    self._drop(None, str(e))
                    pending = None
                continue

            # a group hint for the pending directive
            if line.upper().startswith(GROUP_DIRECTIVE):
                if pending is not None:
                    pending.extra_group = line[len(GROUP_DIRECTIVE):].strip()
                continue

            # any other comment line is skipped
            if line.startswith('#'):
                continue

            # this line should be the locator
            if pending is None:
                logger.debug(f"Ignoring locator without directive on line {position + 1}")
                continue

            # convert the entry
            try:
                channels.append(self._build_channel(pending, line, seen_ids))
            except MalformedEntry as e:
                self._drop(pending, str(e))

            # clear the current entry for the next channel
            pending = None

        # an entry at the very end never got its locator
        if pending is not None:
            self._drop(pending, "directive without locator at end of input")

        # return the channels
        return channels

    """
    Parse a directive line
    Validates the duration field and pulls out the attributes and title.

    @param line: str Stripped directive line
    @param position: int Zero-based line index
    @return ParsedEntry: The pending entry
    @throws MalformedEntry: When the duration field is not a number
    """
    def _parse_directive(self, line: str, position: int) -> ParsedEntry:

        # everything after the sentinel
        body = line[len(DIRECTIVE):]

        # the duration must be well formed
        match = self._DURATION_PATTERN.match(body)
        if not match:
            raise MalformedEntry(f"bad duration on line {position + 1}")

        # split off the title
        rest = body[match.end():]
        comma = self._title_comma(rest)
        if comma < 0:
            attr_block, title = rest, ""
        else:
            attr_block, title = rest[:comma], rest[comma + 1:]

        # gather the attributes, keys are case insensitive
        attributes = {}
        for key, value in self._ATTRIBUTE_PATTERN.findall(attr_block):
            attributes.setdefault(key.lower(), value)

        # return the entry
        return ParsedEntry(
            position=position,
            title=self._clean(title),
            attributes=attributes,
        )

    """
    Find the comma that starts the display name
    The last comma outside quoted attribute values. When a quote is left
    open, fall back to the plain last comma.

    @param rest: str Directive text after the duration
    @return int: Index of the comma or -1
    """
    @staticmethod
    def _title_comma(rest: str) -> int:

        # walk the text tracking quotes
        in_quote = False
        last = -1
        for index, char in enumerate(rest):
            if char == '"':
                in_quote = not in_quote
            elif char == ',' and not in_quote:
                last = index

        # unbalanced quotes
        if in_quote and last < 0:
            return rest.rfind(',')
        return last

    """
    Build a channel from a pending entry and its locator

    @param entry: ParsedEntry Pending directive metadata
    @param locator: str The locator line
    @param seen_ids: set Ids already handed out in this run
    @return Channel: The normalized channel
    @throws MalformedEntry: When no name can be resolved
    """
    def _build_channel(self, entry: ParsedEntry, locator: str, seen_ids: Set[str]) -> Channel:

        # name falls back to tvg-name
        name = entry.title or self._clean(entry.attr('tvg-name'))
        if not name:
            raise MalformedEntry(f"no name for entry on line {entry.position + 1}")

        # id falls back to a synthesized one
        channel_id = entry.attr('tvg-id') or self._synthesize_id(entry.position, name, locator)
        channel_id = self._unique_id(channel_id, seen_ids)

        # return the channel
        return Channel(
            id=channel_id,
            name=name,
            url=locator,
            logo=entry.attr('tvg-logo'),
            group=entry.attr('group-title') or entry.extra_group,
            country=entry.attr('tvg-country', 'country'),
            language=entry.attr('tvg-language', 'language'),
        )

    """
    Synthesize a deterministic id
    Hash of the entry position, name and locator.

    @return str: The synthesized id
    """
    @staticmethod
    def _synthesize_id(position: int, name: str, locator: str) -> str:
        digest = hashlib.sha1(f"{position}|{name}|{locator}".encode('utf-8')).hexdigest()
        return f"channel-{digest[:12]}"

    @staticmethod
    def _unique_id(base_id: str, seen_ids: Set[str]) -> str:

        # hold the id and setup the counter
        channel_id = base_id
        counter = 2

        # while the id is taken, bump the suffix
        while channel_id in seen_ids:
            channel_id = f"{base_id}-{counter}"
            counter += 1

        # remember and return it
        seen_ids.add(channel_id)
        return channel_id

    def _clean(self, text: str) -> str:
        return self._WHITESPACE_PATTERN.sub(' ', text).strip()

    def _drop(self, entry: Optional[ParsedEntry], reason: str):

        # count and log it
        self.dropped += 1
        if entry is not None:
            logger.debug(f"Dropping playlist entry from line {entry.position + 1}: {reason}")
        else:
            logger.debug(f"Dropping playlist entry: {reason}")


"""
Parse playlist content with a fresh parser

@param text: str Raw playlist content
@return list: Parsed channels
"""
def parse_playlist(text: str) -> List[Channel]:
    return PlaylistParser().parse(text)
