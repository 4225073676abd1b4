#!/usr/bin/env python3
"""
Catalog Merger Module

This module folds the channels of several sources, plus a verified override
list, into one deduplicated directory. It also provides the category,
search and alternative-channel lookups the directory consumers use.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# fire up the imports
import logging
from difflib import SequenceMatcher
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple
from streamverse.models import Channel
from streamverse.models.status import DEFAULT_RELIABILITY

# setup the logger
logger = logging.getLogger(__name__)

# label used for channels without a group
UNDEFINED_GROUP = "Undefined"

# minimum name similarity for an alternative
SIMILARITY_THRESHOLD = 0.5

# alternative scoring weights
RELIABILITY_WEIGHT = 0.6
SIMILARITY_POINTS = 30
ONLINE_BONUS = 10

"""
Merged channel directory

Insertion ordered mapping from id to channel, plus the set of ids that came
from the verified override list.
"""
class Directory:

    def __init__(self, entries: Optional[Dict[str, Channel]] = None, verified: Iterable[str] = ()):

        # setup the internals
        self._entries: Dict[str, Channel] = dict(entries or {})
        self._verified: FrozenSet[str] = frozenset(verified)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, channel_id) -> bool:
        return channel_id in self._entries

    def __iter__(self) -> Iterator[Channel]:
        return iter(self._entries.values())

    def __eq__(self, other) -> bool:

        # verification marks are annotations, only the ordered entries count
        if not isinstance(other, Directory):
            return NotImplemented
        return list(self._entries.items()) == list(other._entries.items())

    def __repr__(self) -> str:
        return f"Directory({len(self._entries)} channels, {len(self._verified)} verified)"

    def get(self, channel_id: str) -> Optional[Channel]:
        return self._entries.get(channel_id)

    def channels(self) -> List[Channel]:
        return list(self._entries.values())

    def ids(self) -> List[str]:
        return list(self._entries.keys())

    def is_verified(self, channel_id: str) -> bool:
        return channel_id in self._verified

    def verified_ids(self) -> FrozenSet[str]:
        return self._verified

"""
Folds ordered sources into a directory

Later sources overwrite earlier ones field by field, but never with an
empty value.
"""
class CatalogMerger:

    """
    Merge sources and overrides into a directory

    @param sources: list Ordered (label, channels) pairs
    @param overrides: list Verified channels, folded last
    @return Directory: The merged directory
    """
    def merge(
        self,
        sources: Sequence[Tuple[str, Sequence[Channel]]],
        overrides: Sequence[Channel] = ()
    ) -> Directory:

        # hold the entries and the verified ids
        entries: Dict[str, Channel] = {}
        verified = set()

        # fold each source in order
        for label, channels in sources:
            added = self._fold(entries, channels)
            logger.debug(f"Merged source '{label}': {len(channels)} channels, {added} new")

        # fold the overrides last and mark them
        self._fold(entries, overrides)
        verified.update(c.id for c in overrides)

        # logging
        logger.info(f"Merged directory holds {len(entries)} channels ({len(verified)} verified)")
        return Directory(entries, verified)

    """
    Fold channels into the entries

    @param entries: dict The entries being built
    @param channels: list Channels to fold in
    @return int: Number of new ids
    """
    def _fold(self, entries: Dict[str, Channel], channels: Iterable[Channel]) -> int:

        # count the new ones
        added = 0
        for channel in channels:

            # new id, insert it
            existing = entries.get(channel.id)
            if existing is None:
                entries[channel.id] = channel
                added += 1
                continue

            # known id, overwrite without downgrading
            entries[channel.id] = existing.overlay(channel)

        # return the count
        return added


"""
Group a directory by category
Channels without a group land under "Undefined".

@param directory: Directory The merged directory
@return dict: Group label to channels, in first-seen order
"""
def by_category(directory: Iterable[Channel]) -> Dict[str, List[Channel]]:

    # hold the groups
    groups: Dict[str, List[Channel]] = {}
    for channel in directory:
        groups.setdefault(channel.group or UNDEFINED_GROUP, []).append(channel)
    return groups


"""
Search a directory
Case-insensitive substring match on the name and the group.

@param directory: Directory The merged directory
@param query: str Text to look for
@return list: Matching channels in directory order
"""
def search(directory: Iterable[Channel], query: str) -> List[Channel]:

    # an empty query matches everything
    needle = query.strip().lower()
    if not needle:
        return list(directory)
    return [c for c in directory if needle in c.name.lower() or needle in c.group.lower()]


def name_similarity(left: str, right: str) -> float:
    return SequenceMatcher(None, left.lower(), right.lower()).ratio()


"""
Find alternatives for a failed channel
Channels of the same category or with a similar name. Verified ones come
first, then the best scored, then directory order. Without a status provider
the score is the name similarity alone; with one, the channel's reliability
and current health weigh in as well.

@param directory: Directory The merged directory
@param failed: Channel The channel that failed to play
@param limit: int Maximum number of alternatives
@param validator: ChannelValidator Optional status provider (get_status)
@return list: Alternative channels
"""
def find_alternatives(directory: Directory, failed: Channel, limit: int = 5, validator=None) -> List[Channel]:

    # hold the scored candidates
    candidates = []
    failed_group = failed.group or UNDEFINED_GROUP

    # loop every other channel
    for position, channel in enumerate(directory):
        if channel.id == failed.id:
            continue

        # same category or a similar name
        similarity = name_similarity(channel.name, failed.name)
        same_group = (channel.group or UNDEFINED_GROUP) == failed_group
        if not same_group and similarity <= SIMILARITY_THRESHOLD:
            continue

        # verified first, then score, then directory order
        verified = directory.is_verified(channel.id)
        candidates.append((not verified, -alternative_score(channel, similarity, validator), position, channel))

    # sort and trim
    candidates.sort(key=lambda item: item[:3])
    return [item[3] for item in candidates[:max(0, limit)]]


"""
Score an alternative candidate
Reliability counts for 0.6, name similarity for 30 points at most and an
online status adds 10.

@param channel: Channel The candidate
@param similarity: float Name similarity to the failed channel, 0..1
@param validator: ChannelValidator Optional status provider
@return float: The score, higher is better
"""
def alternative_score(channel: Channel, similarity: float, validator=None) -> float:

    # no statuses, the name decides
    if validator is None:
        return similarity

    # never checked channels keep the starting reliability
    status = validator.get_status(channel.id)
    reliability = status.reliability if status is not None else DEFAULT_RELIABILITY
    online = status is not None and status.is_online
    return reliability * RELIABILITY_WEIGHT + similarity * SIMILARITY_POINTS + (ONLINE_BONUS if online else 0)
