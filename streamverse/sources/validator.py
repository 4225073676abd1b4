#!/usr/bin/env python3
"""
Channel Validator Module

Checks whether channel locators answer, with HEAD requests over the shared
aiohttp session. Results are cached per channel with an expiry and fold
into a reliability score used when ranking alternative channels.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import asyncio, logging, aiohttp
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional
from streamverse.models import (
    Channel,
    ChannelHealth,
    ChannelStatus,
    ValidationConfig,
    ValidationResult
)
from streamverse.models.status import DEFAULT_RELIABILITY

# setup the logger
logger = logging.getLogger(__name__)

# reliability steps
RELIABILITY_GAIN = 10
FAST_RESPONSE_BONUS = 5
RELIABILITY_LOSS = 15
FAST_RESPONSE_MS = 2000

# statuses that mean the locator is being served; 405 is a HEAD-less server
REACHABLE_STATUSES = (405,)

"""
Channel reachability checker

One instance per application, sharing the HTTP session of the sources.
"""
class ChannelValidator:

    """
    Initialize the ChannelValidator

    @param session: aiohttp.ClientSession HTTP session for the checks
    @param config: ValidationConfig Concurrency, timeout and cache expiry
    """
    def __init__(self, session: aiohttp.ClientSession, config: Optional[ValidationConfig] = None):

        # setup the internals
        self.session = session
        self.config = config or ValidationConfig()
        self.statuses: Dict[str, ChannelStatus] = {}
        self._semaphore = asyncio.Semaphore(max(1, self.config.max_concurrent))

    """
    Check one channel
    Only http(s) locators can be checked; anything else is reported as not
    working and leaves the cache alone.

    @param channel: Channel The channel to check
    @return ValidationResult: The outcome of the check
    """
    async def validate_channel(self, channel: Channel) -> ValidationResult:

        # magnets and info-hashes have nothing to ask over http
        url = (channel.url or "").strip()
        if not url.lower().startswith(('http://', 'https://')):
            return ValidationResult(channel.id, False, 0.0, "Unsupported locator")

        # one of the bounded slots
        async with self._semaphore:
            loop = asyncio.get_running_loop()
            started = loop.time()
            error = None

            # try the head request
            try:
                timeout = aiohttp.ClientTimeout(total=self.config.timeout)
                async with self.session.head(url, timeout=timeout, allow_redirects=True) as resp:
                    working = resp.status < 400 or resp.status in REACHABLE_STATUSES
                    if not working:
                        error = f"HTTP {resp.status}"

            # whoops... it did not answer
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                working = False
                error = str(e) or type(e).__name__

            response_time = (loop.time() - started) * 1000

        # cache it and return the result
        self._record(channel, url, working, response_time, error)
        logger.debug(f"Checked '{channel.name}': {'online' if working else 'offline'} in {response_time:.0f}ms")
        return ValidationResult(channel.id, working, response_time, error)

    """
    Check several channels
    At most max_concurrent checks run at the same time.

    @param channels: list Channels to check
    @return list: Results in input order
    """
    async def validate_channels(self, channels: Iterable[Channel]) -> List[ValidationResult]:

        # fire them all, the semaphore does the bounding
        results = await asyncio.gather(*[self.validate_channel(c) for c in channels])

        # logging
        online = sum(1 for r in results if r.is_working)
        logger.info(f"Validated {len(results)} channels: {online} online")
        return list(results)

    """
    Get the cached status of a channel
    An expired status is returned with unknown health, its reliability kept.

    @param channel_id: str Channel id
    @return ChannelStatus: The status or None when never checked
    """
    def get_status(self, channel_id: str) -> Optional[ChannelStatus]:

        # never checked
        status = self.statuses.get(channel_id)
        if status is None:
            return None

        # stale
        age = (datetime.now() - status.last_checked).total_seconds()
        if age > self.config.cache_expiry:
            return replace(status, health=ChannelHealth.UNKNOWN)
        return status

    def reliability(self, channel_id: str) -> int:
        status = self.statuses.get(channel_id)
        return status.reliability if status is not None else 0

    def reliable_channels(self, min_reliability: int = 70) -> List[ChannelStatus]:
        keep = [s for s in self.statuses.values() if s.reliability >= min_reliability]
        return sorted(keep, key=lambda s: s.reliability, reverse=True)

    """
    Summarize the cache

    @return dict: Counts per health and the average reliability
    """
    def stats(self) -> dict:

        # current view of every status
        statuses = [self.get_status(channel_id) for channel_id in self.statuses]
        total = len(statuses)

        # return the summary
        return {
            "total": total,
            "online": sum(1 for s in statuses if s.health is ChannelHealth.ONLINE),
            "offline": sum(1 for s in statuses if s.health is ChannelHealth.OFFLINE),
            "unknown": sum(1 for s in statuses if s.health is ChannelHealth.UNKNOWN),
            "average_reliability": (sum(s.reliability for s in statuses) / total) if total else 0,
        }

    def _record(self, channel: Channel, url: str, working: bool, response_time: float, error: Optional[str]):

        # move the score from where it was
        previous = self.statuses.get(channel.id)
        reliability = previous.reliability if previous is not None else DEFAULT_RELIABILITY
        if working:
            reliability += RELIABILITY_GAIN
            if response_time < FAST_RESPONSE_MS:
                reliability += FAST_RESPONSE_BONUS
        else:
            reliability -= RELIABILITY_LOSS

        # hold the new status
        self.statuses[channel.id] = ChannelStatus(
            id=channel.id,
            url=url,
            health=ChannelHealth.ONLINE if working else ChannelHealth.OFFLINE,
            last_checked=datetime.now(),
            response_time=response_time,
            error=error,
            reliability=max(0, min(100, reliability)),
        )
