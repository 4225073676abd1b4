#!/usr/bin/env python3
"""
Channel Status Models Module

This module defines the reachability records produced by the channel
validator and read back when ranking alternative channels.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# add our imports
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

# reliability a channel starts from before its first check
DEFAULT_RELIABILITY = 50


class ChannelHealth(Enum):
    """Last known reachability of a channel"""
    ONLINE = "online"
    OFFLINE = "offline"
    UNKNOWN = "unknown"

"""
Cached status of one channel

Reliability is a 0-100 score moved up by successful checks and down by
failed ones.
"""
@dataclass
class ChannelStatus:
    """Cached channel status"""
    id: str
    url: str
    health: ChannelHealth = ChannelHealth.UNKNOWN
    last_checked: datetime = field(default_factory=datetime.now)
    response_time: float = 0.0  # milliseconds
    error: Optional[str] = None
    reliability: int = DEFAULT_RELIABILITY

    @property
    def is_online(self) -> bool:
        return self.health is ChannelHealth.ONLINE

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "url": self.url,
            "health": self.health.value,
            "lastChecked": self.last_checked.isoformat(),
            "responseTime": round(self.response_time, 1),
            "error": self.error,
            "reliability": self.reliability,
        }


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one reachability check"""
    channel_id: str
    is_working: bool
    response_time: float = 0.0
    error: Optional[str] = None
