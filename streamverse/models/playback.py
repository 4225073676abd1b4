#!/usr/bin/env python3
"""
Playback Data Models Module

This module defines the transport kinds, session states and the handle and
event records exchanged between the resolver, the session manager and its
subscribers.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# add our imports
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional
from streamverse.models.channel import Channel


class TransportKind(Enum):
    """Delivery mechanism for a locator"""
    SEGMENTED_STREAM = "segmented-stream"
    DIRECT_FILE = "direct-file"
    PEER_SWARM = "peer-swarm"
    UNPLAYABLE = "unplayable"


class PlaybackState(Enum):
    """Lifecycle state of a playback session"""
    IDLE = "idle"
    OPENING = "opening"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    CLOSED = "closed"
    ERRORED = "errored"


# states holding (or acquiring) a transport
LIVE_STATES = frozenset({
    PlaybackState.OPENING,
    PlaybackState.READY,
    PlaybackState.PLAYING,
    PlaybackState.PAUSED,
})

"""
A resolved playback request

Produced by the source resolver for the session manager.
"""
@dataclass(frozen=True)
class PlaybackRequest:
    """Resolved playback request"""
    channel: Channel
    transport_kind: TransportKind
    locator: str

"""
One transport attempt

Owned by the session manager, created on selection and closed on
replacement or stop.
"""
@dataclass
class PlaybackHandle:
    """One transport attempt"""
    transport_kind: TransportKind
    channel: Channel
    generation: int
    state: PlaybackState = PlaybackState.IDLE
    error_reason: Optional[str] = None
    effective_url: str = ""

    @property
    def channel_id(self) -> str:
        return self.channel.id

    @property
    def is_live(self) -> bool:
        return self.state in LIVE_STATES

    # the channel as actually played, e.g. with a swarm blob locator
    @property
    def effective_channel(self) -> Channel:
        if self.effective_url and self.effective_url != self.channel.url:
            return replace(self.channel, url=self.effective_url)
        return self.channel

"""
State change notification

Delivered to session subscribers on every transition.
"""
@dataclass(frozen=True)
class PlaybackEvent:
    """State change notification"""
    state: PlaybackState
    channel: Optional[Channel] = None
    error_reason: Optional[str] = None
    error: Optional[Exception] = None
    generation: int = 0
