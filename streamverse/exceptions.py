#!/usr/bin/env python3
"""
Exceptions Module

This module defines the error taxonomy for StreamVerse. Parsing errors stay
local to the parser, playback errors are reported to the caller as events
by the playback session manager.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""


class StreamVerseError(Exception):
    """Base class for all StreamVerse errors"""


class MalformedEntry(StreamVerseError):
    """A playlist entry that cannot be turned into a channel"""


class InvalidChannelRecord(StreamVerseError):
    """A loose channel record (JSON) that fails validation"""


"""
Base class for playback failures

Carries the channel whose selection failed so callers can look up
alternatives for the same logical content.
"""
class PlaybackError(StreamVerseError):

    def __init__(self, message: str = "", channel=None):

        super().__init__(message)
        self.channel = channel

    # the short reason code reported with events
    @property
    def reason(self) -> str:
        return type(self).__name__


class NoPlayableSource(PlaybackError):
    """The channel has no usable locator"""


class NoPlayableFileInSwarm(PlaybackError):
    """The peer swarm holds no file with a playable media extension"""


class TransportFatalError(PlaybackError):
    """The external transport engine reported an unrecoverable failure"""


class AutoplayRejected(StreamVerseError):
    """Raised by a media sink when playback may not start on its own"""


class SourceFetchError(StreamVerseError):
    """A provider answered with an unusable response"""
