#!/usr/bin/env python3
"""
Transport Engine Interfaces Module

This module defines the interfaces of the external collaborators driven by
the playback session manager: the segmented stream engine, the peer swarm
engine and the media sink. Concrete engines live outside this package.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
from typing import Callable, List, Optional

# media file extensions playable out of a swarm
PLAYABLE_EXTENSIONS = ('.mp4', '.mkv', '.avi', '.webm', '.mov')

"""
Playback target

Loads a locator directly, or is attached to a segmented stream engine.
"""
class MediaSink:

    """
    Load a locator
    Exactly one of the callbacks fires once the media can play or fails.

    @param url: str Locator to load
    @param on_can_play: callable Called with no arguments when playable
    @param on_error: callable Called with a reason string on failure
    @return None
    """
    def load(self, url: str, on_can_play: Callable[[], None], on_error: Callable[[str], None]):
        raise NotImplementedError

    def unload(self):
        """Release the current locator"""
        raise NotImplementedError

    """
    Start playback
    @throws AutoplayRejected: When playback may not start without a user gesture
    """
    async def play(self):
        raise NotImplementedError

    def pause(self):
        raise NotImplementedError

"""
Segmented stream engine

One instance per session, destroyed on teardown.
"""
class SegmentedStreamEngine:

    # event names
    MANIFEST_PARSED = "manifest_parsed"
    ERROR = "error"

    def load_source(self, url: str):
        raise NotImplementedError

    def attach_target(self, sink: MediaSink):
        raise NotImplementedError

    """
    Register an event handler
    manifest_parsed handlers take no arguments, error handlers take
    (fatal: bool, reason: str).
    """
    def on(self, event: str, handler: Callable):
        raise NotImplementedError

    def destroy(self):
        """Stop loading and release the engine"""
        raise NotImplementedError


class SwarmFile:
    """A file inside a peer swarm"""

    name: str = ""

    """
    Materialize the file as a blob locator
    @param callback: callable Called with (error, url), error is None on success
    """
    def get_blob_url(self, callback: Callable[[Optional[Exception], Optional[str]], None]):
        raise NotImplementedError


class Swarm:
    """An active peer swarm"""

    # set per instance by the concrete swarm
    files: List[SwarmFile]

    # error handlers take a reason string
    def on(self, event: str, handler: Callable):
        raise NotImplementedError

    def destroy(self):
        raise NotImplementedError

"""
Peer swarm engine

Long lived client; every added descriptor becomes a swarm listed in torrents.
"""
class PeerSwarmEngine:

    # the live swarms, owned by the concrete engine
    torrents: List[Swarm]

    """
    Add a descriptor
    @param descriptor: str Magnet link or info hash
    @param on_ready: callable Called with the swarm once its metadata is known
    @return Swarm: The new swarm
    """
    def add(self, descriptor: str, on_ready: Callable[[Swarm], None]) -> Swarm:
        raise NotImplementedError


"""
Pick the playable media file of a swarm
First file whose extension is in the allow-list.

@param files: list Swarm files
@return SwarmFile: The file or None
"""
def pick_playable_file(files) -> Optional[SwarmFile]:
    for swarm_file in files or []:
        if str(getattr(swarm_file, 'name', '')).lower().endswith(PLAYABLE_EXTENSIONS):
            return swarm_file
    return None
