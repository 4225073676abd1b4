#!/usr/bin/env python3
"""
Playback Session Module

This module owns the lifecycle of the single active playback transport:
it opens it, watches its events, tears it down on replacement or fatal
error, and reports every state change to its subscribers.

Each selection gets a new generation token. Engine callbacks are wrapped
with the token of the attempt that registered them and are dropped once a
newer selection (or a stop) has begun.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import asyncio, logging
from typing import Callable, List, Optional
from streamverse.exceptions import (
    AutoplayRejected,
    NoPlayableFileInSwarm,
    NoPlayableSource,
    PlaybackError,
    TransportFatalError
)
from streamverse.models import (
    Channel,
    PlaybackEvent,
    PlaybackHandle,
    PlaybackState,
    TransportKind
)
from streamverse.services.engines import (
    MediaSink,
    PeerSwarmEngine,
    SegmentedStreamEngine,
    pick_playable_file
)
from streamverse.services.source_resolver import SourceResolver

# setup the logger
logger = logging.getLogger(__name__)

# listener signature
Listener = Callable[[PlaybackEvent], None]

"""
Manages the one active playback session

All methods must be called from the event loop that runs the transports.
"""
class PlaybackSessionManager:

    """
    Initialize the PlaybackSessionManager

    @param segmented_engine_factory: callable Returns a fresh SegmentedStreamEngine
    @param swarm_engine: PeerSwarmEngine Long lived peer swarm client
    @param media_sink: MediaSink The playback target
    @param resolver: SourceResolver Locator classifier
    """
    def __init__(
        self,
        segmented_engine_factory: Callable[[], SegmentedStreamEngine],
        swarm_engine: PeerSwarmEngine,
        media_sink: MediaSink,
        resolver: Optional[SourceResolver] = None
    ):

        # setup the collaborators
        self._segmented_engine_factory = segmented_engine_factory
        self._swarm_engine = swarm_engine
        self._sink = media_sink
        self._resolver = resolver or SourceResolver()

        # setup the session internals
        self._generation = 0
        self._handle: Optional[PlaybackHandle] = None
        self._task: Optional[asyncio.Task] = None
        self._waiter: Optional[asyncio.Future] = None
        self._listeners: List[Listener] = []

        # the live transport resources
        self._engine: Optional[SegmentedStreamEngine] = None
        self._swarm = None
        self._sink_in_use = False

    @property
    def state(self) -> PlaybackState:
        return self._handle.state if self._handle is not None else PlaybackState.IDLE

    @property
    def handle(self) -> Optional[PlaybackHandle]:
        return self._handle

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def has_live_transport(self) -> bool:
        return self._engine is not None or self._swarm is not None or self._sink_in_use

    """
    Subscribe to state change events

    @param listener: callable Receives every PlaybackEvent
    @return callable: Call it to unsubscribe
    """
    def subscribe(self, listener: Listener) -> Callable[[], None]:

        # hold the listener
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    """
    Select a channel for playback
    Tears down the current session, classifies the channel and starts the
    acquisition. Selecting None is the same as stop().

    @param channel: Channel The channel to play, or None
    @return PlaybackHandle: The new session handle, or None after a stop
    """
    def select(self, channel: Optional[Channel]) -> Optional[PlaybackHandle]:

        # nothing selected
        if channel is None:
            self.stop()
            return None

        # new generation first, so the old transport's callbacks are stale
        self._generation += 1
        self._teardown()

        # classify the channel
        request = self._resolver.resolve(channel)
        handle = PlaybackHandle(
            transport_kind=request.transport_kind,
            channel=channel,
            generation=self._generation
        )
        self._handle = handle

        # no locator, fail fast without opening anything
        if request.transport_kind is TransportKind.UNPLAYABLE:
            self._fail(handle, NoPlayableSource(f"Channel '{channel.name}' has no playable locator", channel))
            return handle

        # start the acquisition
        logger.info(f"Opening '{channel.name}' over {request.transport_kind.value} (generation {handle.generation})")
        self._transition(handle, PlaybackState.OPENING)

        # a listener may have selected something else while handling the event
        if not self._is_current(handle):
            return handle
        self._task = asyncio.get_running_loop().create_task(self._acquire(handle, request.locator))
        return handle

    """
    Stop playback
    Releases the transport from any state and returns to idle.

    @return None
    """
    def stop(self):

        # hold the previous state
        previous = self.state

        # invalidate and release
        self._generation += 1
        self._teardown()
        self._handle = None

        # notify
        if previous is not PlaybackState.IDLE:
            logger.info("Playback stopped")
            self._emit(PlaybackEvent(state=PlaybackState.IDLE, generation=self._generation))

    """
    Toggle between playing and paused
    A ready session (autoplay rejected) starts playing. No resource effect.

    @return PlaybackState: The state after the toggle
    """
    async def toggle_pause(self) -> PlaybackState:

        # nothing to toggle
        handle = self._handle
        if handle is None:
            return PlaybackState.IDLE

        # playing, so pause
        if handle.state is PlaybackState.PLAYING:
            self._sink.pause()
            self._transition(handle, PlaybackState.PAUSED)

        # paused or waiting for a gesture, so play
        elif handle.state in (PlaybackState.PAUSED, PlaybackState.READY):
            try:
                await self._sink.play()
            except AutoplayRejected as e:
                logger.info(f"Play rejected for '{handle.channel.name}': {e}")
                return self.state

            # any other play failure ends the session like an engine failure
            except Exception as e:
                self._fail(handle, TransportFatalError(f"Play failed: {str(e) or type(e).__name__}", handle.channel))
                return self.state
            if self._is_current(handle) and handle.state in (PlaybackState.PAUSED, PlaybackState.READY):
                self._transition(handle, PlaybackState.PLAYING)

        # return where we landed
        return self.state

    """
    Wait for the current acquisition to finish
    Returns once the acquisition task completed or was cancelled.

    @return None
    """
    async def wait_settled(self):
        task = self._task
        if task is not None and not task.done():
            await asyncio.wait({task})

    """
    Acquire the transport for a handle
    Runs as a task; any failure lands the handle in the errored state.

    @param handle: PlaybackHandle The session handle
    @param locator: str The locator to open
    @return None
    """
    async def _acquire(self, handle: PlaybackHandle, locator: str):

        # superseded before the task got to run
        if not self._is_current(handle):
            return

        # try to open the transport and start playback
        try:
            if handle.transport_kind is TransportKind.SEGMENTED_STREAM:
                await self._open_segmented(handle, locator)
            elif handle.transport_kind is TransportKind.PEER_SWARM:
                await self._open_peer_swarm(handle, locator)
            else:
                handle.effective_url = locator
                await self._load_sink(handle, locator)

            # the transport is ready
            if not self._is_current(handle):
                return
            self._transition(handle, PlaybackState.READY)
            await self._autoplay(handle)

        # superseded by a newer selection or a stop
        except asyncio.CancelledError:
            logger.debug(f"Acquisition for generation {handle.generation} cancelled")
            raise

        # a known playback failure
        except PlaybackError as e:
            self._fail(handle, e)

        # the engine itself blew up
        except Exception as e:
            self._fail(handle, TransportFatalError(str(e) or type(e).__name__, handle.channel))

    """
    Open a segmented stream
    Loads the manifest and attaches the engine to the sink.

    @return None
    """
    async def _open_segmented(self, handle: PlaybackHandle, locator: str):

        # superseded, nothing to open
        if not self._is_current(handle):
            return

        # fire up a fresh engine for this session
        parsed = self._new_waiter()
        engine = self._segmented_engine_factory()
        self._engine = engine

        # wire up the events
        engine.on(SegmentedStreamEngine.MANIFEST_PARSED, self._guard(handle, lambda *args: self._settle(parsed)))
        engine.on(SegmentedStreamEngine.ERROR, self._guard(handle, lambda fatal, reason='': self._on_engine_error(handle, fatal, reason)))

        # load and attach
        handle.effective_url = locator
        engine.load_source(locator)
        engine.attach_target(self._sink)
        self._sink_in_use = True

        # wait for the manifest
        await parsed

    """
    Open a peer swarm
    Destroys every previous swarm, adds the descriptor, picks the playable
    file and loads its blob into the sink.

    @return None
    @throws NoPlayableFileInSwarm: When no file matches the allow-list
    """
    async def _open_peer_swarm(self, handle: PlaybackHandle, locator: str):

        # superseded, nothing to open
        if not self._is_current(handle):
            return

        # only one swarm may be active
        for previous in list(getattr(self._swarm_engine, 'torrents', None) or []):
            self._destroy_quietly(previous, "swarm")

        # add the descriptor and wait for its metadata
        ready = self._new_waiter()
        swarm = self._swarm_engine.add(locator, self._guard(handle, lambda s=None: self._settle(ready, s)))
        self._swarm = swarm
        swarm.on('error', self._guard(handle, lambda reason='': self._report_fatal(
            handle, TransportFatalError(f"Swarm error: {reason}", handle.channel))))
        swarm = await ready or swarm

        # find the media file
        media = pick_playable_file(getattr(swarm, 'files', []))
        if media is None:
            raise NoPlayableFileInSwarm(f"No playable media file in swarm for '{handle.channel.name}'", handle.channel)

        # materialize it as a blob
        blob = self._new_waiter()
        media.get_blob_url(self._guard(handle, lambda err, url=None: self._settle_blob(handle, blob, err, url)))
        url = await blob

        # the blob becomes the session's locator
        logger.info(f"Swarm file '{media.name}' ready for '{handle.channel.name}'")
        handle.effective_url = url
        await self._load_sink(handle, url)

    """
    Load a locator straight into the sink

    @return None
    """
    async def _load_sink(self, handle: PlaybackHandle, url: str):

        # wait for the sink to be able to play
        can_play = self._new_waiter()
        self._sink_in_use = True
        self._sink.load(
            url,
            self._guard(handle, lambda *args: self._settle(can_play)),
            self._guard(handle, lambda reason='': self._report_fatal(
                handle, TransportFatalError(f"Media error: {reason}", handle.channel)))
        )
        await can_play

    """
    Try to start playback on its own
    A rejected autoplay keeps the session ready.

    @return None
    """
    async def _autoplay(self, handle: PlaybackHandle):

        # a listener on the ready event may have moved on
        if not self._is_current(handle):
            return

        # try to play
        try:
            await self._sink.play()
        except AutoplayRejected as e:
            logger.info(f"Autoplay rejected for '{handle.channel.name}': {e}")
            return

        # made it
        if self._is_current(handle) and handle.state is PlaybackState.READY:
            self._transition(handle, PlaybackState.PLAYING)

    def _on_engine_error(self, handle: PlaybackHandle, fatal: bool, reason: str):

        # non fatal errors are recovered by the engine itself
        if not fatal:
            logger.warning(f"Segmented stream error for '{handle.channel.name}': {reason}")
            return
        self._report_fatal(handle, TransportFatalError(f"Segmented stream error: {reason}", handle.channel))

    def _settle_blob(self, handle: PlaybackHandle, waiter: asyncio.Future, err, url):

        # a failed or empty blob is fatal
        if waiter.done():
            return
        if err is not None or not url:
            waiter.set_exception(TransportFatalError(f"Blob error: {err or 'no locator'}", handle.channel))
        else:
            waiter.set_result(url)

    """
    Report a fatal transport error
    During acquisition the pending wait fails, afterwards the session fails
    directly.

    @return None
    """
    def _report_fatal(self, handle: PlaybackHandle, error: PlaybackError):
        waiter = self._waiter
        if waiter is not None and not waiter.done():
            waiter.set_exception(error)
        else:
            self._fail(handle, error)

    """
    Fail a session
    Releases the transport and emits the failure event with the channel.

    @param handle: PlaybackHandle The failing session
    @param error: PlaybackError The failure
    @return None
    """
    def _fail(self, handle: PlaybackHandle, error: PlaybackError):

        # only the current, not yet finished session can fail
        if not self._is_current(handle) or handle.state in (PlaybackState.ERRORED, PlaybackState.CLOSED):
            return

        # release everything
        self._cancel_task()
        self._release_transport()

        # record and report
        if error.channel is None:
            error.channel = handle.channel
        handle.error_reason = error.reason
        handle.state = PlaybackState.ERRORED
        logger.warning(f"Playback of '{handle.channel.name}' failed: {error.reason}: {error}")
        self._emit(PlaybackEvent(
            state=PlaybackState.ERRORED,
            channel=handle.channel,
            error_reason=error.reason,
            error=error,
            generation=handle.generation
        ))

    """
    Tear down the current session
    Cancels the acquisition, releases the transport and closes a live handle.

    @return None
    """
    def _teardown(self):

        # stop the acquisition and release the transport
        self._cancel_task()
        self._release_transport()

        # close the handle if it was live
        handle = self._handle
        if handle is not None and handle.is_live:
            handle.state = PlaybackState.CLOSED
            self._emit(PlaybackEvent(
                state=PlaybackState.CLOSED,
                channel=handle.channel,
                generation=handle.generation
            ))

    def _cancel_task(self):

        # drop the pending wait
        waiter, self._waiter = self._waiter, None
        if waiter is not None and not waiter.done():
            waiter.cancel()

        # cancel the acquisition unless we are running inside it
        task, self._task = self._task, None
        if task is not None and not task.done():
            try:
                current = asyncio.current_task()
            except RuntimeError:
                current = None
            if task is not current:
                task.cancel()

    """
    Release the transport resources
    Segmented engine destroyed, swarm destroyed, sink unloaded.

    @return None
    """
    def _release_transport(self):

        # the segmented engine
        engine, self._engine = self._engine, None
        if engine is not None:
            self._destroy_quietly(engine, "segmented stream engine")

        # the swarm
        swarm, self._swarm = self._swarm, None
        if swarm is not None:
            self._destroy_quietly(swarm, "swarm")

        # the sink
        if self._sink_in_use:
            self._sink_in_use = False
            try:
                self._sink.unload()
            except Exception as e:
                logger.error(f"Failed to unload media sink: {e}")

    def _destroy_quietly(self, resource, label: str):
        try:
            resource.destroy()
        except Exception as e:
            logger.error(f"Failed to destroy {label}: {e}")

    def _new_waiter(self) -> asyncio.Future:
        self._waiter = asyncio.get_running_loop().create_future()
        return self._waiter

    @staticmethod
    def _settle(waiter: asyncio.Future, value=None):
        if not waiter.done():
            waiter.set_result(value)

    def _is_current(self, handle: PlaybackHandle) -> bool:
        return handle is self._handle and handle.generation == self._generation

    """
    Wrap an engine callback with its generation
    Calls from a superseded attempt are dropped.

    @param handle: PlaybackHandle The attempt registering the callback
    @param callback: callable The callback
    @return callable: The guarded callback
    """
    def _guard(self, handle: PlaybackHandle, callback: Callable) -> Callable:

        def guarded(*args, **kwargs):
            if not self._is_current(handle):
                logger.debug(f"Dropping stale event from generation {handle.generation}")
                return None
            return callback(*args, **kwargs)

        return guarded

    def _transition(self, handle: PlaybackHandle, state: PlaybackState):
        handle.state = state
        self._emit(PlaybackEvent(
            state=state,
            channel=handle.effective_channel,
            generation=handle.generation
        ))

    def _emit(self, event: PlaybackEvent):

        # deliver to every listener, one failing listener does not stop the rest
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Playback listener failed on {event.state.value}: {e}")
