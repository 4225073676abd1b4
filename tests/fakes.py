"""
Fake transport collaborators for the playback session tests

Each fake records what the session manager asked of it and lets the test
fire engine events by hand.
"""
import asyncio
from streamverse.exceptions import AutoplayRejected
from streamverse.services.engines import MediaSink, PeerSwarmEngine, SegmentedStreamEngine, Swarm, SwarmFile


async def settle(rounds: int = 5):
    """Let pending tasks run up to their next real wait"""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeSink(MediaSink):

    def __init__(self, autoplay: bool = True):
        self.autoplay = autoplay
        self.failure = None
        self.loads = []
        self.loaded = None
        self.unloads = 0
        self.plays = 0
        self.pauses = 0

    def load(self, url, on_can_play, on_error):
        self.loaded = url
        self.loads.append((url, on_can_play, on_error))

    def unload(self):
        self.loaded = None
        self.unloads += 1

    async def play(self):
        self.plays += 1
        if self.failure is not None:
            raise self.failure
        if not self.autoplay:
            raise AutoplayRejected("no user gesture")

    def pause(self):
        self.pauses += 1

    def can_play(self, index: int = -1):
        self.loads[index][1]()

    def error(self, reason: str = "decode error", index: int = -1):
        self.loads[index][2](reason)


class FakeSegmentedEngine(SegmentedStreamEngine):

    def __init__(self, fail_on_load: bool = False):
        self.handlers = {}
        self.source = None
        self.target = None
        self.destroyed = False
        self.fail_on_load = fail_on_load

    def load_source(self, url):
        if self.fail_on_load:
            raise RuntimeError("engine not supported")
        self.source = url

    def attach_target(self, sink):
        self.target = sink

    def on(self, event, handler):
        self.handlers.setdefault(event, []).append(handler)

    def destroy(self):
        self.destroyed = True

    def emit(self, event, *args):
        for handler in self.handlers.get(event, []):
            handler(*args)


class FakeSegmentedFactory:

    def __init__(self, fail_on_load: bool = False):
        self.engines = []
        self.fail_on_load = fail_on_load

    def __call__(self):
        engine = FakeSegmentedEngine(self.fail_on_load)
        self.engines.append(engine)
        return engine

    @property
    def live(self):
        return [e for e in self.engines if not e.destroyed]


class FakeSwarmFile(SwarmFile):

    def __init__(self, name, url=None, error=None):
        self.name = name
        self.url = url if url is not None else f"blob:{name}"
        self.failure = error

    def get_blob_url(self, callback):
        callback(self.failure, None if self.failure else self.url)


class FakeSwarm(Swarm):

    def __init__(self, engine, descriptor, files, on_ready):
        self.engine = engine
        self.descriptor = descriptor
        self.files = files
        self.on_ready = on_ready
        self.handlers = {}
        self.destroyed = False

    def on(self, event, handler):
        self.handlers.setdefault(event, []).append(handler)

    def destroy(self):
        self.destroyed = True
        if self in self.engine.torrents:
            self.engine.torrents.remove(self)

    def ready(self):
        self.on_ready(self)

    def emit(self, event, *args):
        for handler in self.handlers.get(event, []):
            handler(*args)


class FakeSwarmEngine(PeerSwarmEngine):

    def __init__(self, files=None):
        self.torrents = []
        self.added = []
        self.files = files if files is not None else [FakeSwarmFile("readme.txt"), FakeSwarmFile("movie.mkv")]

    def add(self, descriptor, on_ready):
        swarm = FakeSwarm(self, descriptor, list(self.files), on_ready)
        self.torrents.append(swarm)
        self.added.append(swarm)
        return swarm

    @property
    def live(self):
        return [s for s in self.added if not s.destroyed]
