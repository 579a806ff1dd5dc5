"""
WebSocket replay server.

Runs one shared replay, ticks it at a fixed frame rate and streams every
frame, log entry and effect to connected browser consoles. Clients send
control messages (play, pause, restart, set_speed, ...) back over the socket.
"""

import json
import asyncio
import logging
from functools import partial

import websockets
from websockets.http11 import Response
from websockets.datastructures import Headers

from replay import MissionError, ReplayEngine, ReplayView, load_config, load_mission
from replay.controls import ControlError, dispatch
from replay.mission import Mission
from replay.views import Effect, Frame, LogEntry

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _log_entry_dict(entry: LogEntry) -> dict:
    return {
        "time": round(entry.time, 3),
        "clock": entry.clock,
        "event_type": entry.type.value,
        "text": entry.text,
        "event_time": entry.event_time,
    }


class BroadcastView(ReplayView):
    """Queues fan-out output as JSON messages for the socket clients."""

    name = "broadcast"

    def __init__(self):
        self.outbox: list[str] = []
        self.backlog: list[dict] = []  # log for the current epoch, for late joiners

    def _queue(self, msg_type: str, data: dict):
        self.outbox.append(json.dumps({"type": msg_type, **data}, default=str))

    def on_reset(self):
        self.backlog.clear()
        self._queue("reset", {})

    def on_log(self, entry: LogEntry):
        data = _log_entry_dict(entry)
        self.backlog.append(data)
        self._queue("event", data)

    def on_effect(self, effect: Effect):
        self._queue("effect", {
            "kind": effect.kind.value,
            "lat": effect.lat,
            "lng": effect.lng,
            "actor": effect.actor,
        })

    def on_frame(self, frame: Frame):
        self._queue("frame", {"frame": frame.to_dict()})

    def drain(self) -> list[str]:
        out, self.outbox = self.outbox, []
        return out


class ReplaySession:
    """A mission, its engine and the connected clients."""

    def __init__(self, mission: Mission, config, warnings=()):
        self.mission = mission
        self.config = config
        self.engine = ReplayEngine(mission, config)
        self.view = BroadcastView()
        self.engine.attach(self.view)
        self.clients: set = set()
        self.engine.boot(warnings)
        self.view.drain()  # boot output reaches clients through hello

    def hello(self) -> dict:
        frame = self.engine.last_frame
        return {
            "type": "hello",
            "mission": self.mission.to_dict(),
            "frame": frame.to_dict() if frame else None,
            "log": list(self.view.backlog),
        }

    def handle(self, raw: str) -> dict | None:
        """Apply one client message. Returns an error reply, if any."""
        try:
            msg = json.loads(raw)
        except json.JSONDecodeError:
            return {"type": "error", "message": "Invalid JSON"}
        try:
            dispatch(self.engine, msg)
        except ControlError as e:
            logger.warning(f"Rejected control: {e}")
            return {"type": "error", "message": str(e)}
        return None

    def step(self, wall_dt: float) -> list[str]:
        """Advance one frame and return the queued messages."""
        self.engine.tick(wall_dt)
        return self.view.drain()


# ── WebSocket handling ──


async def handle_websocket(websocket, session: ReplaySession):
    """Handle one console connection."""
    session.clients.add(websocket)
    logger.info(f"Console connected ({len(session.clients)} total)")
    try:
        await websocket.send(json.dumps(session.hello(), default=str))
        async for raw in websocket:
            reply = session.handle(raw)
            if reply is not None:
                await websocket.send(json.dumps(reply))
    except websockets.exceptions.ConnectionClosed:
        logger.info("Console disconnected")
    finally:
        session.clients.discard(websocket)


async def frame_driver(session: ReplaySession):
    """Tick the replay at the configured frame rate using measured wall time."""
    loop = asyncio.get_running_loop()
    interval = 1.0 / session.config.fps
    last = loop.time()
    while True:
        await asyncio.sleep(interval)
        now = loop.time()
        wall_dt, last = now - last, now
        for message in session.step(wall_dt):
            if session.clients:
                websockets.broadcast(session.clients, message)


def http_handler(connection, request, session: ReplaySession):
    """Serve the loaded mission on GET /mission.json (websockets process_request)."""
    if request.path == "/mission.json":
        body = json.dumps(session.mission.to_dict()).encode()
        return Response(
            200,
            "OK",
            Headers([
                ("Content-Type", "application/json"),
                ("Cache-Control", "no-store"),
                ("Content-Length", str(len(body))),
            ]),
            body,
        )
    return None  # Let websockets handle WebSocket upgrade


async def main():
    config = load_config()
    try:
        loaded = load_mission(config.resolve_mission_path(), default_duration_s=config.default_duration_s)
    except MissionError as e:
        logger.error(f"Console failed to boot: {e}")
        raise SystemExit(1)

    session = ReplaySession(loaded.mission, config, loaded.warnings)

    logger.info(f"Starting replay server on ws://{config.host}:{config.port}")
    logger.info(f"Mission: {loaded.mission.title} ({loaded.source})")

    async with websockets.serve(
        partial(handle_websocket, session=session),
        config.host,
        config.port,
        process_request=partial(http_handler, session=session),
        max_size=1024 * 1024,
    ):
        await frame_driver(session)


if __name__ == "__main__":
    asyncio.run(main())
