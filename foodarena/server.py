"""TCP front end: accepts clients and drives the round clock."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
from typing import Optional

from .game import Game
from .session import ClientSession

logger = logging.getLogger(__name__)

DEFAULT_PORT = 12345


class GameServer:
    """Listens for clients and runs one :class:`Game` for all of them."""

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = DEFAULT_PORT,
        game: Optional[Game] = None,
        tick_interval: float = 1.0,
        broadcast_interval: float = Game.BROADCAST_INTERVAL_MS / 1000.0,
    ) -> None:
        self.host = host
        self.port = port
        self.game = game if game is not None else Game()
        self.tick_interval = tick_interval
        self.broadcast_interval = broadcast_interval
        self._server: Optional[asyncio.AbstractServer] = None
        self._clock: Optional[asyncio.Task] = None
        self._sessions: set[ClientSession] = set()
        self._stopped: Optional[asyncio.Event] = None
        self._stop_task: Optional[asyncio.Task] = None

    @property
    def serving(self) -> bool:
        """Whether the server is listening."""
        return self._server is not None

    async def start(self) -> None:
        """Bind the listening socket and start the round clock."""
        if self._server is not None:
            return
        logger.info("Game Server starting on port %d", self.port)
        self._stopped = asyncio.Event()
        self._server = await asyncio.start_server(self._on_connect, self.host, self.port)
        self.port = self._server.sockets[0].getsockname()[1]
        self._clock = asyncio.create_task(self._drive_rounds())
        logger.info("Listening on %s:%d", self.host, self.port)

    async def stop(self) -> None:
        """End any round in progress, stop listening and drop all clients."""
        if self._server is None:
            return
        server, self._server = self._server, None
        if self.game.running:
            self.game.end_game()
        if self._clock is not None:
            self._clock.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._clock
            self._clock = None
        server.close()
        for session in list(self._sessions):
            session.close()
        await server.wait_closed()
        if self._stopped is not None:
            self._stopped.set()
        logger.info("Server stopped.")

    async def serve_forever(self) -> None:
        """Run until SIGINT or SIGTERM arrives, or until :meth:`stop` is called."""
        await self.start()
        loop = asyncio.get_running_loop()
        installed = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._on_signal)
            except (NotImplementedError, RuntimeError):
                continue
            installed.append(sig)
        try:
            assert self._stopped is not None
            await self._stopped.wait()
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)
            await self.stop()

    def _on_signal(self) -> None:
        logger.warning("Shutdown signal received. Stopping server...")
        if self._stop_task is None:
            self._stop_task = asyncio.ensure_future(self.stop())

    async def _on_connect(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        peer = writer.get_extra_info("peername")
        logger.info("New client connected from: %s", peer[0] if peer else "unknown")
        session = ClientSession(reader, writer, self.game)
        self._sessions.add(session)
        try:
            await session.run()
        finally:
            self._sessions.discard(session)

    async def _drive_rounds(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            while not self.game.running:
                await asyncio.sleep(self.broadcast_interval)
            start = loop.time()
            next_tick = start + self.tick_interval
            next_broadcast = start + self.broadcast_interval
            while self.game.running:
                await asyncio.sleep(max(0.0, min(next_tick, next_broadcast) - loop.time()))
                now = loop.time()
                if now >= next_broadcast and self.game.running:
                    self.game.broadcast_game_state()
                    next_broadcast += self.broadcast_interval
                if now >= next_tick and self.game.running:
                    self.game.tick()
                    next_tick += self.tick_interval


def _port(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {text!r}") from None
    if not 0 <= value <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range: {value}")
    return value


def main(argv: Optional[list[str]] = None) -> int:
    """Run the game server until it is signalled to stop."""
    parser = argparse.ArgumentParser(prog="foodarena", description="Run the food arena game server.")
    parser.add_argument("--host", default="0.0.0.0", help="address to listen on")
    parser.add_argument("--port", type=_port, default=DEFAULT_PORT, help="TCP port to listen on")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG,
        format="[%(asctime)s.%(msecs)03d] [%(levelname)s] [thread %(thread)d] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Application starting...")
    try:
        asyncio.run(GameServer(args.host, args.port).serve_forever())
    except KeyboardInterrupt:
        logger.warning("Interrupted.")
    except Exception as exc:
        logger.critical("An unhandled exception occurred: %s", exc)
        return 1
    logger.info("Application finished.")
    return 0