"""One connected client: newline-delimited JSON in, newline-delimited JSON out."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from .game import Game

logger = logging.getLogger(__name__)


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected a number, got {value!r}")
    return float(value)


def _integer(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected a number, got {value!r}")
    return int(value)


class ClientSession:
    """A client connection that feeds its messages into a :class:`Game`."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter, game: Game) -> None:
        self._reader = reader
        self._writer = writer
        self._game = game
        self._closed = False
        self.player_id = -1

    @property
    def closed(self) -> bool:
        """Whether the session has been closed."""
        return self._closed

    def send_message(self, message: str) -> None:
        """Queue one message for the client, followed by a newline."""
        if self._closed or self._writer.is_closing():
            return
        self._writer.write((message + "\n").encode("utf-8"))

    async def run(self) -> None:
        """Read and handle lines until the client goes away, then close."""
        try:
            while not self._closed:
                try:
                    line = await self._reader.readline()
                except (ConnectionError, asyncio.LimitOverrunError, ValueError) as exc:
                    logger.info("Client %d read error: %s", self.player_id, exc)
                    break
                if not line.endswith(b"\n"):
                    logger.info("Client %d read error: end of file", self.player_id)
                    break
                self.handle_message(line[:-1].decode("utf-8", errors="replace"))
                try:
                    await self._writer.drain()
                except ConnectionError as exc:
                    logger.error("Client %d write error: %s", self.player_id, exc)
                    break
        finally:
            self.close()

    def handle_message(self, message: str) -> None:
        """Dispatch one complete message received from the client."""
        logger.debug("Server received from client %d: %s", self.player_id, message)
        try:
            data = json.loads(message)
        except json.JSONDecodeError as exc:
            logger.error("Error parsing JSON from client %d: %s - %s", self.player_id, message, exc)
            return
        if not isinstance(data, dict):
            logger.error("Ignoring non-object message from client %d: %s", self.player_id, message)
            return

        kind = data.get("type", "")
        try:
            if kind == "CONNECT" and "playerName" in data:
                name = data["playerName"]
                if not isinstance(name, str):
                    raise TypeError(f"playerName must be a string, got {name!r}")
                self._game.handle_client_connect(self, name)
            elif self.player_id != -1:
                if kind == "PLAYER_UPDATE":
                    self._game.update_player_position(
                        self.player_id, _number(data["x"]), _number(data["y"])
                    )
                elif kind == "ATE_FOOD":
                    self._game.handle_player_ate_food(self.player_id, _integer(data["foodId"]))
        except (KeyError, TypeError) as exc:
            logger.error("Malformed %s message from client %d: %s", kind, self.player_id, exc)

    def close(self) -> None:
        """Leave the game and close the connection. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._game.remove_client(self)
        if not self._writer.is_closing():
            self._writer.close()