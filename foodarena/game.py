"""Game rules and world state, independent of networking."""

from __future__ import annotations

import itertools
import json
import logging
import math
import random
from typing import Any, Optional, Protocol

from .models import FoodData, PlayerData

logger = logging.getLogger(__name__)


class Session(Protocol):
    """What the game needs from a connected client."""

    player_id: int

    def send_message(self, message: str) -> None: ...


def _dump(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


class Game:
    """The single game world: players, food, scores and the round clock."""

    MAX_PLAYERS = 3
    GAME_DURATION_SECONDS = 60
    SCREEN_WIDTH = 2400
    SCREEN_HEIGHT = 1600
    MAX_FOODS_ON_SCREEN = 50
    PLAYER_RADIUS = 30.0
    BROADCAST_INTERVAL_MS = 50
    FOOD_SCORE = 10
    PLAYER_COLORS = ("#FF0000", "#00FF00", "#0000FF", "#FFFF00", "#FF00FF")

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self.clients: dict[int, Session] = {}
        self.players: dict[int, PlayerData] = {}
        self.foods: list[FoodData] = []
        self._player_ids = itertools.count()
        self._food_ids = itertools.count()
        self.remaining_seconds = self.GAME_DURATION_SECONDS
        self.running = False
        for _ in range(self.MAX_FOODS_ON_SCREEN):
            self.spawn_new_food(False)

    def handle_client_connect(self, session: Session, player_name: str) -> None:
        """Admit a new player, or tell the session the server is full."""
        if len(self.players) >= self.MAX_PLAYERS:
            logger.warning("Client connection rejected, server full. Name: %s", player_name)
            session.send_message(_dump({"type": "SERVER_FULL"}))
            return

        player_id = next(self._player_ids)
        session.player_id = player_id
        color = self.PLAYER_COLORS[len(self.clients) % len(self.PLAYER_COLORS)]
        player = PlayerData(
            player_id,
            player_name,
            self.SCREEN_WIDTH / 2.0,
            self.SCREEN_HEIGHT / 2.0,
            color,
        )
        self.players[player_id] = player
        self.clients[player_id] = session

        session.send_message(
            _dump(
                {
                    "type": "WELCOME",
                    "playerId": player_id,
                    "initialGameState": self.game_state(),
                }
            )
        )
        self.broadcast(
            _dump({"type": "PLAYER_JOINED", "player": player.to_dict()}), session
        )
        logger.info(
            "Player %d (%s) joined. Total clients: %d",
            player_id,
            player_name,
            len(self.clients),
        )

        if not self.running and self.clients:
            self.start_game()

    def remove_client(self, session: Session) -> None:
        """Forget a session's player and end the round if nobody is left."""
        player_id = session.player_id
        if player_id == -1:
            return

        if self.clients.pop(player_id, None) is not None:
            self.players.pop(player_id, None)
            self.broadcast(_dump({"type": "PLAYER_LEFT", "playerId": player_id}))
            logger.info("Player %d removed. Total clients: %d", player_id, len(self.clients))

        if not self.clients and self.running:
            logger.info("All clients disconnected, ending game.")
            self.end_game()

    def broadcast(self, message: str, exclude: Optional[Session] = None) -> None:
        """Send a message to every client except ``exclude``."""
        recipients = [c for c in self.clients.values() if c is not exclude]
        for client in recipients:
            client.send_message(message)

    def update_player_position(self, player_id: int, x: float, y: float) -> None:
        """Record a player's reported position; unknown players are ignored."""
        player = self.players.get(player_id)
        if player is not None:
            player.x = float(x)
            player.y = float(y)

    def handle_player_ate_food(self, player_id: int, food_id: int) -> bool:
        """Check a reported meal and apply it. Returns whether it was accepted."""
        player = self.players.get(player_id)
        if player is None:
            return False

        food = next((f for f in self.foods if f.id == food_id), None)
        if food is None:
            return False

        distance = math.hypot(player.x - food.x, player.y - food.y)
        if distance >= self.PLAYER_RADIUS + FoodData.RADIUS:
            logger.warning(
                "Player %d reported eating food %d but server collision check failed. Dist: %s",
                player_id,
                food_id,
                distance,
            )
            return False

        self.foods.remove(food)
        player.score += self.FOOD_SCORE
        logger.info("Player %d ate food %d. New score: %d", player_id, food_id, player.score)
        self.broadcast(
            _dump(
                {
                    "type": "FOOD_EATEN",
                    "foodId": food.id,
                    "eaterPlayerId": player_id,
                    "newScore": player.score,
                }
            )
        )
        self.spawn_new_food(True)
        return True

    def spawn_new_food(self, broadcast: bool) -> Optional[FoodData]:
        """Add one food at a random spot if there is room for it."""
        if len(self.foods) >= self.MAX_FOODS_ON_SCREEN:
            return None
        radius = FoodData.RADIUS
        food = FoodData(
            next(self._food_ids),
            self._rng.uniform(radius, self.SCREEN_WIDTH - radius),
            self._rng.uniform(radius, self.SCREEN_HEIGHT - radius),
        )
        self.foods.append(food)
        if broadcast:
            self.broadcast(_dump({"type": "FOOD_SPAWNED", "food": food.to_dict()}))
        return food

    def game_state(self) -> dict[str, Any]:
        """Return the timer, players and foods as a wire-ready dict."""
        return {
            "timer": self.remaining_seconds,
            "players": [p.to_dict() for p in self.players.values()],
            "foods": [f.to_dict() for f in self.foods],
        }

    def start_game(self) -> None:
        """Begin a new round: reset the clock, scores and food."""
        if self.running:
            logger.info("StartGame called but game already running.")
            return
        logger.info("Starting a new game...")
        self.remaining_seconds = self.GAME_DURATION_SECONDS
        self.running = True
        for player in self.players.values():
            player.score = 0
        self.foods.clear()
        for _ in range(self.MAX_FOODS_ON_SCREEN):
            self.spawn_new_food(False)

    def end_game(self) -> None:
        """Finish the round and announce the winner and final scores."""
        if not self.running:
            return
        self.running = False
        logger.info("Ending game.")

        winner: Optional[PlayerData] = None
        max_score = -1
        scores = []
        for player in self.players.values():
            scores.append({"id": player.id, "name": player.name, "score": player.score})
            if player.score > max_score:
                max_score = player.score
                winner = player
            elif player.score == max_score and max_score != -1:
                winner = None

        if winner is not None:
            winner_name = winner.name
        else:
            winner_name = "Tie" if max_score != -1 else "N/A"

        self.broadcast(
            _dump(
                {
                    "type": "GAME_OVER",
                    "winnerId": winner.id if winner is not None else -1,
                    "winnerName": winner_name,
                    "scores": scores,
                }
            )
        )
        logger.info("GAME_OVER message broadcast.")

    def tick(self) -> bool:
        """Advance the round clock by one second. Returns whether the round goes on."""
        if not self.running:
            return False
        if self.remaining_seconds > 0:
            self.remaining_seconds -= 1
        if self.remaining_seconds <= 0:
            self.end_game()
        return self.running

    def broadcast_game_state(self) -> bool:
        """Send the full state to every client. Returns whether the round goes on."""
        if not self.running:
            return False
        self.broadcast(_dump({"type": "GAME_STATE_UPDATE", **self.game_state()}))
        return True