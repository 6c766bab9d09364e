import json
import random

import pytest

from foodarena.game import Game
from foodarena.models import FoodData


class FakeSession:
    def __init__(self):
        self.player_id = -1
        self.raw = []

    def send_message(self, message):
        self.raw.append(message)

    @property
    def messages(self):
        return [json.loads(m) for m in self.raw]

    def of_type(self, kind):
        return [m for m in self.messages if m["type"] == kind]


@pytest.fixture
def game():
    return Game(rng=random.Random(0))


def connect(game, name):
    session = FakeSession()
    game.handle_client_connect(session, name)
    return session


def test_new_game_has_full_food_and_is_idle(game):
    assert len(game.foods) == Game.MAX_FOODS_ON_SCREEN
    assert game.running is False
    assert game.remaining_seconds == Game.GAME_DURATION_SECONDS


def test_food_lies_within_field(game):
    r = FoodData.RADIUS
    for food in game.foods:
        assert r <= food.x <= Game.SCREEN_WIDTH - r
        assert r <= food.y <= Game.SCREEN_HEIGHT - r


def test_food_ids_are_unique(game):
    ids = [f.id for f in game.foods]
    assert len(set(ids)) == len(ids)


def test_spawn_refused_when_full(game):
    assert game.spawn_new_food(True) is None
    assert len(game.foods) == Game.MAX_FOODS_ON_SCREEN


def test_connect_sends_welcome_and_starts_game(game):
    s = connect(game, "alice")
    welcome = s.messages[0]
    assert welcome["type"] == "WELCOME"
    assert welcome["playerId"] == s.player_id
    state = welcome["initialGameState"]
    assert state["timer"] == Game.GAME_DURATION_SECONDS
    assert state["players"][0]["name"] == "alice"
    assert state["players"][0]["colorHex"] == "#FF0000"
    assert state["players"][0]["x"] == Game.SCREEN_WIDTH / 2
    assert state["players"][0]["y"] == Game.SCREEN_HEIGHT / 2
    assert game.running is True


def test_colors_follow_client_count(game):
    connect(game, "a")
    connect(game, "b")
    colors = [p.color_hex for p in game.players.values()]
    assert colors == list(Game.PLAYER_COLORS[:2])


def test_player_joined_goes_to_others_only(game):
    first = connect(game, "a")
    second = connect(game, "b")
    joined = first.of_type("PLAYER_JOINED")
    assert [m["player"]["name"] for m in joined] == ["b"]
    assert second.of_type("PLAYER_JOINED") == []


def test_server_full_rejects_fourth(game):
    for name in ("a", "b", "c"):
        connect(game, name)
    extra = connect(game, "d")
    assert extra.raw == ['{"type":"SERVER_FULL"}']
    assert extra.player_id == -1
    assert len(game.players) == Game.MAX_PLAYERS


def test_remove_client_broadcasts_left(game):
    a = connect(game, "a")
    b = connect(game, "b")
    game.remove_client(b)
    assert b.player_id not in game.players
    left = a.of_type("PLAYER_LEFT")
    assert [m["playerId"] for m in left] == [b.player_id]
    assert game.running is True


def test_remove_unassigned_session_is_ignored(game):
    a = connect(game, "a")
    game.remove_client(FakeSession())
    assert list(game.players) == [a.player_id]


def test_removing_last_client_ends_game(game):
    a = connect(game, "a")
    game.remove_client(a)
    assert game.running is False
    assert game.clients == {}


def test_update_position(game):
    a = connect(game, "a")
    game.update_player_position(a.player_id, 11.0, 22.0)
    player = game.players[a.player_id]
    assert (player.x, player.y) == (11.0, 22.0)


def test_update_unknown_player_ignored(game):
    a = connect(game, "a")
    before = game.game_state()
    game.update_player_position(a.player_id + 100, 1.0, 1.0)
    assert game.game_state() == before


def test_eating_close_food(game):
    a = connect(game, "a")
    food = game.foods[0]
    game.update_player_position(a.player_id, food.x, food.y)
    max_id = max(f.id for f in game.foods)
    assert game.handle_player_ate_food(a.player_id, food.id) is True
    assert game.players[a.player_id].score == 10
    assert food.id not in [f.id for f in game.foods]
    assert len(game.foods) == Game.MAX_FOODS_ON_SCREEN
    eaten = a.of_type("FOOD_EATEN")[0]
    assert eaten["foodId"] == food.id
    assert eaten["eaterPlayerId"] == a.player_id
    assert eaten["newScore"] == 10
    spawned = a.of_type("FOOD_SPAWNED")[0]
    assert spawned["food"]["id"] > max_id


def test_eating_far_food_rejected(game):
    a = connect(game, "a")
    food = game.foods[0]
    game.update_player_position(a.player_id, food.x + 100.0, food.y)
    assert game.handle_player_ate_food(a.player_id, food.id) is False
    assert game.players[a.player_id].score == 0
    assert food in game.foods


def test_eating_unknown_food_rejected(game):
    a = connect(game, "a")
    missing = max(f.id for f in game.foods) + 1
    assert game.handle_player_ate_food(a.player_id, missing) is False
    assert a.of_type("FOOD_EATEN") == []


def test_tick_counts_down_and_ends(game):
    a = connect(game, "a")
    for _ in range(Game.GAME_DURATION_SECONDS - 1):
        assert game.tick() is True
    assert game.remaining_seconds == 1
    assert game.tick() is False
    assert game.running is False
    over = a.of_type("GAME_OVER")
    assert over[0]["winnerId"] == a.player_id
    assert over[0]["winnerName"] == "a"


def test_tick_when_idle_does_nothing(game):
    assert game.tick() is False
    assert game.remaining_seconds == Game.GAME_DURATION_SECONDS


def test_end_game_tie(game):
    a = connect(game, "a")
    b = connect(game, "b")
    game.end_game()
    over = a.of_type("GAME_OVER")[0]
    assert over["winnerId"] == -1
    assert over["winnerName"] == "Tie"
    assert {s["id"] for s in over["scores"]} == {a.player_id, b.player_id}


def test_end_game_later_higher_score_wins(game):
    a = connect(game, "a")
    connect(game, "b")
    c = connect(game, "c")
    game.players[c.player_id].score = 10
    game.end_game()
    over = a.of_type("GAME_OVER")[0]
    assert over["winnerId"] == c.player_id
    assert over["winnerName"] == "c"


def test_end_game_twice_broadcasts_once(game):
    a = connect(game, "a")
    game.end_game()
    game.end_game()
    assert len(a.of_type("GAME_OVER")) == 1


def test_start_game_resets_scores(game):
    a = connect(game, "a")
    game.players[a.player_id].score = 10
    game.end_game()
    game.start_game()
    assert game.players[a.player_id].score == 0
    assert game.remaining_seconds == Game.GAME_DURATION_SECONDS
    assert len(game.foods) == Game.MAX_FOODS_ON_SCREEN


def test_broadcast_game_state(game):
    a = connect(game, "a")
    assert game.broadcast_game_state() is True
    update = a.of_type("GAME_STATE_UPDATE")[0]
    assert update["timer"] == game.remaining_seconds
    assert len(update["foods"]) == Game.MAX_FOODS_ON_SCREEN
    assert update["players"] == [game.players[a.player_id].to_dict()]


def test_broadcast_game_state_idle(game):
    a = connect(game, "a")
    game.end_game()
    count = len(a.raw)
    assert game.broadcast_game_state() is False
    assert len(a.raw) == count


def test_broadcast_excludes(game):
    a = connect(game, "a")
    b = connect(game, "b")
    game.broadcast('{"type":"X"}', exclude=a)
    assert a.raw[-1] != '{"type":"X"}'
    assert b.raw[-1] == '{"type":"X"}'