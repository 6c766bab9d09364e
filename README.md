# foodarena

foodarena is a small multiplayer arena game server. Players move around a
2400 × 1600 field and eat food pellets. Each pellet is worth 10 points. A round
lasts 60 seconds, and when it ends the player with the highest score wins.
The server holds at most 3 players and 50 pellets at a time.

## Running the server

```
pip install .
foodarena
```

By default the server listens on TCP port 12345 on all IPv4 interfaces
(`0.0.0.0`). Two options change this:

```
foodarena --host 127.0.0.1 --port 4000
```

`--port` takes a value from 0 to 65535. The server logs at debug level to
standard error. It runs until it receives SIGINT or SIGTERM. When that happens
it ends any round in progress, closes every client connection and exits.

## How a round runs

- A round starts when a player joins and no round is running. Starting a round
  resets the clock to 60 seconds, sets every score to 0 and lays out 50 fresh
  pellets.
- While the round runs, the clock counts down once a second and the full game
  state goes to every client every 50 ms.
- The round ends when the clock reaches zero or when the last player leaves.
  Every client then receives `GAME_OVER`. The next round starts when another
  player joins.
- A player may claim a pellet only while the player's centre lies less than
  50 units from the pellet's centre (a player radius of 30 plus a pellet radius
  of 20). When a claim is accepted, a new pellet appears at a random spot.

## Protocol

Each message is one JSON object on a line of its own, ended by `\n`, and is
encoded as UTF-8. The server writes compact JSON with sorted keys.

### Client to server

| type            | fields          | meaning                                          |
|-----------------|-----------------|--------------------------------------------------|
| `CONNECT`       | `playerName`    | join the game                                    |
| `PLAYER_UPDATE` | `x`, `y`        | report the player's position                     |
| `ATE_FOOD`      | `foodId`        | claim a pellet; the server checks the collision  |

The server ignores `PLAYER_UPDATE` and `ATE_FOOD` until a `CONNECT` has been
accepted. It logs lines that are not valid JSON, are not JSON objects, or have
missing or wrongly typed fields, and otherwise ignores them. The connection
stays open.

### Server to client

- `WELCOME`: sent to a player who joins, with `playerId` and `initialGameState`
  (`timer`, `players`, `foods`).
- `SERVER_FULL`: the server already has 3 players. The connection stays open.
- `PLAYER_JOINED`: sent to the other players, with `player` (`id`, `name`,
  `x`, `y`, `score`, `colorHex`).
- `PLAYER_LEFT`: a player disconnected, with `playerId`.
- `FOOD_EATEN`: with `foodId`, `eaterPlayerId` and `newScore`.
- `FOOD_SPAWNED`: with `food` (`id`, `x`, `y`).
- `GAME_STATE_UPDATE`: with `timer`, `players` and `foods`.
- `GAME_OVER`: with `winnerId`, `winnerName` and `scores` (a list of `id`,
  `name`, `score`). If two or more players share the top score, `winnerId` is
  `-1` and `winnerName` is `"Tie"`. If there are no players, `winnerName` is
  `"N/A"`.

## Using it as a library

- `foodarena.models` holds the `FoodData` and `PlayerData` dataclasses. Each has
  a `to_dict()` method that returns its wire form.
- `foodarena.game.Game` holds the rules and the world state and does no
  networking. It accepts an optional `random.Random` so that tests can be
  repeated. A session is any object with a `player_id` attribute and a
  `send_message(str)` method. `tick()` moves the clock on by one second, and
  `broadcast_game_state()` sends the state. Both return whether the round is
  still running.
- `foodarena.session.ClientSession` wraps an asyncio stream reader and writer
  pair and feeds each line it reads into a `Game`.
- `foodarena.server.GameServer(host, port, game, tick_interval,
  broadcast_interval)` runs the TCP listener and the round clock. The
  coroutines `start()`, `stop()` and `serve_forever()` control it. With port 0
  the server binds to a free port, and `port` holds that port after `start()`.
- `foodarena.server.main(argv=None)` is the `foodarena` command.

## What it does not do

The package is only the server. It has no game client and draws nothing on
screen. It keeps no scores or players between runs.

## Development

```
pip install -e ".[test]"
pytest
```