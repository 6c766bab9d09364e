"""Plain data carried between the game and its clients."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar


@dataclass
class FoodData:
    """A piece of food lying on the field."""

    id: int
    x: float
    y: float

    RADIUS: ClassVar[float] = 20.0

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation of this food."""
        return {"id": self.id, "x": self.x, "y": self.y}


@dataclass
class PlayerData:
    """A player's public state."""

    id: int
    name: str
    x: float
    y: float
    color_hex: str
    score: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation of this player."""
        return {
            "id": self.id,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "score": self.score,
            "colorHex": self.color_hex,
        }