"""Multiplayer food-eating arena: game rules, client sessions and a TCP server."""

__version__ = "1.0.0"
__all__ = ["__version__"]