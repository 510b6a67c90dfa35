"""Ram-Sita card game engine: rooms, turn protocol and websocket server."""

__version__ = "1.0.0"
