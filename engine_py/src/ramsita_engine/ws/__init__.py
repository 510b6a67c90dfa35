"""
WebSocket transport and wire events for the Ramsita game.

The FastAPI app lives in `ws.server` (see `create_app`).
"""
