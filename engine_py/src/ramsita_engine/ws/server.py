"""
FastAPI WebSocket server for the Ramsita game.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import orjson
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..coordinator import Connection, GameCoordinator
from ..errors import INTERNAL_ERROR, INVALID_EVENT
from .events import create_ack

logger = logging.getLogger(__name__)


class WebSocketConnection(Connection):
    """Coordinator connection backed by a FastAPI WebSocket."""

    def __init__(self, websocket: WebSocket):
        super().__init__()
        self.websocket = websocket

    async def send(self, event: Dict[str, Any]) -> None:
        await self.websocket.send_text(orjson.dumps(event).decode())


def create_app(coordinator: Optional[GameCoordinator] = None) -> FastAPI:
    coordinator = coordinator or GameCoordinator()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await coordinator.start()
        yield
        await coordinator.shutdown()

    app = FastAPI(title="Ramsita Game Server", version=__version__, lifespan=lifespan)
    app.state.coordinator = coordinator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        return {"message": "Ramsita Game Server", "version": __version__}

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", **coordinator.stats()}

    @app.get("/rooms")
    async def list_rooms():
        return {"rooms": coordinator.list_rooms()}

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """Main WebSocket endpoint."""
        await websocket.accept()
        conn = WebSocketConnection(websocket)
        await coordinator.connect(conn)

        try:
            while True:
                raw_data = await websocket.receive_text()

                try:
                    data = orjson.loads(raw_data)
                except orjson.JSONDecodeError as e:
                    await conn.send(create_ack(None, None, False, INVALID_EVENT, f"Malformed JSON: {e}"))
                    continue

                try:
                    ack = await coordinator.handle_message(conn.id, data)
                except Exception as e:
                    logger.exception(f"Error handling event from {conn.id}: {e}")
                    request_id = data.get("requestId") if isinstance(data, dict) else None
                    ack = create_ack(None, request_id, False, INTERNAL_ERROR, "Internal server error")
                await conn.send(ack)

        except WebSocketDisconnect:
            logger.info(f"WebSocket disconnected: {conn.id}")
        except Exception as e:
            logger.error(f"WebSocket error: {e}")
        finally:
            await coordinator.disconnect(conn.id)

    return app
