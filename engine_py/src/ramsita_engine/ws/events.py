"""
WebSocket event models and validation.

Wire payloads use camelCase keys; the models expose snake_case attributes.
"""

import time
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel


class EventType(str, Enum):
    """Inbound event types."""
    CREATE_ROOM = "create_room"
    JOIN_ROOM = "join_room"
    REJOIN_ROOM = "rejoin_room"
    LEAVE_ROOM = "leave_room"
    START_GAME = "start_game"
    PASS_CARD = "pass_card"
    CHAT_MESSAGE = "chat_message"
    JOIN_RANDOM_MATCH = "join_random_match"
    LEAVE_RANDOM_MATCH = "leave_random_match"
    REQUEST_STATE = "request_state"


class OutboundEventType(str, Enum):
    """Outbound event types."""
    ACK = "ack"
    PLAYER_JOINED = "player_joined"
    PLAYER_LEFT = "player_left"
    PLAYER_DISCONNECTED = "player_disconnected"
    PLAYER_RECONNECTED = "player_reconnected"
    GAME_STATE_UPDATE = "game_state_update"
    GAME_STARTED = "game_started"
    GAME_ENDED = "game_ended"
    CHAT_MESSAGE = "chat_message"
    RANDOM_MATCH_FOUND = "random_match_found"


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Inbound event models
class BaseEvent(WireModel):
    """Base event model."""
    type: EventType
    request_id: Optional[str] = None


class CreateRoomEvent(BaseEvent):
    type: EventType = EventType.CREATE_ROOM
    player_name: str = Field(..., min_length=1, max_length=30)
    with_bots: bool = False
    client_token: Optional[str] = Field(default=None, max_length=100)


class JoinRoomEvent(BaseEvent):
    type: EventType = EventType.JOIN_ROOM
    room_id: str = Field(..., min_length=1, max_length=20)
    player_name: str = Field(..., min_length=1, max_length=30)
    client_token: Optional[str] = Field(default=None, max_length=100)


class RejoinRoomEvent(BaseEvent):
    type: EventType = EventType.REJOIN_ROOM
    room_id: str = Field(..., min_length=1, max_length=20)
    player_name: str = Field(..., min_length=1, max_length=30)
    client_token: Optional[str] = Field(default=None, max_length=100)


class LeaveRoomEvent(BaseEvent):
    type: EventType = EventType.LEAVE_ROOM
    room_id: str = Field(..., min_length=1, max_length=20)


class StartGameEvent(BaseEvent):
    type: EventType = EventType.START_GAME
    room_id: str = Field(..., min_length=1, max_length=20)


class PassCardEvent(BaseEvent):
    type: EventType = EventType.PASS_CARD
    room_id: str = Field(..., min_length=1, max_length=20)
    from_player_id: int = Field(..., ge=0)
    card_id: int = Field(..., ge=1)
    to_player_id: int = Field(..., ge=0)


class ChatMessageEvent(BaseEvent):
    type: EventType = EventType.CHAT_MESSAGE
    content: str = Field(..., min_length=1, max_length=500)
    sender: str = Field(..., min_length=1, max_length=30)


class JoinRandomMatchEvent(BaseEvent):
    type: EventType = EventType.JOIN_RANDOM_MATCH
    player_name: str = Field(..., min_length=1, max_length=30)
    client_token: Optional[str] = Field(default=None, max_length=100)


class LeaveRandomMatchEvent(BaseEvent):
    type: EventType = EventType.LEAVE_RANDOM_MATCH


class RequestStateEvent(BaseEvent):
    type: EventType = EventType.REQUEST_STATE


# Union type for all inbound events
InboundEvent = Union[
    CreateRoomEvent,
    JoinRoomEvent,
    RejoinRoomEvent,
    LeaveRoomEvent,
    StartGameEvent,
    PassCardEvent,
    ChatMessageEvent,
    JoinRandomMatchEvent,
    LeaveRandomMatchEvent,
    RequestStateEvent,
]

EVENT_MODELS = {
    EventType.CREATE_ROOM: CreateRoomEvent,
    EventType.JOIN_ROOM: JoinRoomEvent,
    EventType.REJOIN_ROOM: RejoinRoomEvent,
    EventType.LEAVE_ROOM: LeaveRoomEvent,
    EventType.START_GAME: StartGameEvent,
    EventType.PASS_CARD: PassCardEvent,
    EventType.CHAT_MESSAGE: ChatMessageEvent,
    EventType.JOIN_RANDOM_MATCH: JoinRandomMatchEvent,
    EventType.LEAVE_RANDOM_MATCH: LeaveRandomMatchEvent,
    EventType.REQUEST_STATE: RequestStateEvent,
}


# Outbound event models
class OutboundEvent(WireModel):
    type: OutboundEventType
    timestamp: float = Field(default_factory=time.time)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class AckEvent(OutboundEvent):
    type: OutboundEventType = OutboundEventType.ACK
    event: Optional[str] = None
    request_id: Optional[str] = None
    success: bool
    error: Optional[str] = None
    message: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class PlayerEvent(OutboundEvent):
    """player_joined / player_left / player_disconnected / player_reconnected."""
    player_id: int
    player_name: str


class GameStateUpdateEvent(OutboundEvent):
    type: OutboundEventType = OutboundEventType.GAME_STATE_UPDATE
    state: Dict[str, Any]


class GameStartedEvent(OutboundEvent):
    type: OutboundEventType = OutboundEventType.GAME_STARTED
    players: List[Dict[str, Any]]
    start_seat: int


class GameEndedEvent(OutboundEvent):
    type: OutboundEventType = OutboundEventType.GAME_ENDED
    winner: Optional[Dict[str, Any]]
    winning_players: List[Dict[str, Any]]
    finished_positions: List[int]


class ChatBroadcastEvent(OutboundEvent):
    type: OutboundEventType = OutboundEventType.CHAT_MESSAGE
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    sender: str
    content: str
    sent_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class RandomMatchFoundEvent(OutboundEvent):
    type: OutboundEventType = OutboundEventType.RANDOM_MATCH_FOUND
    room_id: str
    player_id: int
    with_bots: bool = False


def parse_inbound_event(data: Dict[str, Any]) -> InboundEvent:
    """
    Parse raw event data into appropriate event model.

    Args:
        data: Raw event data from WebSocket

    Returns:
        Parsed event model

    Raises:
        ValueError: If event type is invalid or data is malformed
    """
    if not isinstance(data, dict):
        raise ValueError("Event must be a JSON object")

    event_type = data.get("type")
    if not event_type:
        raise ValueError("Missing event type")

    try:
        event_type = EventType(event_type)
    except ValueError:
        raise ValueError(f"Invalid event type: {event_type}")

    event_class = EVENT_MODELS[event_type]
    try:
        return event_class.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid event data: {e.errors()[0]['msg']}")


def create_ack(event: Optional[str], request_id: Optional[str], success: bool = True,
               error: Optional[str] = None, message: Optional[str] = None,
               **data) -> Dict[str, Any]:
    """Create an acknowledgement for the calling connection."""
    return AckEvent(
        event=event,
        request_id=request_id,
        success=success,
        error=error,
        message=message,
        data=data,
    ).to_wire()


def create_player_event(kind: OutboundEventType, player_id: int, player_name: str) -> Dict[str, Any]:
    return PlayerEvent(type=kind, player_id=player_id, player_name=player_name).to_wire()


def create_state_event(state: Dict[str, Any]) -> Dict[str, Any]:
    return GameStateUpdateEvent(state=state).to_wire()


def create_game_started_event(players: List[Dict[str, Any]], start_seat: int) -> Dict[str, Any]:
    return GameStartedEvent(players=players, start_seat=start_seat).to_wire()


def create_game_ended_event(result: Dict[str, Any]) -> Dict[str, Any]:
    return GameEndedEvent(
        winner=result["winner"],
        winning_players=result["winningPlayers"],
        finished_positions=result["finishedPositions"],
    ).to_wire()


def create_chat_event(sender: str, content: str) -> Dict[str, Any]:
    return ChatBroadcastEvent(sender=sender, content=content).to_wire()


def create_match_found_event(room_id: str, player_id: int, with_bots: bool) -> Dict[str, Any]:
    return RandomMatchFoundEvent(room_id=room_id, player_id=player_id, with_bots=with_bots).to_wire()
