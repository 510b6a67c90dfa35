"""
Session coordinator: maps connections to rooms, routes inbound actions to the
owning GameRoom and fans the resulting state out to every member.

One GameCoordinator owns all process-wide state (room registry, connection
map, matchmaking queue, timers). Every mutation of a room and the broadcasts
that follow it run under that room's lock, so members see updates in the
order they were applied.
"""

import asyncio
import logging
import random
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from .advisory import (
    Advisor, NullAdvisor, ask, bot_mood, fallback_commentary, fallback_dialogue
)
from .bots import GreedyBot
from .constants import GAME_SENDER, STATE_ACTIVE, STATE_ENDED, STATE_WAITING
from .engine import GameRoom
from .errors import (
    GameError, INVALID_EVENT, InvalidStateError, RoomNotFoundError,
    UnauthorizedActionError
)
from .models import Player
from .rules import RuleConfig, default_rules
from .serialization import get_game_result, serialize_player
from .ws.events import (
    EventType, OutboundEventType, create_ack, create_chat_event,
    create_game_ended_event, create_game_started_event, create_match_found_event,
    create_player_event, create_state_event, parse_inbound_event
)

logger = logging.getLogger(__name__)


class Connection(ABC):
    """A client channel. Transports subclass this and implement send()."""

    def __init__(self, connection_id: Optional[str] = None):
        self.id = connection_id or uuid.uuid4().hex

    @abstractmethod
    async def send(self, event: Dict[str, Any]) -> None:
        pass


@dataclass
class QueueEntry:
    connection_id: str
    player_name: str
    client_token: Optional[str] = None


class GameCoordinator:
    def __init__(self, rules: Optional[RuleConfig] = None, advisor: Optional[Advisor] = None,
                 rng: Optional[random.Random] = None):
        self.rules = rules or default_rules
        self.advisor = advisor or NullAdvisor()
        self.rng = rng
        self.rooms: Dict[str, GameRoom] = {}
        self.connections: Dict[str, Connection] = {}
        self.connection_rooms: Dict[str, str] = {}
        self.match_queue: List[QueueEntry] = []
        self._registry_lock = asyncio.Lock()
        self._room_locks: Dict[str, asyncio.Lock] = {}
        self._bots: Dict[str, GreedyBot] = {}
        self._bot_tasks: Dict[str, asyncio.Task] = {}
        self._grace_timers: Dict[str, asyncio.Task] = {}
        self._grace_rooms: Dict[str, str] = {}
        self._match_timers: Dict[str, asyncio.Task] = {}
        self._side_tasks: Set[asyncio.Task] = set()
        self._handlers: Dict[EventType, Callable[[Connection, Any], Awaitable[Optional[Dict]]]] = {
            EventType.CREATE_ROOM: self._handle_create_room,
            EventType.JOIN_ROOM: self._handle_join_room,
            EventType.REJOIN_ROOM: self._handle_rejoin_room,
            EventType.LEAVE_ROOM: self._handle_leave_room,
            EventType.START_GAME: self._handle_start_game,
            EventType.PASS_CARD: self._handle_pass_card,
            EventType.CHAT_MESSAGE: self._handle_chat_message,
            EventType.JOIN_RANDOM_MATCH: self._handle_join_random_match,
            EventType.LEAVE_RANDOM_MATCH: self._handle_leave_random_match,
            EventType.REQUEST_STATE: self._handle_request_state,
        }

    # Lifecycle

    async def start(self) -> None:
        logger.info(
            f"Coordinator started (grace {self.rules.grace_period_seconds}s, "
            f"bot delay {self.rules.bot_move_delay}s, advisor {type(self.advisor).__name__})"
        )

    async def shutdown(self) -> None:
        """Cancel every timer and background task."""
        tasks = (
            list(self._bot_tasks.values()) +
            list(self._grace_timers.values()) +
            list(self._match_timers.values()) +
            list(self._side_tasks)
        )
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._bot_tasks.clear()
        self._grace_timers.clear()
        self._grace_rooms.clear()
        self._match_timers.clear()
        self._side_tasks.clear()
        self.match_queue.clear()
        logger.info(f"Coordinator shut down ({len(self.rooms)} rooms discarded)")
        self.rooms.clear()

    def stats(self) -> Dict[str, int]:
        return {
            "rooms": len(self.rooms),
            "connections": len(self.connections),
            "queue": len(self.match_queue),
        }

    def list_rooms(self) -> List[Dict[str, Any]]:
        """Lobby listing of rooms that still accept players."""
        return [room.get_public_info() for room in self.rooms.values()
                if room.state == STATE_WAITING and not room.is_full]

    # Connections

    async def connect(self, conn: Connection) -> None:
        self.connections[conn.id] = conn
        logger.info(f"Client connected: {conn.id}")

    async def disconnect(self, connection_id: str) -> None:
        """
        Handle a dropped connection.

        The seat is kept with its connection cleared and a grace timer
        started; the seat is only removed if nobody rejoins in time.
        """
        self.connections.pop(connection_id, None)
        logger.info(f"Client disconnected: {connection_id}")

        async with self._registry_lock:
            self._drop_from_queue(connection_id)

        room_id = self.connection_rooms.pop(connection_id, None)
        room = self.rooms.get(room_id) if room_id else None
        if room is None:
            return

        async with self._lock_for(room.id):
            if self.rooms.get(room.id) is not room:
                return
            player = room.disconnect_player(connection_id)
            if player is None:
                return
            logger.info(f"{player.name} disconnected from room {room.id}, holding seat {player.seat}")
            await self._broadcast(room, create_player_event(
                OutboundEventType.PLAYER_DISCONNECTED, player.seat, player.name))
            await self._broadcast_state(room)
            self._start_grace_timer(room.id, player.uid)

    async def handle_message(self, connection_id: str, data: Any) -> Dict[str, Any]:
        """
        Validate and dispatch one inbound message.

        Returns:
            The acknowledgement for the calling connection
        """
        conn = self.connections.get(connection_id)
        if conn is None:
            return create_ack(None, None, False, INVALID_EVENT, "Unknown connection")

        try:
            event = parse_inbound_event(data)
        except ValueError as e:
            event_name = data.get("type") if isinstance(data, dict) else None
            request_id = data.get("requestId") if isinstance(data, dict) else None
            return create_ack(event_name, request_id, False, INVALID_EVENT, str(e))

        handler = self._handlers[event.type]
        try:
            result = await handler(conn, event) or {}
        except GameError as e:
            logger.info(f"{event.type.value} from {connection_id} rejected: {e}")
            return create_ack(event.type.value, event.request_id, False, e.code, e.message)
        return create_ack(event.type.value, event.request_id, True, **result)

    # Room actions

    async def _handle_create_room(self, conn: Connection, event) -> Dict:
        await self._leave_queue(conn.id)
        await self._leave_current_room(conn)

        async with self._registry_lock:
            room = self._register_room()

        async with self._lock_for(room.id):
            player = room.add_player(event.player_name, conn.id, event.client_token)
            self.connection_rooms[conn.id] = room.id
            if event.with_bots:
                self._fill_with_bots(room)
            await self._broadcast_state(room)

        logger.info(f"Room created: {room.id} by {event.player_name}{' with bots' if event.with_bots else ''}")
        return {"roomId": room.id, "playerId": player.seat}

    async def _handle_join_room(self, conn: Connection, event) -> Dict:
        self._get_room(event.room_id)
        await self._leave_queue(conn.id)
        if self.connection_rooms.get(conn.id) != event.room_id:
            await self._leave_current_room(conn)

        async with self._lock_for(event.room_id):
            room = self._get_room(event.room_id)
            existing = room.player_for_connection(conn.id)
            if existing is not None:
                return {"roomId": room.id, "playerId": existing.seat}

            player = room.add_player(event.player_name, conn.id, event.client_token)
            self.connection_rooms[conn.id] = room.id
            await self._broadcast(room, create_player_event(
                OutboundEventType.PLAYER_JOINED, player.seat, player.name), exclude=conn.id)
            await self._broadcast_state(room)

        logger.info(f"{event.player_name} joined room: {room.id}")
        return {"roomId": room.id, "playerId": player.seat}

    async def _handle_rejoin_room(self, conn: Connection, event) -> Dict:
        self._get_room(event.room_id)
        await self._leave_queue(conn.id)
        if self.connection_rooms.get(conn.id) != event.room_id:
            await self._leave_current_room(conn)

        async with self._lock_for(event.room_id):
            room = self._get_room(event.room_id)
            player = self._match_rejoin(room, conn.id, event.player_name, event.client_token)

            if player is not None and player.connection_id == conn.id:
                # Already bound to this connection: nothing changes
                await self._send_state(conn.id, room, player)
                return {"roomId": room.id, "playerId": player.seat}

            if player is not None:
                room.reconnect_player(player.uid, conn.id)
                self._cancel_grace_timer(player.uid)
                self.connection_rooms[conn.id] = room.id
                logger.info(f"Player {player.name} rejoined room {room.id} at seat {player.seat}")
                await self._broadcast(room, create_player_event(
                    OutboundEventType.PLAYER_RECONNECTED, player.seat, player.name), exclude=conn.id)
                await self._broadcast_state(room)
                return {"roomId": room.id, "playerId": player.seat}

            if room.state == STATE_WAITING and not room.is_full:
                player = room.add_player(event.player_name, conn.id, event.client_token)
                self.connection_rooms[conn.id] = room.id
                logger.info(f"Player {player.name} joined room {room.id} as new player after failed rejoin")
                await self._broadcast(room, create_player_event(
                    OutboundEventType.PLAYER_JOINED, player.seat, player.name), exclude=conn.id)
                await self._broadcast_state(room)
                return {"roomId": room.id, "playerId": player.seat}

        raise RoomNotFoundError("No seat to rejoin in this room")

    async def _handle_leave_room(self, conn: Connection, event) -> Dict:
        room = self._get_room(event.room_id)
        async with self._lock_for(room.id):
            if room.player_for_connection(conn.id) is None:
                raise UnauthorizedActionError("Not a member of this room")
            await self._remove_member_locked(room, conn.id)
        return {"roomId": room.id}

    async def _handle_start_game(self, conn: Connection, event) -> Dict:
        room = self._get_room(event.room_id)
        async with self._lock_for(room.id):
            player = room.player_for_connection(conn.id)
            if player is None or player.seat != 0:
                raise UnauthorizedActionError("Only the host can start the game")
            if room.state != STATE_WAITING:
                raise InvalidStateError(f"Game is already {room.state}")
            if self.rules.auto_fill_bots:
                self._fill_with_bots(room)
            await self._start_room_locked(room)
        return {"roomId": room.id}

    async def _handle_pass_card(self, conn: Connection, event) -> Dict:
        room = self._get_room(event.room_id)
        async with self._lock_for(room.id):
            player = room.player_for_connection(conn.id)
            if player is None:
                raise UnauthorizedActionError("You are not seated in this room")
            if player.seat != event.from_player_id:
                raise UnauthorizedActionError("You can only pass your own cards")
            await self._apply_pass_locked(room, event.from_player_id, event.card_id, event.to_player_id)
        return {"roomId": room.id}

    async def _handle_chat_message(self, conn: Connection, event) -> Dict:
        room = self.rooms.get(self.connection_rooms.get(conn.id, ""))
        if room is None:
            raise RoomNotFoundError("Not in a room")
        message = create_chat_event(event.sender, event.content)
        async with self._lock_for(room.id):
            await self._broadcast(room, message, exclude=conn.id)
        return {"id": message["id"]}

    async def _handle_request_state(self, conn: Connection, event) -> Dict:
        room = self.rooms.get(self.connection_rooms.get(conn.id, ""))
        if room is None:
            raise RoomNotFoundError("Not in a room")
        async with self._lock_for(room.id):
            await self._send_state(conn.id, room, room.player_for_connection(conn.id))
        return {"roomId": room.id}

    # Matchmaking

    async def _handle_join_random_match(self, conn: Connection, event) -> Dict:
        current = self.connection_rooms.get(conn.id)
        if current in self.rooms:
            return {"status": "already_joined", "roomId": current}

        async with self._registry_lock:
            for index, entry in enumerate(self.match_queue):
                if entry.connection_id == conn.id:
                    return {"status": "waiting", "position": index + 1}

            self.match_queue.append(QueueEntry(conn.id, event.player_name, event.client_token))
            logger.info(f"Player {event.player_name} joined random match queue ({len(self.match_queue)} waiting)")

            if len(self.match_queue) >= self.rules.max_players:
                entries = self.match_queue[:self.rules.max_players]
                del self.match_queue[:self.rules.max_players]
                for entry in entries:
                    self._cancel_match_timer(entry.connection_id)
                room = await self._create_match(entries, with_bots=False)
                return {"status": "matched", "roomId": room.id if room else None}

            position = len(self.match_queue)
            self._match_timers[conn.id] = asyncio.create_task(self._match_timeout(conn.id))

        return {"status": "waiting", "position": position}

    async def _handle_leave_random_match(self, conn: Connection, event) -> Dict:
        async with self._registry_lock:
            removed = self._drop_from_queue(conn.id)
        return {"removed": removed}

    async def _match_timeout(self, connection_id: str) -> None:
        await asyncio.sleep(self.rules.matchmaking_timeout)
        async with self._registry_lock:
            if self._match_timers.get(connection_id) is asyncio.current_task():
                del self._match_timers[connection_id]
            if not any(e.connection_id == connection_id for e in self.match_queue):
                return
            take = self.rules.max_players - 1
            entries = self.match_queue[:take]
            del self.match_queue[:take]
            for entry in entries:
                self._cancel_match_timer(entry.connection_id)
            logger.info(f"Matchmaking timeout: starting with {len(entries)} players and bots")
            await self._create_match(entries, with_bots=True)

    async def _create_match(self, entries: List[QueueEntry], with_bots: bool) -> Optional[GameRoom]:
        """Create and start a room for queued players. Registry lock must be held."""
        room = self._register_room()
        async with self._lock_for(room.id):
            for entry in entries:
                if entry.connection_id not in self.connections or entry.connection_id in self.connection_rooms:
                    continue
                room.add_player(entry.player_name, entry.connection_id, entry.client_token)
                self.connection_rooms[entry.connection_id] = room.id

            if not room.human_players:
                await self._destroy_room(room)
                return None

            self._fill_with_bots(room)
            for player in room.human_players:
                await self._send(player.connection_id,
                                 create_match_found_event(room.id, player.seat, with_bots))
            await self._start_room_locked(room)

        logger.info(f"Random match created with room ID: {room.id}")
        return room

    async def _leave_queue(self, connection_id: str) -> None:
        async with self._registry_lock:
            if self._drop_from_queue(connection_id):
                logger.info(f"Connection {connection_id} left the match queue to take a seat")

    def _drop_from_queue(self, connection_id: str) -> bool:
        before = len(self.match_queue)
        self.match_queue = [e for e in self.match_queue if e.connection_id != connection_id]
        self._cancel_match_timer(connection_id)
        return len(self.match_queue) != before

    def _cancel_match_timer(self, connection_id: str) -> None:
        task = self._match_timers.pop(connection_id, None)
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    # Room helpers (callers hold the room lock)

    async def _start_room_locked(self, room: GameRoom) -> None:
        _, start_seat = room.start_game()
        for player in room.players:
            if player.connection_id:
                players = [
                    serialize_player(p, show_hand=not self.rules.redact_hands or p.seat == player.seat)
                    for p in room.players
                ]
                await self._send(player.connection_id, create_game_started_event(players, start_seat))
        await self._broadcast_state(room)
        logger.info(f"Game started in room: {room.id}")
        self._schedule_bot_turn(room)

    async def _apply_pass_locked(self, room: GameRoom, from_seat: int, card_id: int, to_seat: int) -> None:
        room.pass_card(from_seat, card_id, to_seat)
        await self._broadcast_state(room)
        if room.state == STATE_ENDED:
            await self._announce_game_end(room)
        self._schedule_bot_turn(room)

    async def _announce_game_end(self, room: GameRoom) -> None:
        if not self.rules.redact_hands:
            await self._broadcast(room, create_game_ended_event(get_game_result(room)))
        else:
            for player in list(room.players):
                if player.connection_id:
                    result = get_game_result(room, player.seat, redact_hands=True)
                    await self._send(player.connection_id, create_game_ended_event(result))
        self._spawn(self._deliver_side_chat(
            room.id,
            GAME_SENDER,
            self.advisor.game_commentary(room.winner, list(room.players), room.round),
            fallback_commentary(room.winner, room.round),
            "commentary",
        ))

    async def _remove_member_locked(self, room: GameRoom, key: str) -> Optional[Player]:
        player = room.remove_player(key)
        if player is None:
            return None

        if player.connection_id and self.connection_rooms.get(player.connection_id) == room.id:
            del self.connection_rooms[player.connection_id]
        self._cancel_grace_timer(player.uid)
        self._bots.pop(player.uid, None)
        logger.info(f"{player.name} left room: {room.id}")

        if not room.human_players:
            await self._destroy_room(room)
            return player

        await self._broadcast(room, create_player_event(
            OutboundEventType.PLAYER_LEFT, player.seat, player.name))
        if room.state == STATE_ACTIVE and room.vacancies:
            added = self._fill_with_bots(room)
            logger.info(f"Added {added} bot(s) to room {room.id} to replace departed players")
        await self._broadcast_state(room)
        self._schedule_bot_turn(room)
        return player

    async def _leave_current_room(self, conn: Connection) -> None:
        room = self.rooms.get(self.connection_rooms.get(conn.id, ""))
        if room is None:
            return
        async with self._lock_for(room.id):
            if self.rooms.get(room.id) is room:
                await self._remove_member_locked(room, conn.id)

    def _fill_with_bots(self, room: GameRoom) -> int:
        added = 0
        while not room.is_full and (room.state == STATE_WAITING or room.vacancies):
            bot_count = sum(1 for p in room.players if p.is_bot)
            bot = room.add_bot(self.rules.bot_name(bot_count))
            self._bots[bot.uid] = GreedyBot(bot.uid)
            added += 1
        return added

    def _match_rejoin(self, room: GameRoom, connection_id: str, name: str,
                      client_token: Optional[str]) -> Optional[Player]:
        for player in room.human_players:
            if player.name != name:
                continue
            if player.connection_id not in (None, connection_id):
                continue
            if player.client_token and client_token and player.client_token != client_token:
                continue
            return player
        return None

    # Registry

    def _register_room(self) -> GameRoom:
        while True:
            room_id = uuid.uuid4().hex[:6].upper()
            if room_id not in self.rooms:
                break
        room = GameRoom(room_id, self.rules, self.rng)
        self.rooms[room_id] = room
        return room

    def _get_room(self, room_id: str) -> GameRoom:
        room = self.rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError("Room not found")
        return room

    def _lock_for(self, room_id: str) -> asyncio.Lock:
        return self._room_locks.setdefault(room_id, asyncio.Lock())

    async def _destroy_room(self, room: GameRoom) -> None:
        if self.rooms.get(room.id) is room:
            del self.rooms[room.id]
        task = self._bot_tasks.pop(room.id, None)
        if task is not None and task is not asyncio.current_task():
            task.cancel()
        for uid in [uid for uid, rid in self._grace_rooms.items() if rid == room.id]:
            self._cancel_grace_timer(uid)
        for player in room.players:
            self._bots.pop(player.uid, None)
            if player.connection_id and self.connection_rooms.get(player.connection_id) == room.id:
                del self.connection_rooms[player.connection_id]
        self._room_locks.pop(room.id, None)
        logger.info(f"Room deleted: {room.id}")

    # Reconnection grace period

    def _start_grace_timer(self, room_id: str, uid: str) -> None:
        self._cancel_grace_timer(uid)
        self._grace_rooms[uid] = room_id
        self._grace_timers[uid] = asyncio.create_task(self._grace_expired(room_id, uid))

    def _cancel_grace_timer(self, uid: str) -> None:
        self._grace_rooms.pop(uid, None)
        task = self._grace_timers.pop(uid, None)
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    async def _grace_expired(self, room_id: str, uid: str) -> None:
        await asyncio.sleep(self.rules.grace_period_seconds)
        if self._grace_timers.get(uid) is asyncio.current_task():
            del self._grace_timers[uid]
            self._grace_rooms.pop(uid, None)

        room = self.rooms.get(room_id)
        if room is None:
            return
        async with self._lock_for(room_id):
            if self.rooms.get(room_id) is not room:
                return
            player = room.find_player(uid)
            if player is None or player.connection_id is not None:
                return
            logger.info(f"{player.name} permanently removed from room {room_id} after timeout")
            await self._remove_member_locked(room, uid)

    # Bots

    def _schedule_bot_turn(self, room: GameRoom) -> None:
        if room.state != STATE_ACTIVE or self.rooms.get(room.id) is not room:
            return
        task = self._bot_tasks.get(room.id)
        if task is not None and not task.done():
            return
        player = room.find_player(room.current_turn_seat)
        if player is None or not player.is_bot:
            return
        self._bot_tasks[room.id] = asyncio.create_task(self._run_bot_turn(room.id, player.uid))

    async def _run_bot_turn(self, room_id: str, uid: str) -> None:
        """
        Play one bot move after the configured delay.

        The strategy hint is requested while the bot "thinks" and is only
        used if it arrived before the delay ran out.
        """
        hint = None
        try:
            room = self.rooms.get(room_id)
            player = room.find_player(uid) if room else None
            if player is None:
                return

            hint = asyncio.create_task(ask(
                self.advisor.suggest_suit(list(player.hand), room.round),
                self.rules.advisory_timeout,
                "strategy",
            ))
            await asyncio.sleep(self.rules.bot_move_delay)
            preferred_suit = _finished_result(hint)

            async with self._lock_for(room_id):
                if self._bot_tasks.get(room_id) is asyncio.current_task():
                    del self._bot_tasks[room_id]
                if self.rooms.get(room_id) is not room:
                    return
                bot = self._bots.setdefault(uid, GreedyBot(uid))
                action = bot.choose_action(room, preferred_suit)
                if action is None:
                    return
                player = room.find_player(uid)
                logger.info(f"Bot {player.name} passes card {action.data['card_id']} to seat {action.data['to_seat']}")
                try:
                    await self._apply_pass_locked(room, player.seat, action.data["card_id"], action.data["to_seat"])
                except GameError as e:
                    logger.error(f"Bot {player.name} move rejected in room {room_id}: {e}")
                    return
                self._post_bot_dialogue(room, player)
        finally:
            if hint is not None and not hint.done():
                hint.cancel()
            if self._bot_tasks.get(room_id) is asyncio.current_task():
                del self._bot_tasks[room_id]

    def _post_bot_dialogue(self, room: GameRoom, bot: Player) -> None:
        if not self.rules.bot_chatter:
            return
        context, emotion = bot_mood(bot.hand)
        opponent = next((p.name for p in room.human_players), "opponent")
        self._spawn(self._deliver_side_chat(
            room.id,
            bot.name,
            self.advisor.dialogue(bot.name, opponent, context, emotion),
            fallback_dialogue(emotion, room.version),
            "dialogue",
        ))

    # Side channel

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._side_tasks.add(task)
        task.add_done_callback(self._side_tasks.discard)

    async def _deliver_side_chat(self, room_id: str, sender: str, coro, fallback: str, what: str) -> None:
        text = await ask(coro, self.rules.advisory_timeout, what) or fallback
        room = self.rooms.get(room_id)
        if room is None:
            return
        async with self._lock_for(room_id):
            if self.rooms.get(room_id) is room:
                await self._broadcast(room, create_chat_event(sender, text))

    # Outbound

    async def _send(self, connection_id: Optional[str], event: Dict[str, Any]) -> None:
        conn = self.connections.get(connection_id) if connection_id else None
        if conn is None:
            return
        try:
            await conn.send(event)
        except Exception as e:
            logger.error(f"Error sending {event.get('type')} to {connection_id}: {e}")

    async def _broadcast(self, room: GameRoom, event: Dict[str, Any], exclude: Optional[str] = None) -> None:
        for player in list(room.players):
            if player.connection_id and player.connection_id != exclude:
                await self._send(player.connection_id, event)

    async def _broadcast_state(self, room: GameRoom) -> None:
        if not self.rules.redact_hands:
            event = create_state_event(room.get_public_state())
            await self._broadcast(room, event)
            return
        for player in list(room.players):
            if player.connection_id:
                await self._send_state(player.connection_id, room, player)

    async def _send_state(self, connection_id: str, room: GameRoom, player: Optional[Player]) -> None:
        viewer = player.seat if player else None
        await self._send(connection_id, create_state_event(room.get_public_state(viewer)))


def _finished_result(task: asyncio.Task):
    """Result of a task that already finished, otherwise cancel it and return None."""
    if not task.done():
        task.cancel()
        return None
    if task.cancelled() or task.exception() is not None:
        return None
    return task.result()
