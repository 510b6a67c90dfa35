"""Authoritative per-room game state machine"""

import logging
import random
from typing import Dict, List, Optional, Tuple, Union

from .constants import (
    MAX_PLAYERS, STATE_ACTIVE, STATE_ENDED, STATE_WAITING
)
from .errors import (
    CardNotFoundError, GAME_IN_PROGRESS, InvalidStateError, InvalidTargetError,
    NotPlayersTurnError, RoomFullError
)
from .models import Player, Vacancy
from .ranking import scan_for_winner
from .rules import RuleConfig, default_rules
from .serialization import get_public_room_info, get_public_state
from .shuffle import deal_cards

logger = logging.getLogger(__name__)


class GameRoom:
    """
    One room: roster, hands, turn pointer, round counter and finishing order.

    Only this class mutates a player's hand, winning set or finish position.
    Callers are expected to serialize access (one coroutine at a time).
    """

    def __init__(self, room_id: str, rules: Optional[RuleConfig] = None,
                 rng: Optional[random.Random] = None):
        self.id = room_id
        self.rules = rules or default_rules
        self.rng = rng
        self.players: List[Player] = []
        self.state = STATE_WAITING
        self.current_turn_seat = 0
        self.round = 0
        self.round_anchor_seat: Optional[int] = None
        self.winner: Optional[Player] = None
        self.winning_players: List[Player] = []
        self.finished_positions: List[int] = []
        self.version = 0
        self.game_log: List[str] = []
        self._vacancies: List[Vacancy] = []

    # Roster

    def add_player(self, name: str, connection_id: Optional[str],
                   client_token: Optional[str] = None) -> Player:
        if self.state != STATE_WAITING:
            raise InvalidStateError("Game already in progress", code=GAME_IN_PROGRESS)
        self._check_capacity()
        player = Player(
            seat=len(self.players),
            name=name,
            connection_id=connection_id,
            client_token=client_token,
        )
        self.players.append(player)
        self.version += 1
        self.game_log.append(f"{name} joined")
        return player

    def add_bot(self, name: str) -> Player:
        """
        Seat a bot.

        In an active game a bot may only take over a vacancy left by
        remove_player, inheriting the hand and pointers of that seat.
        """
        if self.state == STATE_ENDED:
            raise InvalidStateError("Game has ended")
        if self.state == STATE_ACTIVE and not self._vacancies:
            raise InvalidStateError("No vacant seat to fill", code=GAME_IN_PROGRESS)
        self._check_capacity()

        bot = Player(seat=len(self.players), name=name, is_bot=True)
        self.players.append(bot)

        if self.state == STATE_ACTIVE:
            vacancy = self._vacancies.pop(0)
            bot.hand = vacancy.hand
            bot.winning_set = vacancy.winning_set
            bot.finish_position = vacancy.finish_position
            if vacancy.held_turn:
                self.current_turn_seat = bot.seat
            if vacancy.held_anchor:
                self.round_anchor_seat = bot.seat
            self.game_log.append(f"{name} took over a vacant seat")
        else:
            self.game_log.append(f"{name} (bot) joined")

        self.version += 1
        return bot

    def remove_player(self, key: Union[int, str]) -> Optional[Player]:
        """
        Remove a seat by seat index, connection id or player uid.

        Remaining seats are renumbered from 0, so seat numbers seen before a
        removal are stale afterwards. The turn and anchor pointers keep
        following the same players.
        """
        player = self.find_player(key)
        if player is None:
            return None

        turn_uid = self._uid_at(self.current_turn_seat)
        anchor_uid = self._uid_at(self.round_anchor_seat)
        index = self.players.index(player)

        if self.state == STATE_ACTIVE:
            self._vacancies.append(Vacancy(
                hand=player.hand,
                winning_set=player.winning_set,
                finish_position=player.finish_position,
                held_turn=player.uid == turn_uid,
                held_anchor=player.uid == anchor_uid,
            ))
            player.hand = []

        self.players.pop(index)
        for seat, p in enumerate(self.players):
            p.seat = seat

        self.current_turn_seat = self._seat_of(turn_uid, fallback=index)
        if self.round_anchor_seat is not None:
            self.round_anchor_seat = self._seat_of(anchor_uid, fallback=index)

        if player.uid == turn_uid and self.state == STATE_ACTIVE and self.players:
            # Until a bot takes the vacancy, the turn rests on the next active seat
            nxt = self._active_from(index % len(self.players))
            if nxt is not None:
                self.current_turn_seat = nxt

        self.version += 1
        self.game_log.append(f"{player.name} left")
        return player

    def disconnect_player(self, connection_id: str) -> Optional[Player]:
        """Clear a seat's connection but keep the seat for a rejoin."""
        player = self.player_for_connection(connection_id)
        if player is None:
            return None
        player.connection_id = None
        self.version += 1
        self.game_log.append(f"{player.name} disconnected")
        return player

    def reconnect_player(self, uid: str, connection_id: str) -> Player:
        """Bind a held seat to a new connection; hand and position are untouched."""
        player = self.find_player(uid)
        if player is None or player.is_bot:
            raise InvalidStateError("No such seat to reconnect")
        if player.connection_id != connection_id:
            player.connection_id = connection_id
            self.version += 1
            self.game_log.append(f"{player.name} reconnected")
        return player

    def find_player(self, key: Union[int, str, None]) -> Optional[Player]:
        if key is None:
            return None
        if isinstance(key, int):
            return self.players[key] if 0 <= key < len(self.players) else None
        for player in self.players:
            if player.connection_id == key or player.uid == key:
                return player
        return None

    def player_for_connection(self, connection_id: str) -> Optional[Player]:
        for player in self.players:
            if player.connection_id == connection_id:
                return player
        return None

    @property
    def host(self) -> Optional[Player]:
        return self.players[0] if self.players else None

    @property
    def human_players(self) -> List[Player]:
        return [p for p in self.players if not p.is_bot]

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.rules.max_players

    @property
    def vacancies(self) -> int:
        return len(self._vacancies)

    # Game flow

    def start_game(self) -> Tuple[List[Player], int]:
        if self.state != STATE_WAITING:
            raise InvalidStateError(f"Cannot start a game that is {self.state}")
        if len(self.players) != MAX_PLAYERS:
            raise InvalidStateError(f"Need {MAX_PLAYERS} players to start, have {len(self.players)}")

        start_seat = deal_cards(self.players, self.rng)
        self.state = STATE_ACTIVE
        self.round = 1
        self.current_turn_seat = start_seat
        self.round_anchor_seat = start_seat
        self.winner = None
        self.winning_players = []
        self.finished_positions = []
        self.version += 1
        self.game_log.append(f"Game started! {self.players[start_seat].name} holds the marker and goes first")
        logger.info(f"Room {self.id}: game started, seat {start_seat} to move")
        return self.players, start_seat

    def pass_card(self, from_seat: int, card_id: int, to_seat: int) -> None:
        if self.state != STATE_ACTIVE:
            raise InvalidStateError("Game is not active")
        if from_seat != self.current_turn_seat:
            raise NotPlayersTurnError("Not your turn")

        giver = self.players[from_seat]
        card = giver.card(card_id)
        if card is None:
            raise CardNotFoundError(f"Card {card_id} is not in your hand")

        receiver = self.find_player(to_seat) if isinstance(to_seat, int) else None
        if receiver is None or receiver is giver or receiver.finished:
            raise InvalidTargetError(f"Cannot pass to seat {to_seat}")

        giver.hand.remove(card)
        receiver.hand.append(card)
        self.current_turn_seat = receiver.seat
        if receiver.seat == self.round_anchor_seat:
            self.round += 1
            self.game_log.append(f"Round {self.round} begins")

        self.version += 1
        self.game_log.append(f"{giver.name} passed a card to {receiver.name}")
        self._resolve_winners()

    def _resolve_winners(self) -> None:
        active = self.active_players()
        found = scan_for_winner(active, self.round, self.rules.min_winning_round)
        if found is None:
            return

        player, winning_set = found
        self._finish(player, winning_set)
        if self.winner is None:
            self.winner = player

        remaining = self.active_players()
        if len(self.winning_players) >= MAX_PLAYERS - 1 and len(remaining) == 1:
            self._finish(remaining[0], None)
            self._end_game()
        elif not remaining:
            self._end_game()
        elif player.seat == self.current_turn_seat:
            self.current_turn_seat = self.next_active_seat(player.seat)

    def _finish(self, player: Player, winning_set: Optional[List[int]]) -> None:
        position = len(self.winning_players) + 1
        player.winning_set = winning_set
        player.finish_position = position
        self.winning_players.append(player)
        self.finished_positions.append(position)
        self.game_log.append(f"{player.name} finished in position {position}!")
        logger.info(f"Room {self.id}: {player.name} finished #{position}")

    def _end_game(self) -> None:
        self.state = STATE_ENDED
        self.game_log.append("Game finished!")
        for p in self.winning_players:
            self.game_log.append(f"{p.finish_position}. {p.name}")
        logger.info(f"Room {self.id}: game ended, winner {self.winner.name if self.winner else None}")

    # Turn helpers

    def active_players(self) -> List[Player]:
        return [p for p in self.players if not p.finished]

    def next_active_seat(self, seat: int) -> Optional[int]:
        """Next unfinished seat after `seat`, wrapping around the table."""
        n = len(self.players)
        for step in range(1, n + 1):
            candidate = self.players[(seat + step) % n]
            if not candidate.finished and candidate.seat != seat:
                return candidate.seat
        return None

    def _active_from(self, seat: int) -> Optional[int]:
        n = len(self.players)
        for step in range(n):
            candidate = self.players[(seat + step) % n]
            if not candidate.finished:
                return candidate.seat
        return None

    def _uid_at(self, seat: Optional[int]) -> Optional[str]:
        if seat is None or not 0 <= seat < len(self.players):
            return None
        return self.players[seat].uid

    def _seat_of(self, uid: Optional[str], fallback: int) -> int:
        for p in self.players:
            if p.uid == uid:
                return p.seat
        if not self.players:
            return 0
        return min(fallback, len(self.players) - 1)

    def _check_capacity(self) -> None:
        if self.is_full:
            raise RoomFullError("Room is full")

    # Projections

    def get_public_state(self, viewer_seat: Optional[int] = None) -> Dict:
        return get_public_state(self, viewer_seat, redact_hands=self.rules.redact_hands)

    def get_public_info(self) -> Dict:
        return get_public_room_info(self)
