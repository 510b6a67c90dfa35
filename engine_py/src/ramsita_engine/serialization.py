"""
State serialization for clients.
"""

from typing import Any, Dict, List, Optional

from .models import Player

RECENT_LOG_ENTRIES = 10


def serialize_player(player: Player, show_hand: bool = True) -> Dict[str, Any]:
    """
    Serialize a player for broadcast.

    Args:
        player: Player to serialize
        show_hand: Include card details; otherwise only the count is sent
    """
    data = {
        "id": player.seat,
        "uid": player.uid,
        "name": player.name,
        "isBot": player.is_bot,
        "connected": player.connected,
        "handCount": len(player.hand),
        "winningSet": list(player.winning_set) if player.winning_set else None,
        "position": player.finish_position,
    }
    if show_hand:
        data["hand"] = [card.to_dict() for card in player.hand]
    return data


def get_public_state(room, viewer_seat: Optional[int] = None,
                     redact_hands: bool = False) -> Dict[str, Any]:
    """
    Room state safe to broadcast.

    All hands are included by default and the client decides what to show.
    With `redact_hands`, only the viewer's own hand is sent in full and the
    others are reduced to counts.
    """
    players = _serialize_players(room.players, viewer_seat, redact_hands)
    return {
        "roomId": room.id,
        "version": room.version,
        "state": room.state,
        "players": players,
        "currentTurn": room.current_turn_seat,
        "round": room.round,
        "roundAnchor": room.round_anchor_seat,
        **get_game_result(room, viewer_seat, redact_hands),
        "log": room.game_log[-RECENT_LOG_ENTRIES:],
    }


def _serialize_players(players: List[Player], viewer_seat: Optional[int],
                       redact_hands: bool) -> List[Dict[str, Any]]:
    return [serialize_player(p, show_hand=not redact_hands or p.seat == viewer_seat) for p in players]


def get_game_result(room, viewer_seat: Optional[int] = None,
                    redact_hands: bool = False) -> Dict[str, Any]:
    """Finishing order, also the payload of the game_ended event."""
    winner = _serialize_players([room.winner], viewer_seat, redact_hands)[0] if room.winner else None
    return {
        "winner": winner,
        "winningPlayers": _serialize_players(room.winning_players, viewer_seat, redact_hands),
        "finishedPositions": list(room.finished_positions),
    }


def get_public_room_info(room) -> Dict[str, Any]:
    """Get public information about a room for listings."""
    return {
        "id": room.id,
        "playerCount": len(room.players),
        "state": room.state,
    }
