"""
Tests for the session coordinator: rooms over connections, reconnection,
matchmaking, bot turns and chat.
"""

import asyncio
import random

import pytest
import pytest_asyncio
from ramsita_engine.advisory import Advisor
from ramsita_engine.constants import STATE_ACTIVE, STATE_ENDED, STATE_WAITING
from ramsita_engine.coordinator import Connection, GameCoordinator, QueueEntry
from ramsita_engine.errors import ExternalAdvisoryUnavailable
from ramsita_engine.rules import create_rules
from ramsita_engine.shuffle import build_deck

DECK = {card.id: card for card in build_deck()}


class FakeConnection(Connection):
    """Collects every event sent to it."""

    def __init__(self, name):
        super().__init__()
        self.name = name
        self.events = []

    async def send(self, event):
        self.events.append(event)

    def of_type(self, event_type):
        return [e for e in self.events if e["type"] == event_type]

    def last_state(self):
        states = self.of_type("game_state_update")
        return states[-1]["state"] if states else None


class FailingAdvisor(Advisor):
    def __init__(self):
        self.calls = 0

    async def suggest_suit(self, hand, round_number):
        self.calls += 1
        raise ExternalAdvisoryUnavailable("down")

    async def dialogue(self, bot_name, opponent_name, context, emotion):
        raise ExternalAdvisoryUnavailable("down")

    async def game_commentary(self, winner, players, round_number):
        raise ExternalAdvisoryUnavailable("down")


class SlowAdvisor(Advisor):
    async def suggest_suit(self, hand, round_number):
        await asyncio.sleep(10)
        return 'B'

    async def dialogue(self, bot_name, opponent_name, context, emotion):
        await asyncio.sleep(10)
        return "never"

    async def game_commentary(self, winner, players, round_number):
        await asyncio.sleep(10)
        return "never"


class HangingAdvisor(SlowAdvisor):
    """Strategy requests never answer; records whether they were cancelled."""

    def __init__(self):
        self.started = False
        self.cancelled = False

    async def suggest_suit(self, hand, round_number):
        self.started = True
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return 'B'


def fast_rules(**overrides):
    values = dict(
        grace_period_seconds=0.05,
        bot_move_delay=0.01,
        matchmaking_timeout=0.05,
        advisory_timeout=0.05,
        bot_chatter=False,
    )
    values.update(overrides)
    return create_rules(**values)


async def wait_for(predicate, timeout=2.0):
    """Poll until predicate() is true."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


@pytest_asyncio.fixture
async def coordinator():
    coord = GameCoordinator(fast_rules(), rng=random.Random(21))
    yield coord
    await coord.shutdown()


async def connect(coord, name):
    conn = FakeConnection(name)
    await coord.connect(conn)
    return conn


async def send(coord, conn, event_type, **payload):
    return await coord.handle_message(conn.id, {"type": event_type, **payload})


async def room_with_humans(coord, count):
    """Create a room and join count - 1 more humans."""
    conns = [await connect(coord, f"p{i}") for i in range(count)]
    ack = await send(coord, conns[0], "create_room", playerName="Player 0", clientToken="tok-0")
    room_id = ack["data"]["roomId"]
    for i, conn in enumerate(conns[1:], start=1):
        ack = await send(coord, conn, "join_room", roomId=room_id, playerName=f"Player {i}",
                         clientToken=f"tok-{i}")
        assert ack["success"], ack
    return room_id, conns


# Rooms

@pytest.mark.asyncio
async def test_create_and_join_room(coordinator):
    """Test create/join acks and broadcasts."""
    host = await connect(coordinator, "host")
    ack = await send(coordinator, host, "create_room", playerName="Alice", requestId="r1")

    assert ack["type"] == "ack"
    assert ack["success"]
    assert ack["requestId"] == "r1"
    assert ack["data"]["playerId"] == 0
    room_id = ack["data"]["roomId"]
    assert len(room_id) == 6

    guest = await connect(coordinator, "guest")
    ack = await send(coordinator, guest, "join_room", roomId=room_id, playerName="Bob")
    assert ack["success"]
    assert ack["data"]["playerId"] == 1

    joined = host.of_type("player_joined")
    assert len(joined) == 1
    assert joined[0]["playerName"] == "Bob"
    assert not guest.of_type("player_joined")
    assert [p["name"] for p in guest.last_state()["players"]] == ["Alice", "Bob"]


@pytest.mark.asyncio
async def test_join_unknown_room(coordinator):
    conn = await connect(coordinator, "x")
    ack = await send(coordinator, conn, "join_room", roomId="NOPE00", playerName="Bob")
    assert not ack["success"]
    assert ack["error"] == "not_found"


@pytest.mark.asyncio
async def test_join_full_room(coordinator):
    room_id, _ = await room_with_humans(coordinator, 4)
    late = await connect(coordinator, "late")
    ack = await send(coordinator, late, "join_room", roomId=room_id, playerName="Late")
    assert ack["error"] == "room_full"


@pytest.mark.asyncio
async def test_invalid_payload(coordinator):
    conn = await connect(coordinator, "x")

    ack = await coordinator.handle_message(conn.id, {"type": "dance"})
    assert not ack["success"]
    assert ack["error"] == "invalid_event"

    ack = await send(coordinator, conn, "pass_card", roomId="ABC", requestId="r9")
    assert ack["error"] == "invalid_event"
    assert ack["requestId"] == "r9"


@pytest.mark.asyncio
async def test_create_room_with_bots(coordinator):
    host = await connect(coordinator, "host")
    ack = await send(coordinator, host, "create_room", playerName="Alice", withBots=True)
    room = coordinator.rooms[ack["data"]["roomId"]]

    assert len(room.players) == 4
    assert [p.name for p in room.players[1:]] == ["R.1", "P10", "R.0"]
    assert all(p.is_bot for p in room.players[1:])


@pytest.mark.asyncio
async def test_joining_another_room_leaves_the_first(coordinator):
    first_id, (host_a,) = await room_with_humans(coordinator, 1)
    second_id, _ = await room_with_humans(coordinator, 1)
    host_a_id = host_a.id
    await send(coordinator, host_a, "join_room", roomId=second_id, playerName="Mover")

    assert first_id not in coordinator.rooms
    assert coordinator.connection_rooms[host_a_id] == second_id
    assert len(coordinator.rooms[second_id].players) == 2


@pytest.mark.asyncio
async def test_leave_room_destroys_empty_room(coordinator):
    room_id, (host, guest) = await room_with_humans(coordinator, 2)

    ack = await send(coordinator, guest, "leave_room", roomId=room_id)
    assert ack["success"]
    assert host.of_type("player_left")[0]["playerName"] == "Player 1"

    await send(coordinator, host, "leave_room", roomId=room_id)
    assert room_id not in coordinator.rooms


# Start and passing

@pytest.mark.asyncio
async def test_only_host_can_start(coordinator):
    room_id, (host, guest) = await room_with_humans(coordinator, 2)

    ack = await send(coordinator, guest, "start_game", roomId=room_id)
    assert ack["error"] == "unauthorized"
    assert coordinator.rooms[room_id].state == STATE_WAITING

    ack = await send(coordinator, host, "start_game", roomId=room_id)
    assert ack["success"]
    room = coordinator.rooms[room_id]
    assert room.state == STATE_ACTIVE
    assert len(room.players) == 4
    assert sum(p.is_bot for p in room.players) == 2

    started = host.of_type("game_started")
    assert len(started) == 1
    assert started[0]["startSeat"] == room.round_anchor_seat


@pytest.mark.asyncio
async def test_start_without_auto_fill():
    coord = GameCoordinator(fast_rules(auto_fill_bots=False))
    try:
        room_id, (host, _) = await room_with_humans(coord, 2)
        ack = await send(coord, host, "start_game", roomId=room_id)
        assert ack["error"] == "invalid_state"
    finally:
        await coord.shutdown()


@pytest.mark.asyncio
async def test_pass_card_ownership(coordinator):
    """Test a connection cannot pass for another seat."""
    room_id, conns = await room_with_humans(coordinator, 4)
    await send(coordinator, conns[0], "start_game", roomId=room_id)
    room = coordinator.rooms[room_id]
    turn = room.current_turn_seat
    other = conns[(turn + 1) % 4]
    card_id = room.players[turn].hand[0].id

    ack = await send(coordinator, other, "pass_card", roomId=room_id,
                     fromPlayerId=turn, cardId=card_id, toPlayerId=(turn + 2) % 4)
    assert ack["error"] == "unauthorized"

    version = room.version
    ack = await send(coordinator, conns[turn], "pass_card", roomId=room_id,
                     fromPlayerId=turn, cardId=card_id, toPlayerId=(turn + 1) % 4)
    assert ack["success"]
    assert room.version == version + 1
    assert room.current_turn_seat == (turn + 1) % 4
    for conn in conns:
        assert conn.last_state()["version"] == room.version


@pytest.mark.asyncio
async def test_pass_card_errors_reach_only_the_caller(coordinator):
    room_id, conns = await room_with_humans(coordinator, 4)
    await send(coordinator, conns[0], "start_game", roomId=room_id)
    room = coordinator.rooms[room_id]
    turn = room.current_turn_seat
    idle = (turn + 1) % 4
    counts = [len(c.events) for c in conns]

    ack = await send(coordinator, conns[idle], "pass_card", roomId=room_id,
                     fromPlayerId=idle, cardId=room.players[idle].hand[0].id, toPlayerId=turn)

    assert ack["error"] == "not_your_turn"
    assert [len(c.events) for c in conns] == counts


@pytest.mark.asyncio
async def test_game_end_broadcast(coordinator):
    """Test the last pass of a game sends game_ended and commentary."""
    room_id, conns = await room_with_humans(coordinator, 4)
    await send(coordinator, conns[0], "start_game", roomId=room_id)
    room = coordinator.rooms[room_id]
    for player, ids in zip(room.players, [[1, 2, 3, 9], [5, 6, 7, 8], [10, 11, 12, 4], [13, 14, 15, 16]]):
        player.hand = [DECK[i] for i in ids]
    room.current_turn_seat = 0
    room.round_anchor_seat = 0
    room.round = 2

    await send(coordinator, conns[0], "pass_card", roomId=room_id, fromPlayerId=0, cardId=9, toPlayerId=2)
    await send(coordinator, conns[2], "pass_card", roomId=room_id, fromPlayerId=2, cardId=4, toPlayerId=0)
    await send(coordinator, conns[2], "pass_card", roomId=room_id, fromPlayerId=2, cardId=9, toPlayerId=3)

    assert room.state == STATE_ENDED
    ended = conns[1].of_type("game_ended")
    assert len(ended) == 1
    assert ended[0]["winner"]["name"] == "Player 1"
    assert ended[0]["finishedPositions"] == [1, 2, 3, 4]
    assert [p["name"] for p in ended[0]["winningPlayers"]] == ["Player 1", "Player 0", "Player 3", "Player 2"]

    await wait_for(lambda: conns[1].of_type("chat_message"))
    commentary = conns[1].of_type("chat_message")[0]
    assert commentary["sender"] == "GAME"
    assert "Player 1" in commentary["content"]


# Reconnection

@pytest.mark.asyncio
async def test_disconnect_and_rejoin_within_grace():
    coord = GameCoordinator(fast_rules(grace_period_seconds=5.0), rng=random.Random(3))
    try:
        room_id, conns = await room_with_humans(coord, 4)
        await send(coord, conns[0], "start_game", roomId=room_id)
        room = coord.rooms[room_id]
        player = room.players[2]
        cards = list(player.hand)

        await coord.disconnect(conns[2].id)
        assert player.connection_id is None
        assert conns[0].of_type("player_disconnected")[0]["playerId"] == 2
        assert player.uid in coord._grace_timers

        back = await connect(coord, "p2-again")
        ack = await send(coord, back, "rejoin_room", roomId=room_id, playerName="Player 2", clientToken="tok-2")
        assert ack["success"]
        assert ack["data"]["playerId"] == 2
        assert player.connection_id == back.id
        assert player.hand == cards
        assert player.uid not in coord._grace_timers
        assert conns[0].of_type("player_reconnected")[0]["playerName"] == "Player 2"

        # Repeating the rejoin is a no-op that resends state
        version = room.version
        ack = await send(coord, back, "rejoin_room", roomId=room_id, playerName="Player 2", clientToken="tok-2")
        assert ack["success"]
        assert room.version == version
        assert back.last_state()["version"] == version
    finally:
        await coord.shutdown()


@pytest.mark.asyncio
async def test_rejoin_with_wrong_token_refused():
    coord = GameCoordinator(fast_rules(grace_period_seconds=5.0))
    try:
        room_id, conns = await room_with_humans(coord, 4)
        await send(coord, conns[0], "start_game", roomId=room_id)
        await coord.disconnect(conns[1].id)

        intruder = await connect(coord, "intruder")
        ack = await send(coord, intruder, "rejoin_room", roomId=room_id, playerName="Player 1",
                         clientToken="stolen")
        assert ack["error"] == "not_found"
        assert coord.rooms[room_id].players[1].connection_id is None
    finally:
        await coord.shutdown()


@pytest.mark.asyncio
async def test_rejoin_into_waiting_room_joins_as_new(coordinator):
    room_id, _ = await room_with_humans(coordinator, 1)
    newcomer = await connect(coordinator, "new")
    ack = await send(coordinator, newcomer, "rejoin_room", roomId=room_id, playerName="Stranger")
    assert ack["success"]
    assert ack["data"]["playerId"] == 1


@pytest.mark.asyncio
async def test_grace_expiry_backfills_bot(coordinator):
    """Test an abandoned seat in a running game is taken over by a bot."""
    room_id, conns = await room_with_humans(coordinator, 4)
    await send(coordinator, conns[0], "start_game", roomId=room_id)
    room = coordinator.rooms[room_id]
    gone = room.players[3]

    await coordinator.disconnect(conns[3].id)
    await wait_for(lambda: any(p.is_bot for p in room.players))

    bot = next(p for p in room.players if p.is_bot)
    assert gone.uid not in [p.uid for p in room.players]
    assert conns[0].of_type("player_left")
    assert sum(len(p.hand) for p in room.players) == 16
    assert bot.seat == 3

    # The seat is gone for good: a late rejoin finds nothing to reclaim
    late = await connect(coordinator, "p3-late")
    ack = await send(coordinator, late, "rejoin_room", roomId=room_id, playerName="Player 3", clientToken="tok-3")
    assert not ack["success"]
    assert ack["error"] == "not_found"
    assert room.players[3].uid == bot.uid
    assert room.players[3].is_bot
    assert late.id not in coordinator.connection_rooms



@pytest.mark.asyncio
async def test_grace_expiry_last_human_destroys_room(coordinator):
    room_id, (host,) = await room_with_humans(coordinator, 1)
    await coordinator.disconnect(host.id)
    assert room_id in coordinator.rooms

    await wait_for(lambda: room_id not in coordinator.rooms)


# Matchmaking

@pytest.mark.asyncio
async def test_random_match_at_four():
    coord = GameCoordinator(fast_rules(matchmaking_timeout=5.0))
    try:
        conns = [await connect(coord, f"q{i}") for i in range(4)]
        for i, conn in enumerate(conns[:3]):
            ack = await send(coord, conn, "join_random_match", playerName=f"Q{i}")
            assert ack["data"]["status"] == "waiting"
            assert ack["data"]["position"] == i + 1

        ack = await send(coord, conns[3], "join_random_match", playerName="Q3")
        assert ack["data"]["status"] == "matched"
        room = coord.rooms[ack["data"]["roomId"]]

        assert room.state == STATE_ACTIVE
        assert not any(p.is_bot for p in room.players)
        assert coord.match_queue == []
        assert coord._match_timers == {}
        for seat, conn in enumerate(conns):
            found = conn.of_type("random_match_found")
            assert found[0]["roomId"] == room.id
            assert found[0]["playerId"] == seat
            assert not found[0]["withBots"]
    finally:
        await coord.shutdown()


@pytest.mark.asyncio
async def test_random_match_timeout_fills_with_bots(coordinator):
    alone = await connect(coordinator, "alone")
    await send(coordinator, alone, "join_random_match", playerName="Solo")

    await wait_for(lambda: alone.of_type("random_match_found"))

    found = alone.of_type("random_match_found")[0]
    assert found["withBots"]
    room = coordinator.rooms[found["roomId"]]
    assert room.state in (STATE_ACTIVE, STATE_ENDED)
    assert len(room.human_players) == 1
    assert coordinator.match_queue == []


@pytest.mark.asyncio
async def test_leave_random_match(coordinator):
    conn = await connect(coordinator, "q")
    await send(coordinator, conn, "join_random_match", playerName="Q")
    ack = await send(coordinator, conn, "leave_random_match")
    assert ack["data"]["removed"]
    assert coordinator.match_queue == []

    await asyncio.sleep(0.1)
    assert not conn.of_type("random_match_found")


@pytest.mark.asyncio
async def test_disconnect_leaves_queue(coordinator):
    conn = await connect(coordinator, "q")
    await send(coordinator, conn, "join_random_match", playerName="Q")
    await coordinator.disconnect(conn.id)
    assert coordinator.match_queue == []
    assert coordinator.stats()["connections"] == 0


@pytest.mark.asyncio
async def test_creating_a_room_leaves_the_queue(coordinator):
    """Test a queued connection that takes a seat elsewhere is never matched as well."""
    conn = await connect(coordinator, "q")
    await send(coordinator, conn, "join_random_match", playerName="Q")

    ack = await send(coordinator, conn, "create_room", playerName="Q")
    assert ack["success"]
    assert coordinator.match_queue == []
    assert coordinator._match_timers == {}

    await asyncio.sleep(0.15)
    seated_in = [rid for rid, room in coordinator.rooms.items() if room.player_for_connection(conn.id)]
    assert seated_in == [ack["data"]["roomId"]]
    assert not conn.of_type("random_match_found")


@pytest.mark.asyncio
async def test_joining_a_room_leaves_the_queue(coordinator):
    room_id, _ = await room_with_humans(coordinator, 1)
    conn = await connect(coordinator, "q")
    await send(coordinator, conn, "join_random_match", playerName="Q")

    ack = await send(coordinator, conn, "join_room", roomId=room_id, playerName="Q")
    assert ack["success"]
    assert coordinator.match_queue == []

    await asyncio.sleep(0.15)
    assert len(coordinator.rooms) == 1
    assert coordinator.connection_rooms[conn.id] == room_id


@pytest.mark.asyncio
async def test_match_skips_already_seated_entries():
    """Test a stale queue entry for a seated connection is not seated again."""
    coord = GameCoordinator(fast_rules(matchmaking_timeout=5.0))
    try:
        room_id, (host,) = await room_with_humans(coord, 1)
        coord.match_queue.append(QueueEntry(host.id, "Player 0"))
        queued = [await connect(coord, f"q{i}") for i in range(3)]
        for i, conn in enumerate(queued):
            ack = await send(coord, conn, "join_random_match", playerName=f"Q{i}")

        match_room = coord.rooms[ack["data"]["roomId"]]
        assert match_room.player_for_connection(host.id) is None
        assert len(match_room.human_players) == 3
        assert len(match_room.players) == 4
        assert coord.connection_rooms[host.id] == room_id
        assert not host.of_type("random_match_found")
    finally:
        await coord.shutdown()


# Bots

@pytest.mark.asyncio
async def test_bots_play_until_a_human_turn(coordinator):
    """Test bot moves chain and stop when the turn reaches a human or the game ends."""
    host = await connect(coordinator, "host")
    ack = await send(coordinator, host, "create_room", playerName="Alice", withBots=True)
    room_id = ack["data"]["roomId"]
    await send(coordinator, host, "start_game", roomId=room_id)
    room = coordinator.rooms[room_id]

    def settled():
        return room.state == STATE_ENDED or (
            not room.players[room.current_turn_seat].is_bot and room_id not in coordinator._bot_tasks
        )

    await wait_for(settled)
    if room.state == STATE_ACTIVE:
        assert room.players[room.current_turn_seat].name == "Alice"
    assert sum(len(p.hand) for p in room.players) == 16
    assert host.last_state()["version"] == room.version


@pytest.mark.asyncio
async def test_bot_moves_despite_failing_advisor():
    advisor = FailingAdvisor()
    coord = GameCoordinator(fast_rules(bot_chatter=True), advisor=advisor, rng=random.Random(8))
    try:
        host = await connect(coord, "host")
        ack = await send(coord, host, "create_room", playerName="Alice", withBots=True)
        room_id = ack["data"]["roomId"]
        await send(coord, host, "start_game", roomId=room_id)
        room = coord.rooms[room_id]
        # Hand the turn to a bot
        if not room.players[room.current_turn_seat].is_bot:
            await send(coord, host, "pass_card", roomId=room_id, fromPlayerId=0,
                       cardId=room.players[0].hand[0].id, toPlayerId=1)

        await wait_for(lambda: advisor.calls > 0)
        await wait_for(lambda: len(host.of_type("chat_message")) > 0)
        chat = host.of_type("chat_message")[0]
        assert chat["sender"] in ("R.1", "P10", "R.0", "GAME")
    finally:
        await coord.shutdown()


@pytest.mark.asyncio
async def test_slow_advisor_does_not_delay_bot():
    coord = GameCoordinator(fast_rules(advisory_timeout=5.0), advisor=SlowAdvisor(), rng=random.Random(8))
    try:
        host = await connect(coord, "host")
        ack = await send(coord, host, "create_room", playerName="Alice", withBots=True)
        room_id = ack["data"]["roomId"]
        await send(coord, host, "start_game", roomId=room_id)
        room = coord.rooms[room_id]
        if not room.players[room.current_turn_seat].is_bot:
            await send(coord, host, "pass_card", roomId=room_id, fromPlayerId=0,
                       cardId=room.players[0].hand[0].id, toPlayerId=1)
        version = room.version

        await wait_for(lambda: room.version > version, timeout=1.0)
    finally:
        await coord.shutdown()


@pytest.mark.asyncio
async def test_destroyed_room_cancels_pending_hint():
    """Test a bot turn cancelled mid-delay also cancels its strategy request."""
    advisor = HangingAdvisor()
    coord = GameCoordinator(fast_rules(bot_move_delay=5.0, advisory_timeout=5.0), advisor=advisor,
                            rng=random.Random(8))
    try:
        host = await connect(coord, "host")
        ack = await send(coord, host, "create_room", playerName="Alice", withBots=True)
        room_id = ack["data"]["roomId"]
        await send(coord, host, "start_game", roomId=room_id)
        room = coord.rooms[room_id]
        if not room.players[room.current_turn_seat].is_bot:
            await send(coord, host, "pass_card", roomId=room_id, fromPlayerId=0,
                       cardId=room.players[0].hand[0].id, toPlayerId=1)

        await wait_for(lambda: advisor.started)
        await send(coord, host, "leave_room", roomId=room_id)
        assert room_id not in coord.rooms

        await wait_for(lambda: advisor.cancelled, timeout=1.0)
    finally:
        await coord.shutdown()


@pytest.mark.asyncio
async def test_game_end_redacts_other_hands():
    """Test game_ended only carries the viewer's own hand when hands are redacted."""
    coord = GameCoordinator(fast_rules(redact_hands=True), rng=random.Random(4))
    try:
        room_id, conns = await room_with_humans(coord, 4)
        await send(coord, conns[0], "start_game", roomId=room_id)
        room = coord.rooms[room_id]
        for player, ids in zip(room.players, [[1, 2, 3, 9], [5, 6, 7, 8], [10, 11, 12, 4], [13, 14, 15, 16]]):
            player.hand = [DECK[i] for i in ids]
        room.current_turn_seat = 0
        room.round_anchor_seat = 0
        room.round = 2

        await send(coord, conns[0], "pass_card", roomId=room_id, fromPlayerId=0, cardId=9, toPlayerId=2)
        await send(coord, conns[2], "pass_card", roomId=room_id, fromPlayerId=2, cardId=4, toPlayerId=0)
        await send(coord, conns[2], "pass_card", roomId=room_id, fromPlayerId=2, cardId=9, toPlayerId=3)

        seen_by_winner = conns[1].of_type("game_ended")[0]
        seen_by_other = conns[3].of_type("game_ended")[0]
        assert len(seen_by_winner["winner"]["hand"]) == 4
        assert "hand" not in seen_by_other["winner"]
        assert seen_by_other["winner"]["handCount"] == 4
        assert [("hand" in p) for p in seen_by_other["winningPlayers"]] == [False, False, True, False]

        state = conns[3].last_state()
        assert "hand" not in state["winner"]
        assert [("hand" in p) for p in state["winningPlayers"]] == [False, False, True, False]
    finally:
        await coord.shutdown()


# Chat and state

@pytest.mark.asyncio
async def test_chat_relayed_to_others(coordinator):
    room_id, (alice, bob, carol) = await room_with_humans(coordinator, 3)

    ack = await send(coordinator, alice, "chat_message", content="hello", sender="Player 0")
    assert ack["success"]

    assert not alice.of_type("chat_message")
    for conn in (bob, carol):
        message = conn.of_type("chat_message")[0]
        assert message["content"] == "hello"
        assert message["sender"] == "Player 0"
        assert message["id"] == ack["data"]["id"]
        assert message["sentAt"]


@pytest.mark.asyncio
async def test_chat_outside_room(coordinator):
    conn = await connect(coordinator, "x")
    ack = await send(coordinator, conn, "chat_message", content="hi", sender="X")
    assert ack["error"] == "not_found"


@pytest.mark.asyncio
async def test_request_state(coordinator):
    room_id, (host,) = await room_with_humans(coordinator, 1)
    host.events.clear()

    ack = await send(coordinator, host, "request_state")
    assert ack["success"]
    assert host.last_state()["roomId"] == room_id


@pytest.mark.asyncio
async def test_shutdown_clears_everything():
    coord = GameCoordinator(fast_rules(grace_period_seconds=5.0))
    room_id, (host,) = await room_with_humans(coord, 1)
    await coord.disconnect(host.id)

    await coord.shutdown()

    assert coord.rooms == {}
    assert coord._grace_timers == {}
    assert coord.stats() == {"rooms": 0, "connections": 0, "queue": 0}
