"""
Pytest fixtures for Hot Seat tests.
"""

import random

import pytest

from ..config import GameConfig
from ..engine_core.state import Room, Player
from ..engine_core.round_engine import RoundEngine
from ..engine_core.scheduler import PhaseScheduler
from ..questions import QuestionProvider
from ..session import RoomRegistry, ManualClock


def build_room(*names: str, code: str = "TEST") -> Room:
    """Room with one connected player per name; the first is host."""
    players = [
        Player(
            player_id=f"p-{name.lower()}",
            name=name,
            connection_id=f"c-{name.lower()}",
            is_host=(i == 0),
        )
        for i, name in enumerate(names)
    ]
    return Room(code=code, created_at=0.0, players=players)


def conn(name: str) -> str:
    """Connection id used for `name` by the fixtures."""
    return f"c-{name.lower()}"


def hot_seat_of(room: Room) -> Player:
    hot_seat = room.hot_seat
    assert hot_seat is not None
    return hot_seat


def answer_all(scheduler: PhaseScheduler, room: Room, skip: tuple[str, ...] = ()):
    """Every connected player (except `skip` names) submits an answer."""
    for player in list(room.connected_players):
        if player.name in skip:
            continue
        label = "truth" if player.is_hot_seat else "bluff"
        scheduler.submit_answer(room, player, f"{player.name} {label}")


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def config() -> GameConfig:
    return GameConfig(min_players=3)


@pytest.fixture
def engine() -> RoundEngine:
    return RoundEngine(
        questions=QuestionProvider(rng=random.Random(1)),
        rng=random.Random(2),
    )


@pytest.fixture
def scheduler(engine: RoundEngine, config: GameConfig, clock: ManualClock) -> PhaseScheduler:
    return PhaseScheduler(engine=engine, config=config, clock=clock)


@pytest.fixture
def registry(scheduler: PhaseScheduler) -> RoomRegistry:
    return RoomRegistry(scheduler=scheduler, rng=random.Random(3))


@pytest.fixture
def broadcasts(registry: RoomRegistry) -> list:
    """Phase of the room at every broadcast, in order."""
    seen = []
    registry.add_listener(lambda room: seen.append(room.phase))
    return seen


@pytest.fixture
def lobby(registry: RoomRegistry) -> Room:
    """A lobby with Ann (host), Bob and Cam."""
    room = registry.create_room("Ann", conn("Ann"))
    registry.join_room(room.code, "Bob", conn("Bob"))
    registry.join_room(room.code, "Cam", conn("Cam"))
    return room


@pytest.fixture
def started(registry: RoomRegistry, lobby: Room) -> Room:
    """Ann/Bob/Cam game in its first collectingAnswers phase."""
    registry.start_game(conn("Ann"))
    return lobby


@pytest.fixture
def room_of_four(scheduler: PhaseScheduler) -> Room:
    """Four-player room started directly on the scheduler."""
    room = build_room("Ann", "Bob", "Cam", "Dee")
    scheduler.start_game(room, room.players[0])
    return room
