"""
Tests for the API layer.

Tests:
- GameService dispatch and error codes
- Broadcast messages and snapshots
- ConnectionHub delivery
- HTTP routes and the WebSocket protocol
"""

import pytest
from fastapi.testclient import TestClient

from ..api import create_app, GameService, ConnectionHub, ErrorCode
from ..engine_core.state import Phase
from .conftest import conn


@pytest.fixture
def sent():
    """Every (recipients, message) pair the service publishes."""
    return []


@pytest.fixture
def service(registry, sent) -> GameService:
    svc = GameService(registry=registry)
    svc.set_publisher(lambda ids, message: sent.append((list(ids), message)))
    return svc


def create(service, name="Ann", request_id="r1"):
    return service.handle(conn(name), {
        "type": "createRoom",
        "request_id": request_id,
        "payload": {"name": name},
    })


def join(service, code, name):
    return service.handle(conn(name), {
        "type": "joinRoom",
        "payload": {"room_code": code, "name": name},
    })


@pytest.fixture
def lobby_code(service) -> str:
    code = create(service).room.code
    join(service, code, "Bob")
    join(service, code, "Cam")
    return code


class TestDispatch:
    """Tests for frame parsing and routing."""

    def test_create_room(self, service, registry):
        response = create(service)

        assert response.ok
        assert response.request_id == "r1"
        room = registry.get_room(response.room.code)
        assert response.player_id == room.players[0].player_id
        assert response.room.host_id == response.player_id
        assert response.room.phase == "lobby"

    def test_join_returns_own_player_id(self, service, registry):
        code = create(service).room.code

        response = join(service, code, "Bob")

        assert response.ok
        bob = registry.get_room(code).players[1]
        assert response.player_id == bob.player_id

    def test_malformed_frame(self, service):
        response = service.handle("c1", "not a frame")

        assert not response.ok
        assert response.error_code == ErrorCode.INVALID_REQUEST

    def test_unknown_action(self, service):
        response = service.handle("c1", {"type": "danceParty", "request_id": "x"})

        assert response.error_code == ErrorCode.INVALID_REQUEST
        assert response.request_id == "x"
        assert "danceParty" in response.error

    def test_invalid_payload(self, service):
        response = service.handle("c1", {"type": "createRoom", "payload": {}})

        assert response.error_code == ErrorCode.INVALID_REQUEST

    def test_validation_error(self, service):
        response = service.handle("c1", {"type": "createRoom", "payload": {"name": "  "}})

        assert response.error_code == ErrorCode.VALIDATION_ERROR
        assert response.error == "Name cannot be empty"

    def test_not_found(self, service):
        response = join(service, "ZZZZ", "Bob")

        assert response.error_code == ErrorCode.NOT_FOUND

    def test_conflict(self, service, lobby_code):
        response = service.handle("c-other", {
            "type": "joinRoom",
            "payload": {"room_code": lobby_code, "name": "bob"},
        })

        assert response.error_code == ErrorCode.CONFLICT

    def test_permission_denied(self, service, lobby_code):
        response = service.handle(conn("Bob"), {"type": "startGame"})

        assert response.error_code == ErrorCode.PERMISSION_DENIED

    def test_invalid_phase(self, service, lobby_code):
        service.handle(conn("Ann"), {"type": "startGame"})

        response = service.handle(conn("Bob"), {
            "type": "submitVote",
            "payload": {"submission_player_id": "anyone"},
        })

        assert response.error_code == ErrorCode.INVALID_PHASE

    def test_unexpected_error_is_internal(self, service, registry, lobby_code, monkeypatch):
        def boom(connection_id):
            raise RuntimeError("boom")

        monkeypatch.setattr(registry, "start_game", boom)

        response = service.handle(conn("Ann"), {"type": "startGame", "request_id": "s"})

        assert not response.ok
        assert response.error_code == ErrorCode.INTERNAL_ERROR
        assert response.request_id == "s"

    def test_update_settings(self, service, registry, lobby_code):
        response = service.handle(conn("Ann"), {
            "type": "updateSettings",
            "payload": {"max_rounds": 2, "seconds_to_vote": "fast"},
        })

        assert response.ok
        settings = registry.get_room(lobby_code).settings
        assert settings.max_rounds == 2
        assert settings.seconds_to_vote == 30

    def test_request_room_state(self, service, lobby_code):
        response = service.handle("c-viewer", {
            "type": "requestRoomState",
            "payload": {"room_code": lobby_code.lower()},
        })

        assert response.ok
        assert [p.name for p in response.room.players] == ["Ann", "Bob", "Cam"]

    def test_leave_room(self, service, registry, lobby_code):
        response = service.handle(conn("Cam"), {"type": "leaveRoom"})

        assert response.ok
        assert len(registry.get_room(lobby_code).players) == 2

    def test_disconnect_disposes_empty_lobby(self, service, registry):
        code = create(service).room.code

        service.disconnect(conn("Ann"))

        assert code not in registry.list_rooms()


class TestBroadcast:
    """Tests for pushed room updates."""

    def test_change_is_pushed_to_every_player(self, service, lobby_code, sent):
        recipients, message = sent[-1]

        assert recipients == [conn("Ann"), conn("Bob"), conn("Cam")]
        assert message["type"] == "room_updated"
        assert message["payload"]["code"] == lobby_code
        assert len(message["payload"]["players"]) == 3

    def test_failed_action_pushes_nothing(self, service, lobby_code, sent):
        count = len(sent)

        service.handle(conn("Bob"), {"type": "startGame"})

        assert len(sent) == count

    def test_disconnected_player_not_addressed(self, service, registry, lobby_code, sent):
        join(service, lobby_code, "Dee")
        service.handle(conn("Ann"), {"type": "startGame"})

        service.disconnect(conn("Dee"))

        recipients, _ = sent[-1]
        assert conn("Dee") not in recipients

    def test_snapshot_timers_in_milliseconds(self, service, registry, lobby_code, clock):
        service.handle(conn("Ann"), {"type": "startGame"})

        snapshot = service.get_room_snapshot(lobby_code)

        assert snapshot.phase == "collectingAnswers"
        assert snapshot.timers.answer_deadline == int((clock() + 45) * 1000)
        assert snapshot.timers.vote_deadline is None
        assert snapshot.timers.reveal_deadline is None
        assert snapshot.server_time == int(clock() * 1000)
        assert snapshot.current_round_index == 0
        assert snapshot.rounds[0].status == "collectingAnswers"

    def test_snapshot_marks_disconnected(self, service, registry, lobby_code):
        join(service, lobby_code, "Dee")
        service.handle(conn("Ann"), {"type": "startGame"})
        service.disconnect(conn("Dee"))

        snapshot = service.get_room_snapshot(lobby_code)

        dee = next(p for p in snapshot.players if p.name == "Dee")
        assert dee.connected is False
        assert registry.get_room(lobby_code).phase == Phase.COLLECTING_ANSWERS


class TestConnectionHub:
    """Tests for per-connection outboxes."""

    def test_publish_queues_for_registered_only(self):
        hub = ConnectionHub()
        queue = hub.register("a")

        hub.publish(["a", "ghost"], {"type": "x"})

        assert queue.get_nowait() == {"type": "x"}
        assert "ghost" not in hub
        assert len(hub) == 1

    def test_unregister_drops_messages(self):
        hub = ConnectionHub()
        queue = hub.register("a")
        hub.unregister("a")

        hub.send("a", {"type": "x"})

        assert queue.empty()
        assert "a" not in hub


class TestHttp:
    """Tests for HTTP routes."""

    @pytest.fixture
    def client(self, service):
        with TestClient(create_app(service=service)) as client:
            yield client

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["rooms"] == 0

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["health"] == "/health"

    def test_unknown_room_is_404(self, client):
        response = client.get("/api/v1/rooms/ZZZZ")

        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_room_snapshot(self, client, service):
        code = create(service).room.code

        response = client.get(f"/api/v1/rooms/{code}")

        assert response.status_code == 200
        body = response.json()
        assert body["code"] == code
        assert body["phase"] == "lobby"
        assert body["timers"] == {
            "answer_deadline": None,
            "vote_deadline": None,
            "reveal_deadline": None,
        }


class TestWebSocket:
    """Tests for the WebSocket protocol."""

    @pytest.fixture
    def client(self, service):
        with TestClient(create_app(service=service)) as client:
            yield client

    @staticmethod
    def receive_until(ws, frame_type):
        """Skip frames until one of `frame_type` arrives."""
        while True:
            frame = ws.receive_json()
            if frame["type"] == frame_type:
                return frame

    def test_create_room_acks_and_pushes(self, client, registry):
        with client.websocket_connect("/api/v1/ws") as ws:
            ws.send_json({"type": "createRoom", "request_id": "1", "payload": {"name": "Ann"}})

            update = ws.receive_json()
            ack = self.receive_until(ws, "ack")

            assert update["type"] == "room_updated"
            assert ack["ok"] is True
            assert ack["request_id"] == "1"
            assert ack["room"]["code"] == update["payload"]["code"]
            assert ack["player_id"]
            assert registry.list_rooms() == [ack["room"]["code"]]

    def test_ping(self, client):
        with client.websocket_connect("/api/v1/ws") as ws:
            ws.send_json({"type": "ping"})

            assert ws.receive_json() == {"type": "pong"}

    def test_invalid_json(self, client):
        with client.websocket_connect("/api/v1/ws") as ws:
            ws.send_text("{not json")

            frame = ws.receive_json()

            assert frame["type"] == "error"

    def test_error_ack(self, client):
        with client.websocket_connect("/api/v1/ws") as ws:
            ws.send_json({"type": "startGame", "request_id": "9"})

            ack = self.receive_until(ws, "ack")

            assert ack["ok"] is False
            assert ack["error_code"] == "NOT_FOUND"
            assert ack["request_id"] == "9"

    def test_closing_socket_leaves_room(self, client, registry):
        with client.websocket_connect("/api/v1/ws") as ws:
            ws.send_json({"type": "createRoom", "payload": {"name": "Ann"}})
            self.receive_until(ws, "ack")
            assert len(registry.list_rooms()) == 1

        assert registry.list_rooms() == []
