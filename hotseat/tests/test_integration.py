"""
Integration tests - End-to-end game flows.

Tests the complete flow:
1. Create a room and join players
2. Start the game
3. Answer, vote and reveal
4. Advance through every round to the final summary
"""

from ..engine_core.state import Phase, RoundStatus
from ..cli import main
from .conftest import conn


def by_name(room, name):
    return next(p for p in room.players if p.name == name)


class TestFullGameFlow:
    """Tests for complete games driven through the registry."""

    def test_ann_bob_cam_round(self, registry, clock, broadcasts):
        """Ann, Bob and Cam play a two-round game to the final summary."""
        room = registry.create_room("Ann", conn("Ann"))
        registry.join_room(room.code, "Bob", conn("Bob"))
        registry.join_room(room.code, "Cam", conn("Cam"))
        registry.update_settings(conn("Ann"), {"max_rounds": 2})
        registry.start_game(conn("Ann"))

        assert room.phase == Phase.COLLECTING_ANSWERS
        ann, bob, cam = (by_name(room, n) for n in ("Ann", "Bob", "Cam"))
        assert room.hot_seat is ann

        registry.submit_answer(conn("Ann"), "Lasagna")
        registry.submit_answer(conn("Bob"), "Sushi")
        registry.submit_answer(conn("Cam"), "Tacos")
        assert room.phase == Phase.VOTING

        round_ = room.current_round
        assert [s.player_id for s in round_.submissions if s.is_real_answer] == [ann.player_id]

        registry.submit_vote(conn("Bob"), ann.player_id)
        registry.submit_vote(conn("Cam"), bob.player_id)

        # Second vote completes the quorum with no tick
        assert room.phase == Phase.SHOWING_RESULTS
        assert (ann.score, bob.score, cam.score) == (1, 3, 0)
        assert bob.num_correct_guesses == 1
        assert bob.num_people_tricked == 1

        clock.advance(room.settings.seconds_to_reveal)
        registry.tick()

        assert room.phase == Phase.COLLECTING_ANSWERS
        assert round_.status == RoundStatus.COMPLETE
        assert room.hot_seat is bob

        registry.submit_answer(conn("Ann"), "Blue")
        registry.submit_answer(conn("Bob"), "Green")
        registry.submit_answer(conn("Cam"), "Red")
        registry.submit_vote(conn("Ann"), cam.player_id)
        registry.submit_vote(conn("Cam"), bob.player_id)
        registry.advance_round(conn("Ann"))

        assert room.phase == Phase.FINAL_SUMMARY
        assert room.deadline is None
        assert (ann.score, bob.score, cam.score) == (1, 4, 3)
        assert broadcasts[-1] == Phase.FINAL_SUMMARY

    def test_unattended_game_runs_on_deadlines(self, registry, started, clock):
        """With nobody acting, ticks alone carry the game to the end."""
        settings = started.settings
        per_round = settings.seconds_to_answer + settings.seconds_to_vote + settings.seconds_to_reveal

        for _ in range(settings.max_rounds * 3):
            clock.advance(per_round)
            registry.tick()
            if started.phase == Phase.FINAL_SUMMARY:
                break

        assert started.phase == Phase.FINAL_SUMMARY
        assert len(started.rounds) == settings.max_rounds
        assert all(r.status == RoundStatus.COMPLETE for r in started.rounds)
        assert all(p.score == 0 for p in started.players)

    def test_every_player_takes_the_hot_seat(self, registry, started):
        """Three rounds with three players seat everyone once."""
        seen = []
        while started.phase != Phase.FINAL_SUMMARY and len(seen) < 3:
            round_ = started.current_round
            seen.append(round_.hot_seat_player_id)
            for name in ("Ann", "Bob", "Cam"):
                registry.submit_answer(conn(name), f"{name} says")
            for player in started.players:
                if not player.is_hot_seat:
                    registry.submit_vote(conn(player.name), round_.hot_seat_player_id)
            registry.advance_round(conn("Ann"))

        assert sorted(seen) == sorted(p.player_id for p in started.players)

    def test_play_again(self, registry, started):
        registry.end_game(conn("Ann"))
        assert started.phase == Phase.FINAL_SUMMARY

        registry.start_game(conn("Ann"))

        assert started.phase == Phase.COLLECTING_ANSWERS
        assert len(started.rounds) == 1


class TestCli:
    """Tests for the command-line entry point."""

    def test_simulate_plays_full_game(self, capsys):
        main(["--log-level", "WARNING", "simulate", "--players", "3", "--rounds", "2", "--seed", "4"])

        out = capsys.readouterr().out
        assert "3 players, 2 rounds" in out
        assert "Round 1:" in out
        assert "Round 2:" in out
        assert "Final scores:" in out
