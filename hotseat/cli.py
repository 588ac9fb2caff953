"""
Hot Seat CLI - Command-line interface for the game server.

Usage:
    hotseat serve [--host H] [--port P]       Run the API server
    hotseat simulate [--players N] [--seed S] Play a scripted game in-process
"""

import argparse
import logging
import os
import random
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Hot Seat - Multiplayer bluffing game server",
        prog="hotseat",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("HOTSEAT_LOG_LEVEL", "INFO"),
        help="Logging level (DEBUG, INFO, WARNING, ...)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    serve_parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "4000")))

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play a scripted game")
    simulate_parser.add_argument("--players", type=int, default=4, help="Number of players")
    simulate_parser.add_argument("--rounds", type=int, default=None, help="Rounds to play")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Random seed")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "simulate":
        cmd_simulate(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Run the FastAPI app under uvicorn."""
    import uvicorn

    uvicorn.run(
        "hotseat.api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
    )


def cmd_simulate(args):
    """Play one full game with random answers and votes, then print the scores."""
    from .config import load_config
    from .engine_core import PhaseScheduler, RoundEngine, Phase
    from .questions import QuestionProvider
    from .session import RoomRegistry, ManualClock

    rng = random.Random(args.seed)
    clock = ManualClock()
    config = load_config()
    scheduler = PhaseScheduler(
        engine=RoundEngine(questions=QuestionProvider(rng=rng), rng=rng),
        config=config,
        clock=clock,
    )
    registry = RoomRegistry(scheduler=scheduler, rng=rng)

    names = ["Ann", "Bob", "Cam", "Dee", "Eli", "Fay", "Gus", "Hal"]
    connections = [f"sim-{i}" for i in range(args.players)]
    room = registry.create_room(names[0], connections[0])
    for i in range(1, args.players):
        name = names[i] if i < len(names) else f"Player{i + 1}"
        registry.join_room(room.code, name, connections[i])

    if args.rounds:
        registry.update_settings(connections[0], {"max_rounds": args.rounds})

    if len(room.players) < config.min_players:
        print(f"Error: need at least {config.min_players} players (HOTSEAT_MIN_PLAYERS)")
        sys.exit(1)

    print(f"Room {room.code}: {len(room.players)} players, {room.settings.max_rounds} rounds")
    registry.start_game(connections[0])

    while room.phase != Phase.FINAL_SUMMARY:
        round_ = room.current_round
        print(f"\nRound {len(room.rounds)}: {round_.question}")

        for player, connection_id in zip(room.players, connections):
            answer = "the truth" if player.is_hot_seat else f"a bluff by {player.name}"
            registry.submit_answer(connection_id, answer)

        for player, connection_id in zip(room.players, connections):
            if player.is_hot_seat:
                continue
            choices = [
                s.player_id for s in round_.submissions
                if s.player_id != player.player_id
            ]
            registry.submit_vote(connection_id, rng.choice(choices))

        for vote in round_.votes:
            voter = room.get_player(vote.voter_id)
            target = room.get_player(vote.submission_player_id)
            print(f"  {voter.name} voted for {target.name}'s answer")

        clock.advance(room.settings.seconds_to_reveal)
        registry.tick()

    print("\nFinal scores:")
    for player in sorted(room.players, key=lambda p: p.score, reverse=True):
        print(
            f"  {player.name:<8} {player.score:>3} pts  "
            f"(guessed {player.num_correct_guesses}, tricked {player.num_people_tricked})"
        )


if __name__ == "__main__":
    main()
