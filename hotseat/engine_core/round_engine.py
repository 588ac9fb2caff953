"""
Round Engine - Creates rounds, records answers and votes, scores.

The engine knows nothing about phases or deadlines; the scheduler
decides WHEN each operation runs. Every operation validates fully
before it mutates, so a rejected action leaves the round untouched.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import random
import uuid

from .state import Room, Round, Player, Submission, Vote, RoundStatus
from .errors import ValidationError, ConflictError
from ..questions import QuestionProvider


NO_ANSWER = "(No answer)"
NO_ANSWER_HOT_SEAT = "(No answer provided)"

DEFAULT_ANSWER_MAX_LENGTH = 140


@dataclass
class RoundEngine:
    """
    Round-level rules.

    Stateless apart from its random source; all state is on the Room.
    """
    questions: QuestionProvider = field(default_factory=QuestionProvider)
    rng: random.Random = field(default_factory=random.Random)
    answer_max_length: int = DEFAULT_ANSWER_MAX_LENGTH

    def start_round(self, room: Room) -> Round:
        """
        Build the next round.

        The hot seat is chosen round-robin over the currently connected
        players: eligible[rounds played % len(eligible)]. The returned
        round is pending and not yet appended to the room.
        """
        eligible = room.connected_players
        if not eligible:
            raise ValidationError("No connected players to start a round")

        hot_seat = eligible[len(room.rounds) % len(eligible)]
        for player in room.players:
            player.is_hot_seat = player.player_id == hot_seat.player_id

        question = self.questions.draw_question(room, hot_seat.name)
        return Round(
            round_id=str(uuid.uuid4()),
            hot_seat_player_id=hot_seat.player_id,
            question=question,
            status=RoundStatus.PENDING,
        )

    def redraw_question(self, room: Room, round_: Round) -> str:
        """Replace the round's question with the next one from the deck."""
        hot_seat = room.get_player(round_.hot_seat_player_id)
        round_.question = self.questions.draw_question(
            room, hot_seat.name if hot_seat else None
        )
        return round_.question

    def record_submission(self, round_: Round, player: Player, text: str) -> Submission:
        """
        Upsert a player's answer.

        Resubmitting overwrites the earlier text. The answer is the real
        one iff the player currently holds the hot seat.
        """
        cleaned = (text or "").strip()
        if not cleaned:
            raise ValidationError("Answer cannot be empty")
        cleaned = cleaned[: self.answer_max_length].rstrip()

        submission = Submission(
            player_id=player.player_id,
            text=cleaned,
            is_real_answer=player.is_hot_seat,
        )
        for index, existing in enumerate(round_.submissions):
            if existing.player_id == player.player_id:
                round_.submissions[index] = submission
                return submission
        round_.submissions.append(submission)
        return submission

    def fill_missing_submissions(self, room: Room, round_: Round):
        """
        Give every connected player without an answer a placeholder.

        Afterwards the round holds exactly one real answer: if the hot
        seat never answered (or left), a placeholder real answer is
        added under the hot seat's id.
        """
        answered = {s.player_id for s in round_.submissions}
        for player in room.connected_players:
            if player.player_id in answered:
                continue
            is_hot_seat = player.player_id == round_.hot_seat_player_id
            round_.submissions.append(Submission(
                player_id=player.player_id,
                text=NO_ANSWER_HOT_SEAT if is_hot_seat else NO_ANSWER,
                is_real_answer=is_hot_seat,
            ))
            answered.add(player.player_id)

        if round_.real_submission is None:
            existing = round_.submission_for(round_.hot_seat_player_id)
            if existing is not None:
                existing.is_real_answer = True
            else:
                round_.submissions.append(Submission(
                    player_id=round_.hot_seat_player_id,
                    text=NO_ANSWER_HOT_SEAT,
                    is_real_answer=True,
                ))

    def shuffle_submissions(self, round_: Round):
        """Randomize answer order so position reveals nothing about authorship."""
        self.rng.shuffle(round_.submissions)

    def record_vote(self, round_: Round, voter: Player, submission_player_id: str) -> Vote:
        """Record a vote after validating it completely."""
        if voter.player_id == round_.hot_seat_player_id or voter.is_hot_seat:
            raise ValidationError("Hot seat cannot vote")
        if voter.player_id == submission_player_id:
            raise ValidationError("Cannot vote for yourself")
        if round_.submission_for(submission_player_id) is None:
            raise ValidationError("Submission not found")
        if round_.has_voted(voter.player_id):
            raise ConflictError("Vote already submitted")

        vote = Vote(voter_id=voter.player_id, submission_player_id=submission_player_id)
        round_.votes.append(vote)
        return vote

    def score_round(self, room: Room, round_: Round):
        """
        Award points for every vote. Must run exactly once per round.

        Real answer picked: voter +2 and a correct guess, hot seat +1.
        Bluff picked: its author +1 and a trick.
        """
        hot_seat = room.get_player(round_.hot_seat_player_id)
        for vote in round_.votes:
            submission = round_.submission_for(vote.submission_player_id)
            voter = room.get_player(vote.voter_id)
            if submission is None or voter is None:
                continue

            if submission.is_real_answer:
                voter.score += 2
                voter.num_correct_guesses += 1
                if hot_seat is not None:
                    hot_seat.score += 1
            else:
                owner = room.get_player(submission.player_id)
                if owner is not None:
                    owner.score += 1
                    owner.num_people_tricked += 1
