"""Value objects for the voting bounded context."""

from __future__ import annotations

from enum import Enum


class VoteResult(Enum):
    """Outcome of casting a skip vote."""

    VOTE_RECORDED = "vote_recorded"
    ALREADY_VOTED = "already_voted"
    THRESHOLD_MET = "threshold_met"
    NO_PLAYING = "no_playing"

    @property
    def is_success(self) -> bool:
        return self in {VoteResult.VOTE_RECORDED, VoteResult.THRESHOLD_MET}

    @property
    def action_executed(self) -> bool:
        return self == VoteResult.THRESHOLD_MET

    def get_message(self, votes: int = 0, needed: int = 0) -> str:
        messages = {
            VoteResult.VOTE_RECORDED: f"{votes}/{needed} votes to skip",
            VoteResult.ALREADY_VOTED: "You already voted to skip",
            VoteResult.THRESHOLD_MET: f"{votes}/{needed} votes to skip - skipping song",
            VoteResult.NO_PLAYING: "Nothing is playing right now",
        }
        return messages[self]
