"""
Voting Domain Services

The skip-vote threshold policy.
"""

from __future__ import annotations

from opendj.domain.shared.messages import ErrorMessages


class SkipVotePolicy:
    """Decides how many distinct skip votes end the current song.

    The threshold is a strict majority of the entries waiting in the queue:
    ``floor(ratio * queue_length) + 1`` with ``ratio`` 0.5, never below
    ``min_votes``. A vote passes when ``votes >= threshold``. An empty queue
    therefore needs ``max(1, min_votes)`` votes.
    """

    DEFAULT_RATIO = 0.5
    MINIMUM_THRESHOLD = 1

    def __init__(self, ratio: float = DEFAULT_RATIO, min_votes: int = MINIMUM_THRESHOLD) -> None:
        if min_votes < 1:
            raise ValueError(ErrorMessages.INVALID_THRESHOLD)
        if not 0.0 <= ratio <= 1.0:
            raise ValueError("ratio must be between 0 and 1")
        self.ratio = ratio
        self.min_votes = min_votes

    def threshold(self, queue_length: int) -> int:
        if queue_length <= 0:
            return self.min_votes
        return max(self.min_votes, int(queue_length * self.ratio) + 1)

    def is_met(self, votes: int, queue_length: int) -> bool:
        return votes >= self.threshold(queue_length)
