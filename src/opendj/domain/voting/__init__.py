"""
Voting Bounded Context

Per-song skip and like tallies and the skip threshold policy.
"""

from opendj.domain.voting.services import SkipVotePolicy
from opendj.domain.voting.user_set import UserSet
from opendj.domain.voting.value_objects import VoteResult

__all__ = [
    "SkipVotePolicy",
    "UserSet",
    "VoteResult",
]
