"""Vote Service - skip votes and likes for the playing entry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from ...domain.music.value_objects import SkipReason
from ...domain.shared.messages import LogTemplates
from ...domain.voting.value_objects import VoteResult

if TYPE_CHECKING:
    from ...domain.music.request_store import RequestStore
    from ...domain.voting.services import SkipVotePolicy
    from ...domain.voting.user_set import UserSet
    from .playback_service import PlaybackScheduler

logger = logging.getLogger(__name__)


class VoteSkipResult(BaseModel):
    """Result of casting a skip vote."""

    model_config = ConfigDict(frozen=True, strict=True)

    result: VoteResult
    message: str
    votes_current: int = 0
    votes_needed: int = 0
    action_executed: bool = False

    @property
    def is_success(self) -> bool:
        return self.result.is_success

    @classmethod
    def from_vote_result(
        cls,
        result: VoteResult,
        votes_current: int = 0,
        votes_needed: int = 0,
    ) -> VoteSkipResult:
        return cls(
            result=result,
            message=result.get_message(votes_current, votes_needed),
            votes_current=votes_current,
            votes_needed=votes_needed,
            action_executed=result.action_executed,
        )


class VoteService:
    """Records skip votes and likes against the entry that is playing now.

    Both tallies are cleared by the scheduler when a new entry starts, so a
    vote or like never leaks onto the next song.
    """

    def __init__(
        self,
        *,
        store: RequestStore,
        scheduler: PlaybackScheduler,
        skip_votes: UserSet,
        likes: UserSet,
        policy: SkipVotePolicy,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._skip_votes = skip_votes
        self._likes = likes
        self._policy = policy

    async def cast_skip_vote(self, user: str) -> VoteSkipResult:
        # The threshold depends on the queue length, so read it under the store
        # lock together with the tally update.
        async with self._store.lock:
            if self._scheduler.now_playing is None:
                return VoteSkipResult.from_vote_result(VoteResult.NO_PLAYING)

            needed = self._policy.threshold(len(self._store))
            if not self._skip_votes.add(user):
                return VoteSkipResult.from_vote_result(
                    VoteResult.ALREADY_VOTED, len(self._skip_votes), needed
                )

            votes = len(self._skip_votes)
            logger.info(LogTemplates.VOTE_CAST, user, votes, needed)
            if not self._policy.is_met(votes, len(self._store)):
                return VoteSkipResult.from_vote_result(VoteResult.VOTE_RECORDED, votes, needed)

            self._skip_votes.clear()

        logger.info(LogTemplates.VOTE_PASSED, votes, needed)
        self._scheduler.skip(SkipReason.VOTE)
        return VoteSkipResult.from_vote_result(VoteResult.THRESHOLD_MET, votes, needed)

    def like(self, user: str) -> str | None:
        """Register ``user``'s like for the playing entry.

        Returns:
            The owner of the playing entry, or None when nothing is playing.
        """
        now_playing = self._scheduler.now_playing
        if now_playing is None:
            return None
        owner = now_playing.entry.owner
        if self._likes.add(user):
            logger.info(LogTemplates.LIKE_CAST, user, owner)
        return owner

    @property
    def like_count(self) -> int:
        return len(self._likes)
