"""In-memory finalized-vote store stub."""

from __future__ import annotations

from collections.abc import Iterable

from ajo_governance.application.ports.vote_store import VoteStorePort
from ajo_governance.domain.models.vote import FinalizedVote


class VoteStoreStub(VoteStorePort):
    """In-memory implementation of VoteStorePort.

    Keyed by (proposal_id, voter). Saving a second vote from the same
    voter keeps whichever was sequenced first.
    """

    def __init__(self) -> None:
        """Initialize empty stub."""
        self._votes: dict[tuple[int, str], FinalizedVote] = {}

    async def save(self, vote: FinalizedVote) -> None:
        key = (vote.proposal_id, vote.voter.lower())
        existing = self._votes.get(key)
        if existing is None or vote.log_sequence_number < existing.log_sequence_number:
            self._votes[key] = vote

    async def list_for_proposal(self, proposal_id: int) -> list[FinalizedVote]:
        votes = [v for (pid, _), v in self._votes.items() if pid == proposal_id]
        return sorted(votes, key=lambda v: v.log_sequence_number)

    async def discard(self, proposal_id: int, voters: Iterable[str]) -> int:
        erased = 0
        for voter in voters:
            if self._votes.pop((proposal_id, voter.lower()), None) is not None:
                erased += 1
        return erased

    def clear(self) -> None:
        """Clear all votes (for test cleanup)."""
        self._votes.clear()
