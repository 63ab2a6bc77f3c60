"""Local finalized-vote store port.

Finalized votes are kept client-side until a tally includes them, then
erased.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from ajo_governance.domain.models.vote import FinalizedVote


class VoteStorePort(ABC):
    """Abstract store of finalized votes awaiting tally."""

    @abstractmethod
    async def save(self, vote: FinalizedVote) -> None:
        """Keep a finalized vote until it is tallied."""
        ...

    @abstractmethod
    async def list_for_proposal(self, proposal_id: int) -> list[FinalizedVote]:
        """Return stored votes for a proposal, ordered by sequence number."""
        ...

    @abstractmethod
    async def discard(self, proposal_id: int, voters: Iterable[str]) -> int:
        """Erase the votes of the given voters for a proposal.

        Returns:
            Number of votes erased.
        """
        ...
