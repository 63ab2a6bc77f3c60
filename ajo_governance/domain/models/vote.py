"""Vote lifecycle models.

A vote moves through distinct, immutable types so that only a vote whose
signature binds the log-assigned sequence number can ever be tallied:

    VoteIntent -> PendingVote -> LoggedVote -> FinalizedVote

Each transition returns a new object; nothing is mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

ZERO_MESSAGE_ID: bytes = bytes(32)
ZERO_ADDRESS: str = "0x" + "00" * 20
DEFAULT_VOTING_POWER: int = 100


class VoteSupport(IntEnum):
    """Ballot option, encoded as uint8 in the signed digest."""

    AGAINST = 0
    FOR = 1
    ABSTAIN = 2


@dataclass(frozen=True)
class VoteIntent:
    """A member's decision before anything is signed.

    Attributes:
        proposal_id: Governance proposal being voted on.
        support: Chosen ballot option.
    """

    proposal_id: int
    support: VoteSupport

    def __post_init__(self) -> None:
        """Validate intent values."""
        if self.proposal_id < 0:
            raise ValueError(f"proposal_id must be non-negative, got {self.proposal_id}")
        object.__setattr__(self, "support", VoteSupport(self.support))


@dataclass(frozen=True)
class PendingVote:
    """A vote signed over a zero log placeholder, not yet sequenced.

    The voter is the address recovered from the signature, never an
    address supplied by the caller.

    Attributes:
        proposal_id: Governance proposal being voted on.
        voter: Checksummed address recovered from ``signature``.
        support: Chosen ballot option.
        signature: Canonical 65-byte signature over the preliminary digest.
        timestamp: Unix seconds when the vote was signed.
    """

    proposal_id: int
    voter: str
    support: VoteSupport
    signature: bytes
    timestamp: int
    log_message_id: bytes = ZERO_MESSAGE_ID
    log_sequence_number: int = 0


@dataclass(frozen=True)
class LoggedVote:
    """A pending vote that the ordered log has accepted.

    Attributes:
        pending: The vote as it was submitted.
        log_message_id: Sequence number encoded as 32 big-endian bytes.
        log_sequence_number: Sequence number assigned by the log.
        transaction_id: Log submission transaction identifier.
        simulated: True when the sequence number came from the local
            fallback rather than the log.
    """

    pending: PendingVote
    log_message_id: bytes
    log_sequence_number: int
    transaction_id: str
    simulated: bool = False

    @property
    def proposal_id(self) -> int:
        return self.pending.proposal_id

    @property
    def voter(self) -> str:
        return self.pending.voter

    @property
    def support(self) -> VoteSupport:
        return self.pending.support

    @property
    def timestamp(self) -> int:
        return self.pending.timestamp


@dataclass(frozen=True)
class FinalizedVote:
    """A vote whose signature covers the log-assigned sequence number.

    This is the only vote type accepted by the tally.

    Attributes:
        proposal_id: Governance proposal being voted on.
        voter: Checksummed address the signature recovers to.
        support: Chosen ballot option.
        voting_power: Weight submitted to the ledger.
        timestamp: Unix seconds when the vote was first signed.
        log_message_id: Sequence number encoded as 32 big-endian bytes.
        log_sequence_number: Sequence number bound into the signature.
        signature: Canonical 65-byte signature over the final digest.
        simulated: True when the sequence number is not authoritative.
    """

    proposal_id: int
    voter: str
    support: VoteSupport
    voting_power: int
    timestamp: int
    log_message_id: bytes
    log_sequence_number: int
    signature: bytes
    simulated: bool = False

    def __post_init__(self) -> None:
        """Validate fixed-width fields."""
        if len(self.log_message_id) != 32:
            raise ValueError(
                f"log_message_id must be 32 bytes, got {len(self.log_message_id)}"
            )
        if len(self.signature) != 65:
            raise ValueError(f"signature must be 65 bytes, got {len(self.signature)}")


@dataclass(frozen=True)
class TallyResult:
    """Vote totals reported by the governance contract.

    Attributes:
        proposal_id: Proposal that was tallied.
        for_votes: Total weight in favour.
        against_votes: Total weight against.
        abstain_votes: Total abstaining weight.
        is_passing: True when for_votes exceeds against_votes.
        resource_used: Gas consumed by the tally transaction.
        transaction_id: The tally transaction.
    """

    proposal_id: int
    for_votes: int
    against_votes: int
    abstain_votes: int
    is_passing: bool
    resource_used: int
    transaction_id: str = ""
