"""Tally submission exceptions.

Ledger-level failures are mapped onto these classes by TallyCoordinator
and the mirror confirmation poller, so callers see one taxonomy whatever
path the transaction took.
"""

from ajo_governance.domain.exceptions import GovernanceError


class TallyError(GovernanceError):
    """Base exception for tally failures."""

    pass


class EmptyBatchError(TallyError):
    """Raised when a tally is requested with no votes."""

    def __init__(self, proposal_id: int) -> None:
        """Initialize with the proposal that had no votes.

        Args:
            proposal_id: Proposal being tallied.
        """
        super().__init__(f"No votes to tally for proposal {proposal_id}")
        self.proposal_id = proposal_id


class ExecutionRevertedError(TallyError):
    """Raised when the tally transaction reverted for a generic reason."""

    def __init__(self, reason: str = "") -> None:
        """Initialize with the revert reason.

        Args:
            reason: Revert reason or transaction result code.
        """
        message = (
            f"Tally transaction reverted: {reason}" if reason else "Tally transaction reverted"
        )
        super().__init__(message)
        self.reason = reason


class InvalidSignatureInBatchError(TallyError):
    """Raised when the contract rejected a vote signature in the batch."""

    def __init__(self, reason: str = "") -> None:
        """Initialize with the revert reason.

        Args:
            reason: Revert reason or transaction result code.
        """
        super().__init__(f"Invalid signature detected in votes: {reason or 'INVALID_SIGNATURE'}")
        self.reason = reason


class TallyEventMissingError(TallyError):
    """Raised when a successful transaction did not emit VotesTallied."""

    def __init__(self, transaction_id: str = "", seen_events: int = 0) -> None:
        """Initialize with transaction details.

        Args:
            transaction_id: The tally transaction.
            seen_events: Number of logs the transaction did emit.
        """
        super().__init__(
            f"VotesTallied event not found in transaction {transaction_id or '<unknown>'} "
            f"({seen_events} logs inspected)"
        )
        self.transaction_id = transaction_id
        self.seen_events = seen_events


class ConfirmationTimeoutError(TallyError):
    """Raised when a transaction is not confirmed within the polling bound."""

    def __init__(self, transaction_id: str, attempts: int, interval_seconds: float) -> None:
        """Initialize with the polling parameters that were exhausted.

        Args:
            transaction_id: Transaction that was being confirmed.
            attempts: Number of polling attempts made.
            interval_seconds: Delay between attempts.
        """
        super().__init__(
            f"Transaction {transaction_id} not found on mirror node after "
            f"{attempts} attempts ({attempts * interval_seconds:.0f} seconds)"
        )
        self.transaction_id = transaction_id
        self.attempts = attempts


class SimulatedVoteError(TallyError):
    """Raised when a vote with a simulated log receipt reaches a real tally."""

    def __init__(self, voters: list[str]) -> None:
        """Initialize with the voters whose votes were simulated.

        Args:
            voters: Addresses of votes carrying simulated sequence numbers.
        """
        super().__init__(
            f"{len(voters)} vote(s) carry simulated log sequence numbers and "
            "cannot be tallied"
        )
        self.voters = voters
