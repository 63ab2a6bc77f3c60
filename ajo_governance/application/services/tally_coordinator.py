"""Batched tally submission to the governance contract.

Finalized votes collected from the mirror node (or kept locally) are
submitted in one contract call. The contract re-verifies every signature
and emits VotesTallied with the per-option totals.

Duplicate votes: only the first vote per voter for a proposal (lowest log
sequence number) is submitted; later ones are dropped and logged.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from ajo_governance.application.ports.confirmation import TransactionConfirmationPort
from ajo_governance.application.ports.ledger import LedgerGatewayProtocol
from ajo_governance.application.ports.vote_store import VoteStorePort
from ajo_governance.domain.errors.tally import (
    EmptyBatchError,
    ExecutionRevertedError,
    InvalidSignatureInBatchError,
    SimulatedVoteError,
    TallyError,
    TallyEventMissingError,
)
from ajo_governance.domain.models.vote import FinalizedVote, TallyResult
from ajo_governance.domain.services.tally_codec import (
    encode_tally_call,
    find_votes_tallied,
)

log = structlog.get_logger()

DEFAULT_GAS_LIMIT = 2_000_000

_INVALID_SIGNATURE_MARKERS = ("INVALID_SIGNATURE", "INVALID SIGNATURE")


def map_revert_reason(reason: str) -> TallyError:
    """Map a ledger failure reason onto the tally error taxonomy.

    Args:
        reason: Ledger result code or revert message.

    Returns:
        InvalidSignatureInBatchError when the contract rejected a vote
        signature, ExecutionRevertedError otherwise.
    """
    if any(marker in reason.upper() for marker in _INVALID_SIGNATURE_MARKERS):
        return InvalidSignatureInBatchError(reason)
    return ExecutionRevertedError(reason)


class TallyCoordinator:
    """Submits batches of finalized votes and interprets the tally event.

    Attributes:
        _ledger: Wallet-backed contract execution.
        _confirmations: Source of confirmed call results.
        _contract_id: Governance contract of the savings circle.
    """

    def __init__(
        self,
        ledger: LedgerGatewayProtocol,
        confirmations: TransactionConfirmationPort,
        contract_id: str,
        *,
        gas_limit: int = DEFAULT_GAS_LIMIT,
        allow_simulated_votes: bool = False,
        vote_store: VoteStorePort | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            ledger: Contract execution capability.
            confirmations: Confirmed transaction results.
            contract_id: Governance contract id or EVM address.
            gas_limit: Gas limit for the tally call.
            allow_simulated_votes: Accept votes with simulated sequence
                numbers. Development and demos only.
            vote_store: Local store to erase tallied votes from.
        """
        self._ledger = ledger
        self._confirmations = confirmations
        self._contract_id = contract_id
        self._gas_limit = gas_limit
        self._allow_simulated_votes = allow_simulated_votes
        self._vote_store = vote_store

    async def tally(self, proposal_id: int, votes: Sequence[FinalizedVote]) -> TallyResult:
        """Tally a batch of finalized votes on the ledger.

        Args:
            proposal_id: Proposal being tallied.
            votes: Finalized votes for the proposal.

        Returns:
            Totals reported by the contract's VotesTallied event.

        Raises:
            EmptyBatchError: If ``votes`` is empty (no network call is made).
            SimulatedVoteError: If a vote is simulated and that is not allowed.
            InvalidSignatureInBatchError: If the contract rejected a signature.
            ExecutionRevertedError: If the transaction reverted otherwise.
            ConfirmationTimeoutError: If the transaction was never confirmed.
            TallyEventMissingError: If the transaction emitted no tally event.
        """
        if not votes:
            raise EmptyBatchError(proposal_id)

        batch = self._prepare_batch(proposal_id, votes)
        call_data = encode_tally_call(proposal_id, batch)
        log.info(
            "tally_submitting",
            proposal_id=proposal_id,
            votes=len(batch),
            contract_id=self._contract_id,
        )

        try:
            transaction_id = await self._ledger.execute_contract(
                self._contract_id, call_data, self._gas_limit
            )
        except ExecutionRevertedError as e:
            raise map_revert_reason(e.reason) from e

        result = await self._confirmations.await_contract_result(transaction_id)
        if not result.succeeded:
            log.error(
                "tally_reverted",
                proposal_id=proposal_id,
                transaction_id=transaction_id,
                result=result.result,
                error_message=result.error_message,
            )
            raise map_revert_reason(result.error_message or result.result)

        totals = find_votes_tallied(result.logs, proposal_id)
        if totals is None:
            raise TallyEventMissingError(transaction_id, len(result.logs))

        tally = TallyResult(
            proposal_id=proposal_id,
            for_votes=totals.for_votes,
            against_votes=totals.against_votes,
            abstain_votes=totals.abstain_votes,
            is_passing=totals.for_votes > totals.against_votes,
            resource_used=result.gas_used,
            transaction_id=transaction_id,
        )
        log.info(
            "tally_completed",
            proposal_id=proposal_id,
            for_votes=tally.for_votes,
            against_votes=tally.against_votes,
            abstain_votes=tally.abstain_votes,
            is_passing=tally.is_passing,
            gas_used=tally.resource_used,
        )

        if self._vote_store is not None:
            erased = await self._vote_store.discard(proposal_id, [v.voter for v in batch])
            log.debug("tallied_votes_erased", proposal_id=proposal_id, erased=erased)
        return tally

    def _prepare_batch(
        self, proposal_id: int, votes: Sequence[FinalizedVote]
    ) -> list[FinalizedVote]:
        for vote in votes:
            if not isinstance(vote, FinalizedVote):
                raise TypeError(
                    f"only finalized votes can be tallied, got {type(vote).__name__}"
                )
            if vote.proposal_id != proposal_id:
                raise ValueError(
                    f"vote for proposal {vote.proposal_id} in batch for proposal {proposal_id}"
                )

        simulated = [v.voter for v in votes if v.simulated]
        if simulated and not self._allow_simulated_votes:
            raise SimulatedVoteError(simulated)

        batch: list[FinalizedVote] = []
        seen: set[str] = set()
        for vote in sorted(votes, key=lambda v: v.log_sequence_number):
            key = vote.voter.lower()
            if key in seen:
                log.warning(
                    "duplicate_vote_dropped",
                    proposal_id=proposal_id,
                    voter=vote.voter,
                    sequence_number=vote.log_sequence_number,
                )
                continue
            seen.add(key)
            batch.append(vote)
        return batch
