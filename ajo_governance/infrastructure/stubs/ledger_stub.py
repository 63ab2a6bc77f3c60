"""In-memory governance contract stub.

Implements both the ledger gateway and the confirmation port. A tally
call is decoded, every vote signature is re-verified the way the
contract does, and a VotesTallied log is emitted with weighted totals.

The stub keeps no tally state between calls, so submitting the same
batch twice yields the same totals.
"""

from __future__ import annotations

from dataclasses import dataclass

from ajo_governance.application.ports.confirmation import TransactionConfirmationPort
from ajo_governance.application.ports.ledger import LedgerGatewayProtocol
from ajo_governance.domain.errors.signature import MalformedSignatureError
from ajo_governance.domain.errors.tally import (
    ConfirmationTimeoutError,
    ExecutionRevertedError,
)
from ajo_governance.domain.identifiers import account_to_evm_address
from ajo_governance.domain.models.ledger import SUCCESS_RESULT, ContractCallResult
from ajo_governance.domain.models.signature import RecoveryFailure
from ajo_governance.domain.models.vote import VoteSupport
from ajo_governance.domain.services.signature_codec import normalize_signature
from ajo_governance.domain.services.signer_recovery import try_recover
from ajo_governance.domain.services.tally_codec import (
    EncodedVote,
    VoteTotals,
    decode_tally_call,
    encode_votes_tallied,
)
from ajo_governance.domain.services.vote_digest import (
    compute_vote_digest,
    encode_log_message_id,
)

REVERT_RESULT = "CONTRACT_REVERT_EXECUTED"
INVALID_SIGNATURE_REASON = "INVALID_SIGNATURE"
GAS_PER_VOTE = 45_000
BASE_GAS = 30_000


@dataclass(frozen=True)
class ContractCall:
    """Record of an execute_contract() call."""

    contract_id: str
    function_parameters: bytes
    gas: int
    transaction_id: str


class GovernanceLedgerStub(LedgerGatewayProtocol, TransactionConfirmationPort):
    """In-memory governance contract and mirror confirmation."""

    def __init__(self, *, emit_event: bool = True) -> None:
        """Initialize stub.

        Args:
            emit_event: Emit VotesTallied on success. False mimics a
                contract that completes without the event.
        """
        self._emit_event = emit_event
        self._results: dict[str, ContractCallResult] = {}
        self._unconfirmed: set[str] = set()
        self._revert_on_submit: str | None = None
        self._force_result: tuple[str, str] | None = None
        self.calls: list[ContractCall] = []

    def revert_on_submit(self, reason: str) -> None:
        """Make the next execute_contract() raise ExecutionRevertedError."""
        self._revert_on_submit = reason

    def force_next_result(self, result: str, error_message: str = "") -> None:
        """Report the next transaction with a fixed ledger result."""
        self._force_result = (result, error_message)

    def never_confirm_next(self) -> None:
        """Make the next transaction invisible to confirmation."""
        self._unconfirmed.add(self._next_transaction_id())

    async def execute_contract(
        self,
        contract_id: str,
        function_parameters: bytes,
        gas: int,
    ) -> str:
        """Execute a tally call against the in-memory contract."""
        transaction_id = self._next_transaction_id()
        self.calls.append(
            ContractCall(
                contract_id=contract_id,
                function_parameters=function_parameters,
                gas=gas,
                transaction_id=transaction_id,
            )
        )

        if self._revert_on_submit is not None:
            reason, self._revert_on_submit = self._revert_on_submit, None
            raise ExecutionRevertedError(reason)

        self._results[transaction_id] = self._run(contract_id, function_parameters, transaction_id)
        return transaction_id

    async def await_contract_result(self, transaction_id: str) -> ContractCallResult:
        """Return the stored result of a transaction."""
        if transaction_id in self._unconfirmed or transaction_id not in self._results:
            raise ConfirmationTimeoutError(transaction_id, attempts=1, interval_seconds=0.0)
        return self._results[transaction_id]

    def _run(
        self, contract_id: str, function_parameters: bytes, transaction_id: str
    ) -> ContractCallResult:
        if self._force_result is not None:
            (result, error_message), self._force_result = self._force_result, None
            return ContractCallResult(
                transaction_id=transaction_id, result=result, error_message=error_message
            )

        try:
            proposal_id, votes = decode_tally_call(function_parameters)
        except ValueError as e:
            return ContractCallResult(
                transaction_id=transaction_id, result=REVERT_RESULT, error_message=str(e)
            )

        if not all(self._signature_valid(proposal_id, vote) for vote in votes):
            return ContractCallResult(
                transaction_id=transaction_id,
                result=REVERT_RESULT,
                error_message=INVALID_SIGNATURE_REASON,
            )

        totals = VoteTotals(
            proposal_id=proposal_id,
            for_votes=sum(v.voting_power for v in votes if v.support is VoteSupport.FOR),
            against_votes=sum(v.voting_power for v in votes if v.support is VoteSupport.AGAINST),
            abstain_votes=sum(v.voting_power for v in votes if v.support is VoteSupport.ABSTAIN),
        )
        logs = (
            (encode_votes_tallied(account_to_evm_address(contract_id), totals),)
            if self._emit_event
            else ()
        )
        return ContractCallResult(
            transaction_id=transaction_id,
            result=SUCCESS_RESULT,
            gas_used=BASE_GAS + GAS_PER_VOTE * len(votes),
            logs=logs,
        )

    @staticmethod
    def _signature_valid(proposal_id: int, vote: EncodedVote) -> bool:
        if vote.log_message_id != encode_log_message_id(vote.log_sequence_number):
            return False
        try:
            signature = normalize_signature(vote.signature)
        except MalformedSignatureError:
            return False
        digest = compute_vote_digest(
            proposal_id,
            vote.voter,
            vote.support,
            vote.log_message_id,
            vote.log_sequence_number,
        )
        outcome = try_recover(digest, signature, expected_signer=vote.voter)
        return not isinstance(outcome, RecoveryFailure)

    def _next_transaction_id(self) -> str:
        return f"0.0.2002@1700000100.{len(self.calls) + 1:09d}"
