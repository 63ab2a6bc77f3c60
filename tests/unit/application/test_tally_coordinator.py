"""Unit tests for TallyCoordinator."""

from unittest.mock import AsyncMock

import pytest
from structlog.testing import capture_logs

from ajo_governance.application.services.tally_coordinator import (
    DEFAULT_GAS_LIMIT,
    TallyCoordinator,
    map_revert_reason,
)
from ajo_governance.domain.errors.tally import (
    ConfirmationTimeoutError,
    EmptyBatchError,
    ExecutionRevertedError,
    InvalidSignatureInBatchError,
    SimulatedVoteError,
    TallyEventMissingError,
)
from ajo_governance.domain.models.ledger import ContractCallResult
from ajo_governance.domain.models.vote import VoteSupport
from ajo_governance.domain.services.tally_codec import decode_tally_call
from ajo_governance.infrastructure.stubs import GovernanceLedgerStub

KEY_A = "0x" + "11" * 32
KEY_B = "0x" + "22" * 32
KEY_C = "0x" + "33" * 32


@pytest.fixture
def coordinator(ledger, contract_id) -> TallyCoordinator:
    return TallyCoordinator(ledger=ledger, confirmations=ledger, contract_id=contract_id)


@pytest.fixture
def batch(make_finalized_vote):
    return [
        make_finalized_vote(key=KEY_A, support=VoteSupport.FOR, sequence_number=1),
        make_finalized_vote(key=KEY_B, support=VoteSupport.FOR, sequence_number=2),
        make_finalized_vote(key=KEY_C, support=VoteSupport.AGAINST, sequence_number=3),
    ]


class TestMapRevertReason:
    """Tests for ledger failure mapping."""

    @pytest.mark.parametrize("reason", ["INVALID_SIGNATURE", "revert: Invalid signature"])
    def test_invalid_signature(self, reason: str) -> None:
        assert isinstance(map_revert_reason(reason), InvalidSignatureInBatchError)

    def test_generic_revert(self) -> None:
        error = map_revert_reason("CONTRACT_REVERT_EXECUTED")

        assert isinstance(error, ExecutionRevertedError)
        assert error.reason == "CONTRACT_REVERT_EXECUTED"


class TestTally:
    """Tests for batched tally submission."""

    @pytest.mark.asyncio
    async def test_empty_batch_makes_no_call(self, contract_id) -> None:
        """An empty batch fails before any ledger interaction."""
        ledger = AsyncMock()
        confirmations = AsyncMock()
        coordinator = TallyCoordinator(ledger, confirmations, contract_id)

        with pytest.raises(EmptyBatchError):
            await coordinator.tally(7, [])

        ledger.execute_contract.assert_not_called()
        confirmations.await_contract_result.assert_not_called()

    @pytest.mark.asyncio
    async def test_totals_from_event(self, coordinator, ledger, batch) -> None:
        """Totals and pass status come from the VotesTallied event."""
        result = await coordinator.tally(7, batch)

        assert result.for_votes == 200
        assert result.against_votes == 100
        assert result.abstain_votes == 0
        assert result.is_passing is True
        assert result.resource_used > 0
        assert result.transaction_id == ledger.calls[0].transaction_id

    @pytest.mark.asyncio
    async def test_tie_is_not_passing(self, coordinator, make_finalized_vote) -> None:
        votes = [
            make_finalized_vote(key=KEY_A, support=VoteSupport.FOR, sequence_number=1),
            make_finalized_vote(key=KEY_B, support=VoteSupport.AGAINST, sequence_number=2),
            make_finalized_vote(key=KEY_C, support=VoteSupport.ABSTAIN, sequence_number=3),
        ]

        result = await coordinator.tally(7, votes)

        assert result.abstain_votes == 100
        assert result.is_passing is False

    @pytest.mark.asyncio
    async def test_call_parameters(self, coordinator, ledger, batch, contract_id) -> None:
        """One call with the default gas limit carrying the whole batch."""
        await coordinator.tally(7, batch)

        assert len(ledger.calls) == 1
        call = ledger.calls[0]
        assert call.contract_id == contract_id
        assert call.gas == DEFAULT_GAS_LIMIT
        proposal_id, encoded = decode_tally_call(call.function_parameters)
        assert proposal_id == 7
        assert [v.log_sequence_number for v in encoded] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_idempotent(self, coordinator, batch) -> None:
        """Tallying the same batch twice yields the same totals."""
        first = await coordinator.tally(7, batch)
        second = await coordinator.tally(7, batch)

        assert (first.for_votes, first.against_votes, first.abstain_votes) == (
            second.for_votes,
            second.against_votes,
            second.abstain_votes,
        )
        assert first.is_passing == second.is_passing

    @pytest.mark.asyncio
    async def test_invalid_signature_in_batch(
        self, coordinator, batch, make_finalized_vote
    ) -> None:
        """A vote whose signature does not bind its fields is rejected."""
        good = make_finalized_vote(key=KEY_A, sequence_number=9)
        forged = type(good)(**{**good.__dict__, "voter": batch[1].voter})

        with pytest.raises(InvalidSignatureInBatchError):
            await coordinator.tally(7, [batch[0], forged])

    @pytest.mark.asyncio
    async def test_revert_on_submit_mapped(self, coordinator, ledger, batch) -> None:
        ledger.revert_on_submit("INVALID_SIGNATURE")

        with pytest.raises(InvalidSignatureInBatchError):
            await coordinator.tally(7, batch)

    @pytest.mark.asyncio
    async def test_generic_revert(self, coordinator, ledger, batch) -> None:
        ledger.force_next_result("CONTRACT_REVERT_EXECUTED", "Proposal not active")

        with pytest.raises(ExecutionRevertedError, match="Proposal not active"):
            await coordinator.tally(7, batch)

    @pytest.mark.asyncio
    async def test_event_missing(self, batch, contract_id) -> None:
        """A successful call without VotesTallied is an error."""
        ledger = GovernanceLedgerStub(emit_event=False)
        coordinator = TallyCoordinator(ledger, ledger, contract_id)

        with pytest.raises(TallyEventMissingError):
            await coordinator.tally(7, batch)

    @pytest.mark.asyncio
    async def test_success_without_logs(self, batch, contract_id) -> None:
        ledger = AsyncMock()
        ledger.execute_contract.return_value = "0.0.2@1.1"
        confirmations = AsyncMock()
        confirmations.await_contract_result.return_value = ContractCallResult(
            transaction_id="0.0.2@1.1", result="SUCCESS", gas_used=1
        )
        coordinator = TallyCoordinator(ledger, confirmations, contract_id)

        with pytest.raises(TallyEventMissingError):
            await coordinator.tally(7, batch)

    @pytest.mark.asyncio
    async def test_confirmation_timeout_propagates(self, coordinator, ledger, batch) -> None:
        ledger.never_confirm_next()

        with pytest.raises(ConfirmationTimeoutError):
            await coordinator.tally(7, batch)


class TestBatchPreparation:
    """Tests for batch validation and duplicate handling."""

    @pytest.mark.asyncio
    async def test_duplicate_votes_keep_first(
        self, coordinator, ledger, make_finalized_vote
    ) -> None:
        """Only the lowest-sequence vote per voter is submitted."""
        first = make_finalized_vote(key=KEY_A, support=VoteSupport.FOR, sequence_number=4)
        later = make_finalized_vote(key=KEY_A, support=VoteSupport.AGAINST, sequence_number=8)

        with capture_logs() as logs:
            result = await coordinator.tally(7, [later, first])

        assert (result.for_votes, result.against_votes) == (100, 0)
        _, encoded = decode_tally_call(ledger.calls[0].function_parameters)
        assert [v.log_sequence_number for v in encoded] == [4]
        dropped = [e for e in logs if e["event"] == "duplicate_vote_dropped"]
        assert dropped[0]["sequence_number"] == 8

    @pytest.mark.asyncio
    async def test_simulated_votes_rejected(
        self, coordinator, ledger, make_finalized_vote
    ) -> None:
        votes = [make_finalized_vote(key=KEY_A, simulated=True)]

        with pytest.raises(SimulatedVoteError) as exc_info:
            await coordinator.tally(7, votes)

        assert exc_info.value.voters == [votes[0].voter]
        assert ledger.calls == []

    @pytest.mark.asyncio
    async def test_simulated_votes_allowed_in_development(
        self, ledger, contract_id, make_finalized_vote
    ) -> None:
        coordinator = TallyCoordinator(
            ledger, ledger, contract_id, allow_simulated_votes=True
        )

        result = await coordinator.tally(7, [make_finalized_vote(simulated=True)])

        assert result.for_votes == 100

    @pytest.mark.asyncio
    async def test_vote_for_other_proposal_rejected(
        self, coordinator, make_finalized_vote
    ) -> None:
        with pytest.raises(ValueError, match="proposal 8"):
            await coordinator.tally(7, [make_finalized_vote(proposal_id=8)])

    @pytest.mark.asyncio
    async def test_non_finalized_vote_rejected(self, coordinator) -> None:
        with pytest.raises(TypeError, match="only finalized votes"):
            await coordinator.tally(7, ["not a vote"])  # type: ignore[list-item]

    @pytest.mark.asyncio
    async def test_tallied_votes_discarded_from_store(
        self, ledger, vote_store, contract_id, batch
    ) -> None:
        for vote in batch:
            await vote_store.save(vote)
        coordinator = TallyCoordinator(ledger, ledger, contract_id, vote_store=vote_store)

        await coordinator.tally(7, batch)

        assert await vote_store.list_for_proposal(7) == []

    @pytest.mark.asyncio
    async def test_store_kept_on_failure(self, ledger, vote_store, contract_id, batch) -> None:
        for vote in batch:
            await vote_store.save(vote)
        ledger.force_next_result("CONTRACT_REVERT_EXECUTED")
        coordinator = TallyCoordinator(ledger, ledger, contract_id, vote_store=vote_store)

        with pytest.raises(ExecutionRevertedError):
            await coordinator.tally(7, batch)

        assert len(await vote_store.list_for_proposal(7)) == 3
