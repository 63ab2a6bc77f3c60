"""Two-phase vote signing session.

The governance contract requires the log-assigned sequence number inside
the signed digest, but the sequence number only exists after the vote has
been submitted to the log. The session resolves this with two explicit
signing phases:

    UNSIGNED
      -> PRELIMINARY_SIGNED   sign over a zero log placeholder, learn voter
      -> AWAITING_SEQUENCE    submit to the ordered log
      -> FINAL_SIGNED         sign again with the sequence number bound in

Any failure inside a step (including cancellation) moves the session to
FAILED; a failed session performs no further log submissions.

Identity rule: the voter is whatever the signature recovers to. The
caller may pass a ``claimed_voter`` hint, but it is only bound into the
digest, never trusted.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from enum import Enum

import structlog
from eth_utils import to_checksum_address

from ajo_governance.application.dtos.vote_message import VoteLogMessage
from ajo_governance.application.ports.signer import SignerProtocol
from ajo_governance.application.ports.vote_log import VoteLogPort
from ajo_governance.application.ports.vote_store import VoteStorePort
from ajo_governance.domain.errors.session import InvalidSessionStateError
from ajo_governance.domain.errors.signature import (
    RecoveryFailedError,
    SignerMismatchError,
)
from ajo_governance.domain.identifiers import account_to_evm_address
from ajo_governance.domain.models.receipt import LogReceipt
from ajo_governance.domain.models.signature import NormalizedSignature, Recovered
from ajo_governance.domain.models.vote import (
    DEFAULT_VOTING_POWER,
    ZERO_ADDRESS,
    ZERO_MESSAGE_ID,
    FinalizedVote,
    LoggedVote,
    PendingVote,
    VoteIntent,
)
from ajo_governance.domain.services.signature_codec import normalize_signature
from ajo_governance.domain.services.signer_recovery import candidate_signers
from ajo_governance.domain.services.vote_digest import (
    compute_vote_digest,
    encode_log_message_id,
)

log = structlog.get_logger()

# Corrective signatures requested while pinning the preliminary signer
MAX_CORRECTIVE_SIGNATURES = 2

SignerChangeConfirmation = Callable[[str, str], Awaitable[bool]]


class SessionState(str, Enum):
    """Signing session states."""

    UNSIGNED = "unsigned"
    PRELIMINARY_SIGNED = "preliminary_signed"
    AWAITING_SEQUENCE = "awaiting_sequence"
    FINAL_SIGNED = "final_signed"
    FAILED = "failed"


class VoteSigningSession:
    """Drives one vote from intent to a finalized, tally-ready signature.

    A session is single-use and not safe to share between concurrent
    callers. Every step is a suspension point (wallet round-trip or log
    call).

    Usage:
        session = VoteSigningSession(
            intent=VoteIntent(proposal_id=7, support=VoteSupport.FOR),
            signer=wallet_signer,
            vote_log=log_client,
            topic_id="0.0.4821",
        )
        finalized = await session.cast()

    Attributes:
        _intent: The member's ballot choice.
        _signer: Wallet signing capability.
        _vote_log: Ordered log used for sequencing.
        _confirm_signer_change: Asked before adopting a different signer
            for the final signature. Without it a change is an error.
    """

    def __init__(
        self,
        intent: VoteIntent,
        signer: SignerProtocol,
        vote_log: VoteLogPort,
        topic_id: str,
        *,
        claimed_voter: str | None = None,
        voting_power: int = DEFAULT_VOTING_POWER,
        confirm_signer_change: SignerChangeConfirmation | None = None,
        vote_store: VoteStorePort | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize a session in the UNSIGNED state.

        Args:
            intent: Proposal and ballot option.
            signer: Wallet signing capability.
            vote_log: Ordered log client.
            topic_id: Governance topic of the savings circle.
            claimed_voter: Address (or 0.0.N account id) the member believes
                they sign with. Only used to build the first digest.
            voting_power: Weight recorded on the finalized vote.
            confirm_signer_change: Async callback ``(expected, actual)``
                returning True to adopt a changed final signer.
            vote_store: Local store receiving the finalized vote.
            clock: Source of unix time.
        """
        self._intent = intent
        self._signer = signer
        self._vote_log = vote_log
        self._topic_id = topic_id
        self._claimed_voter = (
            account_to_evm_address(claimed_voter) if claimed_voter else None
        )
        self._voting_power = voting_power
        self._confirm_signer_change = confirm_signer_change
        self._vote_store = vote_store
        self._clock = clock

        self._state = SessionState.UNSIGNED
        self._pending: PendingVote | None = None
        self._logged: LoggedVote | None = None
        self._finalized: FinalizedVote | None = None
        self._log = log.bind(
            proposal_id=intent.proposal_id,
            support=intent.support.name,
            topic_id=topic_id,
        )

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def pending_vote(self) -> PendingVote | None:
        return self._pending

    @property
    def logged_vote(self) -> LoggedVote | None:
        return self._logged

    @property
    def finalized_vote(self) -> FinalizedVote | None:
        return self._finalized

    @asynccontextmanager
    async def _step(self, name: str, required: SessionState) -> AsyncIterator[None]:
        if self._state is not required:
            raise InvalidSessionStateError(name, self._state.value, required.value)
        try:
            yield
        except BaseException as e:
            self._state = SessionState.FAILED
            self._log.warning(
                "vote_session_failed",
                step=name,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise

    async def cast(self) -> FinalizedVote:
        """Run all three steps and return the finalized vote."""
        await self.sign_preliminary()
        await self.submit_to_log()
        return await self.sign_final()

    async def sign_preliminary(self) -> PendingVote:
        """Sign over the zero placeholder and learn the voter.

        Returns:
            The pending vote, whose voter is the recovered signer.

        Raises:
            MalformedSignatureError: If the wallet returned an unusable signature.
            RecoveryFailedError: If the signer cannot be pinned to one account.
        """
        async with self._step("sign preliminary vote", SessionState.UNSIGNED):
            timestamp = int(self._clock())
            bound_voter = self._claimed_voter or ZERO_ADDRESS
            normalized, candidates = await self._sign_and_recover(
                self._preliminary_digest(bound_voter)
            )

            match = _find(candidates, self._claimed_voter)
            if match is None:
                normalized, match = await self._pin_signer(
                    candidates, self._preliminary_digest
                )

            self._pending = PendingVote(
                proposal_id=self._intent.proposal_id,
                voter=match.address,
                support=self._intent.support,
                signature=normalized.with_recovery_id(match.recovery_id).to_bytes(),
                timestamp=timestamp,
            )
            self._state = SessionState.PRELIMINARY_SIGNED
            self._log.info("vote_preliminary_signed", voter=match.address)
            return self._pending

    async def submit_to_log(self) -> LoggedVote:
        """Submit the pending vote and record the assigned sequence number.

        Returns:
            The logged vote. ``simulated`` is True when the log was
            unreachable and the sequence number is not authoritative.

        Raises:
            LogUnavailableError: If the log is unreachable and no fallback is allowed.
            LogSubmissionError: If the log rejected the submission.
        """
        async with self._step("submit vote to log", SessionState.PRELIMINARY_SIGNED):
            if self._pending is None:
                raise InvalidSessionStateError(
                    "submit vote to log", self._state.value, "a preliminary signature"
                )
            self._state = SessionState.AWAITING_SEQUENCE
            message = VoteLogMessage.from_pending(self._pending).to_json()
            receipt = await self._vote_log.submit(self._topic_id, message)

            self._logged = LoggedVote(
                pending=self._pending,
                log_message_id=encode_log_message_id(receipt.sequence_number),
                log_sequence_number=receipt.sequence_number,
                transaction_id=receipt.transaction_id,
                simulated=receipt.simulated,
            )
            self._log.info(
                "vote_sequenced",
                voter=self._pending.voter,
                sequence_number=receipt.sequence_number,
                transaction_id=receipt.transaction_id,
                simulated=receipt.simulated,
            )
            return self._logged

    async def sign_final(self) -> FinalizedVote:
        """Sign again with the sequence number bound into the digest.

        Returns:
            The finalized vote, the only form accepted by the tally.

        Raises:
            SignerMismatchError: If the final signature came from another
                account and the change was not confirmed.
            MalformedSignatureError: If the wallet returned an unusable signature.
            RecoveryFailedError: If no signer can be recovered.
        """
        async with self._step("sign final vote", SessionState.AWAITING_SEQUENCE):
            if self._logged is None:
                raise InvalidSessionStateError(
                    "sign final vote", self._state.value, "a sequenced vote"
                )
            voter = self._logged.voter
            normalized, candidates = await self._sign_and_recover(self._final_digest(voter))

            match = _find(candidates, voter)
            if match is None:
                normalized, match = await self._adopt_changed_signer(voter, candidates)

            self._finalized = FinalizedVote(
                proposal_id=self._logged.proposal_id,
                voter=match.address,
                support=self._logged.support,
                voting_power=self._voting_power,
                timestamp=self._logged.timestamp,
                log_message_id=self._logged.log_message_id,
                log_sequence_number=self._logged.log_sequence_number,
                signature=normalized.with_recovery_id(match.recovery_id).to_bytes(),
                simulated=self._logged.simulated,
            )
            if self._vote_store is not None:
                await self._vote_store.save(self._finalized)

            self._state = SessionState.FINAL_SIGNED
            self._log.info(
                "vote_finalized",
                voter=match.address,
                sequence_number=self._finalized.log_sequence_number,
                simulated=self._finalized.simulated,
            )
            return self._finalized

    async def publish(self) -> LogReceipt:
        """Append the finalized vote to the topic as a v1.1 payload.

        Optional: the tally only needs the finalized vote itself. Publishing
        lets other readers verify the vote from the mirror alone. A failed
        publication leaves the finalized vote intact.

        Raises:
            InvalidSessionStateError: If the vote is not finalized.
        """
        if self._state is not SessionState.FINAL_SIGNED or self._finalized is None:
            raise InvalidSessionStateError(
                "publish finalized vote", self._state.value, SessionState.FINAL_SIGNED.value
            )
        message = VoteLogMessage.from_finalized(self._finalized).to_json()
        receipt = await self._vote_log.submit(self._topic_id, message)
        self._log.info(
            "vote_published",
            voter=self._finalized.voter,
            bound_sequence_number=self._finalized.log_sequence_number,
            sequence_number=receipt.sequence_number,
            simulated=receipt.simulated,
        )
        return receipt

    def _preliminary_digest(self, voter: str) -> bytes:
        return compute_vote_digest(
            self._intent.proposal_id, voter, self._intent.support, ZERO_MESSAGE_ID, 0
        )

    def _final_digest(self, voter: str) -> bytes:
        if self._logged is None:
            raise InvalidSessionStateError(
                "build final digest", self._state.value, "a sequenced vote"
            )
        return compute_vote_digest(
            self._logged.proposal_id,
            voter,
            self._logged.support,
            self._logged.log_message_id,
            self._logged.log_sequence_number,
        )

    async def _sign_and_recover(
        self, digest: bytes
    ) -> tuple[NormalizedSignature, list[Recovered]]:
        raw_signature = await self._signer.sign(digest)
        normalized = normalize_signature(raw_signature)
        candidates = candidate_signers(digest, normalized)
        if not candidates:
            raise RecoveryFailedError("no recovery candidate produced a valid curve point")
        return normalized, candidates

    async def _pin_signer(
        self,
        candidates: list[Recovered],
        digest_for: Callable[[str], bytes],
    ) -> tuple[NormalizedSignature, Recovered]:
        """Re-sign with a recovered address bound in until it recovers to itself.

        The wallet signed a digest that names some other address (the hint
        or the zero placeholder). Each corrective signature binds the best
        candidate. Two signatures from the same key share exactly one
        candidate, so intersecting candidate sets resolves a compact
        signature's ambiguity.
        """
        for _ in range(MAX_CORRECTIVE_SIGNATURES):
            guess = candidates[0].address
            self._log.info(
                "vote_signer_rebind",
                recovered=guess,
                ambiguous=len(candidates) > 1,
            )
            normalized, resigned = await self._sign_and_recover(digest_for(guess))
            match = _find(resigned, guess)
            if match is not None:
                return normalized, match

            common = [c for c in resigned if _find(candidates, c.address) is not None]
            if not common:
                break
            candidates = common

        raise RecoveryFailedError("signer could not be pinned to a single account")

    async def _adopt_changed_signer(
        self,
        expected: str,
        candidates: list[Recovered],
    ) -> tuple[NormalizedSignature, Recovered]:
        """Handle a final signature that does not recover to the voter.

        The contract tallies by recovered address, so a changed signer is
        only adopted with explicit confirmation. The final digest is then
        rebuilt with the new voter and signed once more, so the finalized
        signature still recovers to its own voter field.

        A compact signature names two possible accounts. The new signer is
        pinned first so the member is only ever asked about the account
        that actually signed.
        """
        pinned: tuple[NormalizedSignature, Recovered] | None = None
        if len(candidates) > 1:
            pinned = await self._pin_signer(candidates, self._final_digest)
            actual = pinned[1].address
        else:
            actual = to_checksum_address(candidates[0].address)
        self._log.warning("vote_final_signer_changed", expected=expected, actual=actual)

        if self._confirm_signer_change is None or not await self._confirm_signer_change(
            expected, actual
        ):
            raise SignerMismatchError(expected=expected, actual=actual)

        if pinned is None:
            pinned = await self._pin_signer(candidates, self._final_digest)
        normalized, match = pinned
        if match.address.lower() != actual.lower():
            raise SignerMismatchError(expected=actual, actual=match.address)
        self._log.info("vote_final_signer_adopted", previous=expected, voter=match.address)
        return normalized, match


def _find(candidates: list[Recovered], address: str | None) -> Recovered | None:
    if address is None:
        return None
    for candidate in candidates:
        if candidate.matches(address):
            return Recovered(
                address=to_checksum_address(candidate.address),
                recovery_id=candidate.recovery_id,
            )
    return None
