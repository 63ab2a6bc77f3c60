"""Mirror node reader for vote topics and transaction results.

The mirror node is a read-only, eventually consistent reflection of the
ledger. Two uses:

1. fetch_votes: stream every vote message on a topic, re-verify each
   signature from the message's own fields, and yield FinalizedVote
   records. A bad message is dropped and logged, never raised, so one
   corrupt entry cannot abort a fetch. Preliminary submissions carry no
   sequence binding yet and are skipped.
2. await_contract_result: bounded polling for a contract call submitted
   through a wallet that does not report receipts itself.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

import httpx
from pydantic import ValidationError

from ajo_governance.application.dtos.vote_message import VoteLogMessage
from ajo_governance.application.ports.confirmation import TransactionConfirmationPort
from ajo_governance.domain.errors.signature import MalformedSignatureError
from ajo_governance.domain.errors.tally import ConfirmationTimeoutError
from ajo_governance.domain.identifiers import to_mirror_transaction_id, to_topic_id
from ajo_governance.domain.models.ledger import ContractCallResult, ContractLog
from ajo_governance.domain.models.signature import RecoveryFailure
from ajo_governance.domain.models.vote import (
    DEFAULT_VOTING_POWER,
    ZERO_MESSAGE_ID,
    FinalizedVote,
)
from ajo_governance.domain.services.signature_codec import normalize_signature
from ajo_governance.domain.services.signer_recovery import try_recover
from ajo_governance.domain.services.vote_digest import (
    compute_vote_digest,
    encode_log_message_id,
)
from ajo_governance.infrastructure.observability.logging import get_logger_for_service


def _hex_bytes(value: str | None) -> bytes:
    if not value:
        return b""
    text = value[2:] if value[:2].lower() == "0x" else value
    return bytes.fromhex(text)


class MirrorReader(TransactionConfirmationPort):
    """Client for the mirror node REST API.

    Example:
        async with MirrorReader() as mirror:
            async for vote in mirror.fetch_votes("0.0.4821", proposal_id=7):
                ...
    """

    DEFAULT_BASE_URL = "https://testnet.mirrornode.hedera.com"

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 30.0,
        page_limit: int = 100,
        voting_power: int = DEFAULT_VOTING_POWER,
        confirmation_initial_delay: float = 5.0,
        confirmation_attempts: int = 20,
        confirmation_interval: float = 3.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize client.

        Args:
            base_url: Mirror node base URL. Defaults to testnet.
            timeout: Request timeout in seconds.
            page_limit: Topic messages per page.
            voting_power: Weight assigned to decoded votes.
            confirmation_initial_delay: Wait before the first transaction poll.
            confirmation_attempts: Maximum transaction polls.
            confirmation_interval: Delay between transaction polls.
            sleep: Awaitable delay, replaceable in tests.
        """
        self.base_url = base_url or self.DEFAULT_BASE_URL
        self._page_limit = page_limit
        self._voting_power = voting_power
        self._confirmation_initial_delay = confirmation_initial_delay
        self._confirmation_attempts = confirmation_attempts
        self._confirmation_interval = confirmation_interval
        self._sleep = sleep
        self._log = get_logger_for_service("MirrorReader")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
        )

    async def __aenter__(self) -> MirrorReader:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def fetch_votes(
        self,
        topic_id: str,
        proposal_id: int | None = None,
    ) -> AsyncIterator[FinalizedVote]:
        """Stream verified votes from a topic in ascending sequence order.

        The sequence is finite (it ends at the current end of the topic)
        and restartable: every call issues a fresh query. Verified votes
        are buffered for the whole fetch and yielded sorted by the
        sequence number they bind.

        Args:
            topic_id: Topic as ``0.0.N`` or bytes32 hex.
            proposal_id: Only yield votes for this proposal. Applied after
                decoding, not as a mirror query parameter.

        Yields:
            Votes whose signature recovers to their own voter field.

        Raises:
            httpx.HTTPError: If a page cannot be fetched.
        """
        topic = to_topic_id(topic_id)
        path: str | None = f"/api/v1/topics/{topic}/messages"
        params: dict[str, Any] | None = {"order": "asc", "limit": self._page_limit}
        votes: list[FinalizedVote] = []
        dropped = skipped = 0

        while path:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
            data = response.json()

            for message in data.get("messages") or []:
                if not isinstance(message, dict):
                    self._log.warning(
                        "mirror_message_undecodable",
                        topic_id=topic,
                        error=f"entry is {type(message).__name__}, not an object",
                    )
                    dropped += 1
                    continue
                payload = self._decode_message(topic, message)
                if payload is None:
                    dropped += 1
                    continue
                if proposal_id is not None and payload.proposal_id != proposal_id:
                    continue
                sequence_number = message.get("sequence_number")
                if self._is_preliminary(payload):
                    self._log.debug(
                        "mirror_preliminary_skipped",
                        topic_id=topic,
                        sequence_number=sequence_number,
                        voter=payload.voter,
                    )
                    skipped += 1
                    continue
                vote = self._verify(topic, sequence_number, payload)
                if vote is None:
                    dropped += 1
                    continue
                votes.append(vote)

            # links.next already carries the query string
            path = (data.get("links") or {}).get("next")
            params = None

        # v1.1 publications bind the sequence they name, which need not
        # follow the order they were published in
        votes.sort(key=lambda vote: vote.log_sequence_number)
        self._log.info(
            "mirror_votes_fetched",
            topic_id=topic,
            proposal_id=proposal_id,
            accepted=len(votes),
            dropped=dropped,
            preliminary=skipped,
        )
        for vote in votes:
            yield vote

    async def collect_votes(
        self,
        topic_id: str,
        proposal_id: int | None = None,
    ) -> list[FinalizedVote]:
        """Fetch all verified votes into a list."""
        return [vote async for vote in self.fetch_votes(topic_id, proposal_id)]

    def _decode_message(self, topic: str, message: dict[str, Any]) -> VoteLogMessage | None:
        try:
            raw = base64.b64decode(message["message"], validate=True)
            return VoteLogMessage.model_validate_json(raw)
        except (KeyError, TypeError, binascii.Error, ValidationError) as e:
            self._log.warning(
                "mirror_message_undecodable",
                topic_id=topic,
                sequence_number=message.get("sequence_number"),
                error=str(e).splitlines()[0] if str(e) else type(e).__name__,
            )
            return None

    @staticmethod
    def _is_preliminary(payload: VoteLogMessage) -> bool:
        """True for a v1.0 payload signed over the zero log placeholder."""
        if payload.log_sequence_number is not None:
            return False
        try:
            signature = normalize_signature(payload.signature)
            digest = compute_vote_digest(
                payload.proposal_id, payload.voter, payload.support, ZERO_MESSAGE_ID, 0
            )
        except (MalformedSignatureError, ValueError):
            return False
        outcome = try_recover(digest, signature, expected_signer=payload.voter)
        return not isinstance(outcome, RecoveryFailure)

    def _verify(
        self,
        topic: str,
        server_sequence: Any,
        payload: VoteLogMessage,
    ) -> FinalizedVote | None:
        """Rebuild the digest from the payload and check who signed it.

        v1.1 payloads bind the sequence number they name; v1.0 payloads
        bind the sequence number the log assigned to the message itself.
        """
        bound_sequence = payload.log_sequence_number or server_sequence
        if not isinstance(bound_sequence, int) or bound_sequence < 1:
            self._log.warning(
                "mirror_message_unsequenced",
                topic_id=topic,
                sequence_number=server_sequence,
            )
            return None

        message_id = encode_log_message_id(bound_sequence)
        try:
            signature = normalize_signature(payload.signature)
            digest = compute_vote_digest(
                payload.proposal_id,
                payload.voter,
                payload.support,
                message_id,
                bound_sequence,
            )
        except (MalformedSignatureError, ValueError) as e:
            self._log.warning(
                "mirror_vote_malformed",
                topic_id=topic,
                sequence_number=server_sequence,
                error=str(e),
            )
            return None

        outcome = try_recover(digest, signature, expected_signer=payload.voter)
        if isinstance(outcome, RecoveryFailure):
            self._log.warning(
                "mirror_vote_signature_rejected",
                topic_id=topic,
                sequence_number=server_sequence,
                claimed_voter=payload.voter,
                reason=outcome.reason,
            )
            return None

        return FinalizedVote(
            proposal_id=payload.proposal_id,
            voter=outcome.address,
            support=payload.support,
            voting_power=self._voting_power,
            timestamp=payload.timestamp,
            log_message_id=message_id,
            log_sequence_number=bound_sequence,
            signature=signature.with_recovery_id(outcome.recovery_id).to_bytes(),
        )

    async def await_contract_result(self, transaction_id: str) -> ContractCallResult:
        """Poll for a transaction and return its contract call result.

        Waits ``confirmation_initial_delay``, then polls the transaction
        up to ``confirmation_attempts`` times, ``confirmation_interval``
        apart. A non-SUCCESS result is returned as is, without logs.

        Args:
            transaction_id: Wallet transaction id (``0.0.A@s.n``).

        Returns:
            The confirmed call result.

        Raises:
            ConfirmationTimeoutError: If the transaction never appears.
            httpx.HTTPStatusError: If the contract result cannot be read.
        """
        mirror_id = to_mirror_transaction_id(transaction_id)
        await self._sleep(self._confirmation_initial_delay)

        transaction: dict[str, Any] | None = None
        for attempt in range(1, self._confirmation_attempts + 1):
            transaction = await self._poll_transaction(mirror_id, attempt)
            if transaction is not None:
                break
            if attempt < self._confirmation_attempts:
                await self._sleep(self._confirmation_interval)

        if transaction is None:
            raise ConfirmationTimeoutError(
                transaction_id, self._confirmation_attempts, self._confirmation_interval
            )

        result = str(transaction.get("result", ""))
        self._log.info("transaction_confirmed", transaction_id=transaction_id, result=result)
        if result != "SUCCESS":
            return ContractCallResult(transaction_id=transaction_id, result=result)

        response = await self._client.get(f"/api/v1/contracts/results/{mirror_id}")
        response.raise_for_status()
        data = response.json()

        return ContractCallResult(
            transaction_id=transaction_id,
            result=str(data.get("result") or result),
            gas_used=int(data.get("gas_used") or 0),
            logs=self._parse_logs(transaction_id, data.get("logs") or []),
            error_message=str(data.get("error_message") or ""),
        )

    def _parse_logs(self, transaction_id: str, entries: list[Any]) -> tuple[ContractLog, ...]:
        """Decode contract result logs, skipping entries that are not valid hex."""
        logs: list[ContractLog] = []
        for index, entry in enumerate(entries):
            try:
                logs.append(
                    ContractLog(
                        address=entry.get("address", ""),
                        topics=tuple(_hex_bytes(topic) for topic in entry.get("topics") or []),
                        data=_hex_bytes(entry.get("data")),
                    )
                )
            except (AttributeError, TypeError, ValueError) as e:
                self._log.warning(
                    "contract_log_undecodable",
                    transaction_id=transaction_id,
                    index=index,
                    error=str(e),
                )
        return tuple(logs)

    async def _poll_transaction(self, mirror_id: str, attempt: int) -> dict[str, Any] | None:
        try:
            response = await self._client.get(f"/api/v1/transactions/{mirror_id}")
        except httpx.TransportError as e:
            self._log.debug("transaction_poll_failed", attempt=attempt, error=str(e))
            return None

        if response.status_code != 200:
            self._log.debug("transaction_not_visible", attempt=attempt, status_code=response.status_code)
            return None
        transactions = response.json().get("transactions") or []
        return transactions[0] if transactions else None

    async def close(self) -> None:
        """Close HTTP client."""
        await self._client.aclose()
