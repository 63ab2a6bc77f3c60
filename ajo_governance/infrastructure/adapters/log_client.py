"""HTTP client for the append-only consensus log.

Submits UTF-8 JSON vote payloads to a topic and returns the sequence
number the log assigned. Submissions are never retried here: every call
that reaches the log appends a new entry.

When the log cannot be reached (not configured, connection refused,
timeout) the client falls back to a locally generated sequence number
and returns a SimulatedReceipt. Simulated receipts are not authoritative
and must not reach a production tally.
"""

from __future__ import annotations

import random
import time

import httpx

from ajo_governance.application.ports.vote_log import VoteLogPort
from ajo_governance.domain.errors.log import LogSubmissionError, LogUnavailableError
from ajo_governance.domain.identifiers import to_topic_id
from ajo_governance.domain.models.receipt import (
    LogReceipt,
    SequencedReceipt,
    SimulatedReceipt,
)
from ajo_governance.infrastructure.observability.logging import get_logger_for_service

SIMULATED_SEQUENCE_CEILING = 1_000_000


class LogClient(VoteLogPort):
    """Client for the ordered log submission service.

    Example:
        async with LogClient(base_url="https://hcs-relay.example") as client:
            receipt = await client.submit("0.0.4821", payload)
            if receipt.simulated:
                ...
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 10.0,
        allow_simulated_fallback: bool = True,
        health_path: str = "/health",
    ) -> None:
        """Initialize client.

        Args:
            base_url: Submission service base URL. None means the log is
                not configured; every submission is simulated.
            timeout: Request timeout in seconds.
            allow_simulated_fallback: Return simulated receipts when the
                log is unreachable instead of raising LogUnavailableError.
            health_path: Path probed by is_available().
        """
        self.base_url = base_url
        self._allow_simulated_fallback = allow_simulated_fallback
        self._health_path = health_path
        self._log = get_logger_for_service("LogClient")
        self._client = (
            httpx.AsyncClient(base_url=base_url, timeout=timeout) if base_url else None
        )

    async def __aenter__(self) -> LogClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def submit(self, topic_id: str, message: str) -> LogReceipt:
        """Append a vote payload to a topic.

        Args:
            topic_id: Topic as ``0.0.N`` or bytes32 hex.
            message: UTF-8 JSON vote payload.

        Returns:
            SequencedReceipt, or SimulatedReceipt when the log is unreachable.

        Raises:
            LogUnavailableError: If unreachable and the fallback is disabled.
            LogSubmissionError: If the log rejected the message or returned
                no sequence number.
        """
        topic = to_topic_id(topic_id)
        if self._client is None:
            return self._simulate(topic, "log endpoint not configured")

        try:
            response = await self._client.post(
                f"/api/v1/topics/{topic}/messages",
                json={"topicId": topic, "message": message},
            )
        except httpx.TransportError as e:
            return self._simulate(topic, str(e) or type(e).__name__)

        if response.status_code >= 400:
            self._log.error(
                "log_submission_rejected",
                topic_id=topic,
                status_code=response.status_code,
            )
            raise LogSubmissionError(topic, f"HTTP {response.status_code}: {response.text[:200]}")

        try:
            data = response.json()
        except ValueError as e:
            raise LogSubmissionError(topic, "response is not JSON") from e

        sequence_number = data.get("sequenceNumber") if isinstance(data, dict) else None
        if not isinstance(sequence_number, int) or sequence_number < 1:
            raise LogSubmissionError(topic, "no sequence number returned")

        receipt = SequencedReceipt(
            topic_id=topic,
            sequence_number=sequence_number,
            transaction_id=str(data.get("transactionId", "")),
        )
        self._log.info(
            "log_message_sequenced",
            topic_id=topic,
            sequence_number=sequence_number,
            transaction_id=receipt.transaction_id,
        )
        return receipt

    async def is_available(self) -> bool:
        """Return True when the log service answers its health probe."""
        if self._client is None:
            return False
        try:
            response = await self._client.get(self._health_path)
        except httpx.TransportError as e:
            self._log.debug("log_health_probe_failed", error=str(e))
            return False
        return response.status_code < 500

    def _simulate(self, topic: str, reason: str) -> SimulatedReceipt:
        if not self._allow_simulated_fallback:
            raise LogUnavailableError(topic, reason)

        receipt = SimulatedReceipt(
            topic_id=topic,
            sequence_number=random.randint(1, SIMULATED_SEQUENCE_CEILING - 1),
            transaction_id=f"simulated-{int(time.time() * 1000)}",
            reason=reason,
        )
        self._log.warning(
            "log_unavailable_simulating",
            topic_id=topic,
            reason=reason,
            sequence_number=receipt.sequence_number,
        )
        return receipt

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
