"""In-memory ordered log stub.

Assigns strictly increasing per-topic sequence numbers starting at 1, the
way the consensus log does. Stored messages can be rendered in mirror
node REST format so tests can feed a MirrorReader from what a session
actually submitted.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any

from ajo_governance.application.ports.vote_log import VoteLogPort
from ajo_governance.domain.errors.log import LogSubmissionError, LogUnavailableError
from ajo_governance.domain.identifiers import to_topic_id
from ajo_governance.domain.models.receipt import (
    LogReceipt,
    SequencedReceipt,
    SimulatedReceipt,
)


@dataclass(frozen=True)
class StoredLogMessage:
    """A message as appended to a topic."""

    topic_id: str
    sequence_number: int
    message: str
    consensus_timestamp: str


class VoteLogStub(VoteLogPort):
    """In-memory implementation of VoteLogPort.

    Modes:
    - available (default): messages are sequenced
    - unavailable + simulate: SimulatedReceipt with a fixed sequence number
    - unavailable without simulate: LogUnavailableError
    - reject_next(): the next submission raises LogSubmissionError
    """

    def __init__(
        self,
        *,
        available: bool = True,
        simulate_when_unavailable: bool = True,
        simulated_sequence_number: int = 424_242,
    ) -> None:
        """Initialize empty stub."""
        self._available = available
        self._simulate = simulate_when_unavailable
        self._simulated_sequence_number = simulated_sequence_number
        self._topics: dict[str, list[StoredLogMessage]] = {}
        self._reject_reason: str | None = None
        self.submissions = 0

    def set_available(self, available: bool) -> None:
        self._available = available

    def reject_next(self, reason: str = "INVALID_TOPIC_SUBMIT_KEY") -> None:
        """Make the next submission fail as a rejection."""
        self._reject_reason = reason

    async def submit(self, topic_id: str, message: str) -> LogReceipt:
        """Append a message, assigning the next sequence number."""
        topic = to_topic_id(topic_id)
        self.submissions += 1

        if not self._available:
            if not self._simulate:
                raise LogUnavailableError(topic, "stub log unavailable")
            return SimulatedReceipt(
                topic_id=topic,
                sequence_number=self._simulated_sequence_number,
                transaction_id="simulated-0",
                reason="stub log unavailable",
            )

        if self._reject_reason is not None:
            reason, self._reject_reason = self._reject_reason, None
            raise LogSubmissionError(topic, reason)

        entries = self._topics.setdefault(topic, [])
        sequence_number = len(entries) + 1
        entries.append(
            StoredLogMessage(
                topic_id=topic,
                sequence_number=sequence_number,
                message=message,
                consensus_timestamp=f"1700000000.{sequence_number:09d}",
            )
        )
        return SequencedReceipt(
            topic_id=topic,
            sequence_number=sequence_number,
            transaction_id=f"0.0.1001@1700000000.{sequence_number:09d}",
        )

    async def is_available(self) -> bool:
        return self._available

    def messages(self, topic_id: str) -> list[StoredLogMessage]:
        """Return the messages appended to a topic, in sequence order."""
        return list(self._topics.get(to_topic_id(topic_id), []))

    def append_raw(self, topic_id: str, message: str) -> int:
        """Append an arbitrary message, bypassing submission checks."""
        topic = to_topic_id(topic_id)
        entries = self._topics.setdefault(topic, [])
        sequence_number = len(entries) + 1
        entries.append(
            StoredLogMessage(
                topic_id=topic,
                sequence_number=sequence_number,
                message=message,
                consensus_timestamp=f"1700000000.{sequence_number:09d}",
            )
        )
        return sequence_number

    def mirror_messages(self, topic_id: str) -> list[dict[str, Any]]:
        """Render a topic's messages as mirror node REST entries."""
        return [
            {
                "consensus_timestamp": entry.consensus_timestamp,
                "topic_id": entry.topic_id,
                "sequence_number": entry.sequence_number,
                "message": base64.b64encode(entry.message.encode("utf-8")).decode("ascii"),
            }
            for entry in self.messages(topic_id)
        ]

    def clear(self) -> None:
        """Clear all topics (for test cleanup)."""
        self._topics.clear()
        self.submissions = 0
