"""Append-only ordered log port."""

from abc import ABC, abstractmethod

from ajo_governance.domain.models.receipt import LogReceipt


class VoteLogPort(ABC):
    """Abstract append-only log that assigns per-topic sequence numbers.

    Submissions are never retried by implementations; every call that
    reaches the log appends a new entry.
    """

    @abstractmethod
    async def submit(self, topic_id: str, message: str) -> LogReceipt:
        """Append a message to a topic.

        Args:
            topic_id: Topic as ``shard.realm.num`` or bytes32 hex.
            message: UTF-8 JSON vote payload.

        Returns:
            SequencedReceipt from the log, or SimulatedReceipt when the
            log could not be reached and the fallback is allowed.

        Raises:
            LogUnavailableError: If unreachable and the fallback is disabled.
            LogSubmissionError: If the log rejected the message.
        """
        ...

    @abstractmethod
    async def is_available(self) -> bool:
        """Return True when submissions would reach the real log."""
        ...
