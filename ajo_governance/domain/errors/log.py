"""Append-only log exceptions."""

from ajo_governance.domain.exceptions import GovernanceError


class LogError(GovernanceError):
    """Base exception for ordered log failures."""

    pass


class LogUnavailableError(LogError):
    """Raised when the log cannot be reached and no fallback is allowed.

    With the simulated fallback enabled, LogClient absorbs this condition
    and returns a simulated receipt instead.
    """

    def __init__(self, topic_id: str = "", reason: str = "") -> None:
        """Initialize with topic and transport failure details.

        Args:
            topic_id: Topic the submission was addressed to.
            reason: Underlying transport error text.
        """
        message = "Vote log is unavailable"
        if topic_id:
            message = f"{message} for topic {topic_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.topic_id = topic_id
        self.reason = reason


class LogSubmissionError(LogError):
    """Raised when the log was reachable but did not accept the message."""

    def __init__(self, topic_id: str, reason: str) -> None:
        """Initialize with topic and rejection reason.

        Args:
            topic_id: Topic the submission was addressed to.
            reason: Rejection reason reported by the log.
        """
        super().__init__(f"Vote log rejected submission to {topic_id}: {reason}")
        self.topic_id = topic_id
        self.reason = reason
