"""Base exception classes for the governance domain layer."""


class GovernanceError(Exception):
    """Base exception for all domain errors.

    All domain-specific exceptions MUST inherit from this class.
    The message is the single human-readable text shown to the member.
    """

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
