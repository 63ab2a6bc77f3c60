"""Signing session exceptions."""

from ajo_governance.domain.exceptions import GovernanceError


class InvalidSessionStateError(GovernanceError):
    """Raised when a session step is invoked from the wrong state."""

    def __init__(self, step: str, state: str, expected: str) -> None:
        """Initialize with the offending transition.

        Args:
            step: Step that was attempted.
            state: Current session state.
            expected: State the step requires.
        """
        super().__init__(f"Cannot {step} while session is {state} (requires {expected})")
        self.step = step
        self.state = state
        self.expected = expected
