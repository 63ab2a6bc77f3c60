"""Domain errors for the vote protocol.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from GovernanceError.
"""

from ajo_governance.domain.errors.log import (
    LogError,
    LogSubmissionError,
    LogUnavailableError,
)
from ajo_governance.domain.errors.session import InvalidSessionStateError
from ajo_governance.domain.errors.signature import (
    MalformedSignatureError,
    RecoveryFailedError,
    SignatureError,
    SignerMismatchError,
)
from ajo_governance.domain.errors.tally import (
    ConfirmationTimeoutError,
    EmptyBatchError,
    ExecutionRevertedError,
    InvalidSignatureInBatchError,
    SimulatedVoteError,
    TallyError,
    TallyEventMissingError,
)

__all__: list[str] = [
    "ConfirmationTimeoutError",
    "EmptyBatchError",
    "ExecutionRevertedError",
    "InvalidSessionStateError",
    "InvalidSignatureInBatchError",
    "LogError",
    "LogSubmissionError",
    "LogUnavailableError",
    "MalformedSignatureError",
    "RecoveryFailedError",
    "SignatureError",
    "SignerMismatchError",
    "SimulatedVoteError",
    "TallyError",
    "TallyEventMissingError",
]
