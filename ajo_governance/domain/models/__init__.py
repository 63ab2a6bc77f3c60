"""Domain models for the vote protocol."""

from ajo_governance.domain.models.ledger import (
    SUCCESS_RESULT,
    ContractCallResult,
    ContractLog,
)
from ajo_governance.domain.models.receipt import (
    LogReceipt,
    SequencedReceipt,
    SimulatedReceipt,
)
from ajo_governance.domain.models.signature import (
    NormalizedSignature,
    Recovered,
    RecoveryFailure,
    RecoveryOutcome,
)
from ajo_governance.domain.models.vote import (
    DEFAULT_VOTING_POWER,
    ZERO_ADDRESS,
    ZERO_MESSAGE_ID,
    FinalizedVote,
    LoggedVote,
    PendingVote,
    TallyResult,
    VoteIntent,
    VoteSupport,
)

__all__: list[str] = [
    "DEFAULT_VOTING_POWER",
    "SUCCESS_RESULT",
    "ZERO_ADDRESS",
    "ZERO_MESSAGE_ID",
    "ContractCallResult",
    "ContractLog",
    "FinalizedVote",
    "LogReceipt",
    "LoggedVote",
    "NormalizedSignature",
    "PendingVote",
    "Recovered",
    "RecoveryFailure",
    "RecoveryOutcome",
    "SequencedReceipt",
    "SimulatedReceipt",
    "TallyResult",
    "VoteIntent",
    "VoteSupport",
]
