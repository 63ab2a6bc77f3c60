"""Application services for the vote protocol."""

from ajo_governance.application.services.tally_coordinator import (
    TallyCoordinator,
    map_revert_reason,
)
from ajo_governance.application.services.vote_signing_session import (
    SessionState,
    VoteSigningSession,
)

__all__: list[str] = [
    "SessionState",
    "TallyCoordinator",
    "VoteSigningSession",
    "map_revert_reason",
]
