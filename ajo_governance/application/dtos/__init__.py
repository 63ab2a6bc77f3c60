"""Data transfer objects for the application layer."""

from ajo_governance.application.dtos.vote_message import (
    FINALIZED_PAYLOAD_VERSION,
    PAYLOAD_VERSION,
    VoteLogMessage,
)

__all__: list[str] = ["FINALIZED_PAYLOAD_VERSION", "PAYLOAD_VERSION", "VoteLogMessage"]
