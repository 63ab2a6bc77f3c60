"""Vote payload carried by the ordered log.

These Pydantic models describe the UTF-8 JSON message appended to the
topic and read back through the mirror node. Field names on the wire are
camelCase and MUST stay stable: other clients and the tally tooling
decode the same payload.

Versions:
- 1.0: the preliminary submission, signed over the zero log placeholder.
  Readers skip it; a 1.0 payload signed any other way is bound to the
  server-assigned sequence number of the message itself.
- 1.1: a finalized vote publication. ``logSequenceNumber`` names the
  sequence number the signature is bound to.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ajo_governance.domain.identifiers import account_to_evm_address
from ajo_governance.domain.models.vote import FinalizedVote, PendingVote, VoteSupport

PAYLOAD_VERSION = "1.0"
FINALIZED_PAYLOAD_VERSION = "1.1"


class VoteLogMessage(BaseModel):
    """JSON payload of a vote log message."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    proposal_id: Annotated[int, Field(alias="proposalId", ge=0)]
    voter: Annotated[str, Field(description="EVM address or 0.0.N account id")]
    support: VoteSupport
    signature: Annotated[str, Field(min_length=128)]
    timestamp: Annotated[int, Field(ge=0)]
    version: Literal["1.0", "1.1"] = PAYLOAD_VERSION
    log_sequence_number: Annotated[
        int | None,
        Field(alias="logSequenceNumber", ge=1, description="Sequence the signature binds"),
    ] = None

    @field_validator("voter")
    @classmethod
    def _checksum_voter(cls, value: str) -> str:
        return account_to_evm_address(value)

    @classmethod
    def from_pending(cls, vote: PendingVote) -> VoteLogMessage:
        """Build the preliminary submission payload."""
        return cls(
            proposal_id=vote.proposal_id,
            voter=vote.voter,
            support=vote.support,
            signature="0x" + vote.signature.hex(),
            timestamp=vote.timestamp,
        )

    @classmethod
    def from_finalized(cls, vote: FinalizedVote) -> VoteLogMessage:
        """Build the finalized publication payload."""
        return cls(
            proposal_id=vote.proposal_id,
            voter=vote.voter,
            support=vote.support,
            signature="0x" + vote.signature.hex(),
            timestamp=vote.timestamp,
            version=FINALIZED_PAYLOAD_VERSION,
            log_sequence_number=vote.log_sequence_number,
        )

    def to_json(self) -> str:
        """Serialize with wire field names, omitting unset optional fields."""
        return self.model_dump_json(by_alias=True, exclude_none=True)
