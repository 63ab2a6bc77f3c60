"""Governance contract ABI for the batched tally.

Entry point:
    tallyVotesFromHCS(uint256 proposalId, HcsVote[] votes)
    HcsVote = (address voter, uint8 support, uint256 votingPower,
               uint256 timestamp, bytes32 hcsMessageId,
               uint256 hcsSequenceNumber, bytes signature)

Event:
    VotesTallied(uint256 indexed proposalId, uint256 forVotes,
                 uint256 againstVotes, uint256 abstainVotes)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import (
    event_signature_to_log_topic,
    function_signature_to_4byte_selector,
    to_checksum_address,
)

from ajo_governance.domain.models.ledger import ContractLog
from ajo_governance.domain.models.vote import FinalizedVote, VoteSupport

VOTE_TUPLE_TYPE = "(address,uint8,uint256,uint256,bytes32,uint256,bytes)"
TALLY_FUNCTION_SIGNATURE = f"tallyVotesFromHCS(uint256,{VOTE_TUPLE_TYPE}[])"
TALLY_SELECTOR: bytes = function_signature_to_4byte_selector(TALLY_FUNCTION_SIGNATURE)

VOTES_TALLIED_SIGNATURE = "VotesTallied(uint256,uint256,uint256,uint256)"
VOTES_TALLIED_TOPIC: bytes = event_signature_to_log_topic(VOTES_TALLIED_SIGNATURE)

_CALL_TYPES = ["uint256", f"{VOTE_TUPLE_TYPE}[]"]
_TOTALS_TYPES = ["uint256", "uint256", "uint256"]


@dataclass(frozen=True)
class VoteTotals:
    """Per-option totals carried by a VotesTallied event."""

    proposal_id: int
    for_votes: int
    against_votes: int
    abstain_votes: int


@dataclass(frozen=True)
class EncodedVote:
    """A vote as decoded from tally call data."""

    voter: str
    support: VoteSupport
    voting_power: int
    timestamp: int
    log_message_id: bytes
    log_sequence_number: int
    signature: bytes


def encode_tally_call(proposal_id: int, votes: Sequence[FinalizedVote]) -> bytes:
    """ABI-encode a tallyVotesFromHCS call, selector included."""
    rows = [
        (
            to_checksum_address(vote.voter),
            int(vote.support),
            vote.voting_power,
            vote.timestamp,
            vote.log_message_id,
            vote.log_sequence_number,
            vote.signature,
        )
        for vote in votes
    ]
    return TALLY_SELECTOR + encode(_CALL_TYPES, [proposal_id, rows])


def decode_tally_call(call_data: bytes) -> tuple[int, list[EncodedVote]]:
    """Decode tallyVotesFromHCS call data.

    Raises:
        ValueError: If the selector does not match or the data is invalid.
    """
    if call_data[:4] != TALLY_SELECTOR:
        raise ValueError("call data is not a tallyVotesFromHCS call")
    try:
        proposal_id, rows = decode(_CALL_TYPES, call_data[4:])
    except DecodingError as e:
        raise ValueError(f"undecodable tally call data: {e}") from e
    votes = [
        EncodedVote(
            voter=to_checksum_address(voter),
            support=VoteSupport(support),
            voting_power=voting_power,
            timestamp=timestamp,
            log_message_id=message_id,
            log_sequence_number=sequence_number,
            signature=signature,
        )
        for voter, support, voting_power, timestamp, message_id, sequence_number, signature in rows
    ]
    return proposal_id, votes


def encode_votes_tallied(contract_address: str, totals: VoteTotals) -> ContractLog:
    """Build the VotesTallied log a contract emits for the given totals."""
    return ContractLog(
        address=contract_address,
        topics=(VOTES_TALLIED_TOPIC, totals.proposal_id.to_bytes(32, "big")),
        data=encode(_TOTALS_TYPES, [totals.for_votes, totals.against_votes, totals.abstain_votes]),
    )


def find_votes_tallied(logs: Iterable[ContractLog], proposal_id: int) -> VoteTotals | None:
    """Find the VotesTallied event for a proposal among transaction logs.

    Logs from other events, other proposals, or with malformed data are
    skipped.

    Returns:
        The totals, or None when no matching event was emitted.
    """
    for log in logs:
        if len(log.topics) < 2 or log.topics[0] != VOTES_TALLIED_TOPIC:
            continue
        if int.from_bytes(log.topics[1], "big") != proposal_id:
            continue
        try:
            for_votes, against_votes, abstain_votes = decode(_TOTALS_TYPES, log.data)
        except DecodingError:
            continue
        return VoteTotals(
            proposal_id=proposal_id,
            for_votes=for_votes,
            against_votes=against_votes,
            abstain_votes=abstain_votes,
        )
    return None
