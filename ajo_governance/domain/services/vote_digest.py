"""Canonical vote digest construction.

The digest is the object every party signs or verifies: the member's
signing capability, the mirror reader, and the governance contract.
Field order and widths are part of the wire contract and MUST NOT change:

    keccak256(abi.encodePacked(
        uint256 proposalId,
        address voter,
        uint8   support,
        bytes32 logMessageId,
        uint256 logSequenceNumber,
    ))
"""

from __future__ import annotations

from eth_abi.packed import encode_packed
from eth_utils import keccak, to_checksum_address

DIGEST_FIELD_TYPES: tuple[str, ...] = ("uint256", "address", "uint8", "bytes32", "uint256")
DIGEST_SIZE: int = 32


def encode_log_message_id(sequence_number: int) -> bytes:
    """Encode a log sequence number as the 32-byte message id.

    Args:
        sequence_number: Sequence number assigned by the log (0 for the
            preliminary placeholder).

    Returns:
        The sequence number left-padded big-endian to 32 bytes.

    Raises:
        ValueError: If the sequence number is negative.
    """
    if sequence_number < 0:
        raise ValueError(f"sequence_number must be non-negative, got {sequence_number}")
    return sequence_number.to_bytes(DIGEST_SIZE, "big")


def compute_vote_digest(
    proposal_id: int,
    voter: str,
    support: int,
    log_message_id: bytes,
    log_sequence_number: int,
) -> bytes:
    """Compute the 32-byte digest of a vote.

    Args:
        proposal_id: Proposal being voted on.
        voter: Voter address (any case, validated and checksummed).
        support: Ballot option as uint8.
        log_message_id: 32-byte log message id.
        log_sequence_number: Log sequence number.

    Returns:
        keccak256 of the tightly packed fields.

    Raises:
        ValueError: If a field does not fit its wire type.
    """
    if len(log_message_id) != DIGEST_SIZE:
        raise ValueError(f"log_message_id must be 32 bytes, got {len(log_message_id)}")
    packed = encode_packed(
        list(DIGEST_FIELD_TYPES),
        [
            proposal_id,
            to_checksum_address(voter),
            int(support),
            bytes(log_message_id),
            log_sequence_number,
        ],
    )
    return keccak(packed)
