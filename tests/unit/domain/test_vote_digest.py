"""Unit tests for vote digest construction."""

import pytest
from eth_abi.packed import encode_packed
from eth_utils import keccak, to_checksum_address

from ajo_governance.domain.models.vote import ZERO_MESSAGE_ID, VoteSupport
from ajo_governance.domain.services.vote_digest import (
    DIGEST_SIZE,
    compute_vote_digest,
    encode_log_message_id,
)

VOTER = "0x" + "ab" * 20


class TestEncodeLogMessageId:
    """Tests for sequence number to message id encoding."""

    def test_sequence_42_is_big_endian_0x2a(self) -> None:
        """Sequence 42 encodes as 31 zero bytes followed by 0x2a."""
        message_id = encode_log_message_id(42)

        assert len(message_id) == 32
        assert message_id == bytes(31) + b"\x2a"
        assert message_id.hex() == "00" * 31 + "2a"

    def test_zero_is_placeholder(self) -> None:
        """Sequence 0 encodes as the zero placeholder."""
        assert encode_log_message_id(0) == ZERO_MESSAGE_ID

    def test_large_sequence(self) -> None:
        """Multi-byte sequence numbers keep big-endian order."""
        assert encode_log_message_id(0x0102)[-2:] == b"\x01\x02"

    def test_negative_rejected(self) -> None:
        """Negative sequence numbers are rejected."""
        with pytest.raises(ValueError, match="non-negative"):
            encode_log_message_id(-1)


class TestComputeVoteDigest:
    """Tests for compute_vote_digest."""

    def test_matches_packed_keccak(self) -> None:
        """Digest is keccak256 over the tightly packed fields."""
        message_id = encode_log_message_id(42)
        expected = keccak(
            encode_packed(
                ["uint256", "address", "uint8", "bytes32", "uint256"],
                [7, VOTER, 1, message_id, 42],
            )
        )

        digest = compute_vote_digest(7, VOTER, VoteSupport.FOR, message_id, 42)

        assert digest == expected
        assert len(digest) == DIGEST_SIZE

    def test_packed_length_is_117_bytes(self) -> None:
        """uint256 + address + uint8 + bytes32 + uint256 packs to 117 bytes."""
        packed = encode_packed(
            ["uint256", "address", "uint8", "bytes32", "uint256"],
            [7, VOTER, 1, ZERO_MESSAGE_ID, 0],
        )
        assert len(packed) == 32 + 20 + 1 + 32 + 32

    def test_deterministic(self) -> None:
        """Same fields produce the same digest."""
        first = compute_vote_digest(7, VOTER, VoteSupport.FOR, ZERO_MESSAGE_ID, 0)
        second = compute_vote_digest(7, VOTER, VoteSupport.FOR, ZERO_MESSAGE_ID, 0)
        assert first == second

    def test_voter_case_does_not_matter(self) -> None:
        """Lowercase and checksummed voter produce the same digest."""
        lower = compute_vote_digest(7, VOTER, 1, ZERO_MESSAGE_ID, 0)
        checksummed = compute_vote_digest(7, to_checksum_address(VOTER), 1, ZERO_MESSAGE_ID, 0)
        assert lower == checksummed

    @pytest.mark.parametrize(
        "changes",
        [
            {"proposal_id": 8},
            {"voter": "0x0000000000000000000000000000000000000001"},
            {"support": VoteSupport.AGAINST},
            {"log_message_id": encode_log_message_id(1)},
            {"log_sequence_number": 1},
        ],
    )
    def test_every_field_is_bound(self, changes: dict) -> None:
        """Changing any single field changes the digest."""
        base = {
            "proposal_id": 7,
            "voter": VOTER,
            "support": VoteSupport.FOR,
            "log_message_id": ZERO_MESSAGE_ID,
            "log_sequence_number": 0,
        }
        assert compute_vote_digest(**base) != compute_vote_digest(**{**base, **changes})

    def test_short_message_id_rejected(self) -> None:
        """Message ids must be exactly 32 bytes."""
        with pytest.raises(ValueError, match="32 bytes"):
            compute_vote_digest(7, VOTER, 1, b"\x00" * 31, 0)

    def test_invalid_voter_rejected(self) -> None:
        """A non-address voter is rejected."""
        with pytest.raises(ValueError):
            compute_vote_digest(7, "not-an-address", 1, ZERO_MESSAGE_ID, 0)
