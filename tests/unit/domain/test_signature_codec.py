"""Unit tests for signature normalization."""

import pytest

from ajo_governance.domain.errors.signature import MalformedSignatureError
from ajo_governance.domain.services.signature_codec import normalize_signature

R = bytes(range(1, 33))
S = bytes(range(33, 65))


class TestNormalizeSignature:
    """Tests for normalize_signature."""

    @pytest.mark.parametrize("v, recovery_id", [(27, 0), (28, 1), (0, 0), (1, 1)])
    def test_65_bytes_keeps_recovery_id(self, v: int, recovery_id: int) -> None:
        """Both legacy and raw recovery bytes are accepted."""
        signature = normalize_signature(R + S + bytes([v]))

        assert signature.r == R
        assert signature.s == S
        assert signature.recovery_id == recovery_id
        assert signature.embedded is True

    def test_64_bytes_has_no_embedded_recovery_id(self) -> None:
        """Compact signatures are flagged as ambiguous."""
        signature = normalize_signature(R + S)

        assert signature.embedded is False
        assert signature.recovery_id == 0

    def test_hex_with_and_without_prefix(self) -> None:
        """Hex strings are accepted with or without 0x."""
        raw = R + S + b"\x1c"

        assert normalize_signature("0x" + raw.hex()) == normalize_signature(raw)
        assert normalize_signature(raw.hex()) == normalize_signature(raw)
        assert normalize_signature("0X" + raw.hex().upper()) == normalize_signature(raw)

    def test_odd_length_hex_gets_leading_zero(self) -> None:
        """Odd-length hex is left-padded with one zero nibble."""
        raw = b"\x01" + R[1:] + S + b"\x1b"
        text = raw.hex()
        assert text.startswith("0")

        signature = normalize_signature(text[1:])

        assert signature.r == raw[:32]
        assert signature.recovery_id == 0

    def test_bytearray_accepted(self) -> None:
        """bytearray input is treated like bytes."""
        assert normalize_signature(bytearray(R + S + b"\x1b")).r == R

    def test_canonical_output(self) -> None:
        """Canonical form is r || s || (27 + recovery_id)."""
        signature = normalize_signature(R + S + b"\x01")

        assert signature.to_bytes() == R + S + b"\x1c"
        assert signature.v == 28
        assert signature.to_hex() == "0x" + (R + S + b"\x1c").hex()

    def test_with_recovery_id_marks_embedded(self) -> None:
        """Resolving a compact signature yields an embedded one."""
        resolved = normalize_signature(R + S).with_recovery_id(1)

        assert resolved.embedded is True
        assert resolved.to_bytes()[-1] == 28

    @pytest.mark.parametrize("length", [0, 32, 63, 66, 96])
    def test_wrong_length_rejected(self, length: int) -> None:
        """Only 64 and 65 byte signatures are accepted."""
        with pytest.raises(MalformedSignatureError, match="expected 64 or 65 bytes"):
            normalize_signature(b"\x01" * length)

    @pytest.mark.parametrize("v", [2, 26, 29, 255])
    def test_invalid_recovery_byte_rejected(self, v: int) -> None:
        """Recovery bytes outside {0, 1, 27, 28} are rejected."""
        with pytest.raises(MalformedSignatureError, match="invalid recovery byte"):
            normalize_signature(R + S + bytes([v]))

    def test_zero_r_rejected(self) -> None:
        """A zero r value is malformed."""
        with pytest.raises(MalformedSignatureError, match="non-zero"):
            normalize_signature(bytes(32) + S + b"\x1b")

    def test_zero_s_rejected(self) -> None:
        """A zero s value is malformed."""
        with pytest.raises(MalformedSignatureError, match="non-zero"):
            normalize_signature(R + bytes(32))

    def test_non_hex_rejected(self) -> None:
        """Non-hex strings are malformed."""
        with pytest.raises(MalformedSignatureError, match="not valid hex"):
            normalize_signature("0x" + "zz" * 65)

    def test_unsupported_type_rejected(self) -> None:
        """Only bytes and str are accepted."""
        with pytest.raises(MalformedSignatureError, match="unsupported type"):
            normalize_signature(12345)  # type: ignore[arg-type]
