"""Signature normalization.

Wallets hand back signatures in several shapes: hex with or without a
``0x`` prefix, 65 bytes with a 27/28 or 0/1 recovery byte, or 64 bytes
with no recovery byte at all. Everything downstream works on the single
canonical NormalizedSignature.
"""

from __future__ import annotations

from ajo_governance.domain.errors.signature import MalformedSignatureError
from ajo_governance.domain.models.signature import LEGACY_V_OFFSET, NormalizedSignature

COMPACT_LENGTH: int = 64
RECOVERABLE_LENGTH: int = 65


def _decode(raw_signature: bytes | bytearray | str) -> bytes:
    if isinstance(raw_signature, (bytes, bytearray)):
        return bytes(raw_signature)
    if not isinstance(raw_signature, str):
        raise MalformedSignatureError(f"unsupported type {type(raw_signature).__name__}")

    text = raw_signature.strip()
    if text[:2].lower() == "0x":
        text = text[2:]
    # Odd-length hex loses its leading zero nibble in some wallets
    if len(text) % 2:
        text = "0" + text
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise MalformedSignatureError("not valid hex") from e


def normalize_signature(raw_signature: bytes | bytearray | str) -> NormalizedSignature:
    """Normalize a raw signature into (r, s, recovery_id).

    Args:
        raw_signature: Signature bytes or hex string.

    Returns:
        The canonical signature. For 64-byte input ``embedded`` is False
        and the recovery id must be resolved by trying both candidates.

    Raises:
        MalformedSignatureError: If the signature cannot be made well-formed.
    """
    data = _decode(raw_signature)

    if len(data) not in (COMPACT_LENGTH, RECOVERABLE_LENGTH):
        raise MalformedSignatureError(
            f"expected {COMPACT_LENGTH} or {RECOVERABLE_LENGTH} bytes, got {len(data)}"
        )

    r, s = data[:32], data[32:64]
    if not any(r) or not any(s):
        raise MalformedSignatureError("r and s must be non-zero")

    if len(data) == COMPACT_LENGTH:
        return NormalizedSignature(r=r, s=s, recovery_id=0, embedded=False)

    v = data[64]
    if v >= LEGACY_V_OFFSET:
        v -= LEGACY_V_OFFSET
    if v not in (0, 1):
        raise MalformedSignatureError(f"invalid recovery byte {data[64]}")
    return NormalizedSignature(r=r, s=s, recovery_id=v, embedded=True)
