"""Signature value objects and recovery outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

LEGACY_V_OFFSET: int = 27


@dataclass(frozen=True)
class NormalizedSignature:
    """Canonical (r, s, recovery_id) form of a secp256k1 signature.

    Attributes:
        r: 32-byte r value.
        s: 32-byte s value.
        recovery_id: 0 or 1.
        embedded: False when the input carried no recovery byte, in which
            case ``recovery_id`` is only a default and both candidates
            must be tried.
    """

    r: bytes
    s: bytes
    recovery_id: int
    embedded: bool = True

    @property
    def v(self) -> int:
        """Legacy 27/28 encoding of the recovery id."""
        return self.recovery_id + LEGACY_V_OFFSET

    def with_recovery_id(self, recovery_id: int) -> NormalizedSignature:
        """Return a copy carrying an explicit recovery id."""
        return NormalizedSignature(r=self.r, s=self.s, recovery_id=recovery_id, embedded=True)

    def to_bytes(self) -> bytes:
        """Encode as the 65-byte ``r || s || v`` form the contract expects."""
        return self.r + self.s + bytes([self.v])

    def to_hex(self) -> str:
        return "0x" + self.to_bytes().hex()


@dataclass(frozen=True)
class Recovered:
    """A signer identity established by public-key recovery.

    Attributes:
        address: Checksummed address of the recovered key.
        recovery_id: The recovery id that produced the address.
    """

    address: str
    recovery_id: int

    def matches(self, address: str | None) -> bool:
        return address is not None and self.address.lower() == address.lower()


@dataclass(frozen=True)
class RecoveryFailure:
    """Recovery did not establish an acceptable signer.

    Attributes:
        reason: Human-readable failure reason.
    """

    reason: str


RecoveryOutcome = Union[Recovered, RecoveryFailure]
