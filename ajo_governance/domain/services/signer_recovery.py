"""secp256k1 signer recovery for vote digests.

The digest is wrapped with the EIP-191 personal-message prefix before
recovery, the same prefix the member's signing capability applies
internally when asked to sign the 32 raw digest bytes.

When a signature carries no recovery byte both candidate recovery ids
are tried. Without an expected signer the first candidate that yields a
valid curve point wins, which is only a guess; callers that know who
should have signed pass ``expected_signer`` to disambiguate.
"""

from __future__ import annotations

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys.exceptions import BadSignature
from eth_keys.exceptions import ValidationError as KeyValidationError
from eth_utils import keccak

from ajo_governance.domain.errors.signature import RecoveryFailedError
from ajo_governance.domain.models.signature import (
    NormalizedSignature,
    Recovered,
    RecoveryFailure,
    RecoveryOutcome,
)
from ajo_governance.domain.services.vote_digest import DIGEST_SIZE

PERSONAL_MESSAGE_PREFIX: bytes = b"\x19Ethereum Signed Message:\n32"


def prefixed_digest(digest: bytes) -> bytes:
    """Return the EIP-191 hash of a 32-byte digest.

    This is the value the secp256k1 signature actually covers.
    """
    _require_digest(digest)
    return keccak(PERSONAL_MESSAGE_PREFIX + digest)


def _require_digest(digest: bytes) -> None:
    if len(digest) != DIGEST_SIZE:
        raise ValueError(f"digest must be {DIGEST_SIZE} bytes, got {len(digest)}")


def _recover_address(digest: bytes, signature: NormalizedSignature, recovery_id: int) -> str:
    message = encode_defunct(primitive=digest)
    return Account.recover_message(
        message,
        vrs=(
            recovery_id + 27,
            int.from_bytes(signature.r, "big"),
            int.from_bytes(signature.s, "big"),
        ),
    )


def candidate_signers(digest: bytes, signature: NormalizedSignature) -> list[Recovered]:
    """Recover every address the signature could belong to.

    Args:
        digest: 32-byte vote digest (unprefixed).
        signature: Normalized signature.

    Returns:
        One entry for a signature with an embedded recovery id, up to two
        for a compact signature. Candidates that do not produce a valid
        curve point are omitted.
    """
    _require_digest(digest)
    recovery_ids = [signature.recovery_id] if signature.embedded else [0, 1]

    candidates: list[Recovered] = []
    for recovery_id in recovery_ids:
        try:
            address = _recover_address(digest, signature, recovery_id)
        except (BadSignature, KeyValidationError, ValueError):
            continue
        candidates.append(Recovered(address=address, recovery_id=recovery_id))
    return candidates


def recover_with_candidates(
    digest: bytes,
    signature: NormalizedSignature,
    expected_signer: str | None = None,
) -> Recovered:
    """Recover the signer, trying both recovery ids when needed.

    Args:
        digest: 32-byte vote digest (unprefixed).
        signature: Normalized signature.
        expected_signer: Address that should have signed, if known.

    Returns:
        The recovered identity. When ``expected_signer`` is given it is
        the candidate matching that address.

    Raises:
        RecoveryFailedError: If no candidate yields a valid point, or none
            matches ``expected_signer``.
    """
    candidates = candidate_signers(digest, signature)
    if not candidates:
        raise RecoveryFailedError("no recovery candidate produced a valid curve point")

    if expected_signer is None:
        return candidates[0]

    for candidate in candidates:
        if candidate.matches(expected_signer):
            return candidate
    raise RecoveryFailedError(
        f"recovered {', '.join(c.address for c in candidates)}, expected {expected_signer}"
    )


def recover_signer(digest: bytes, signature: NormalizedSignature) -> str:
    """Recover the signer address of a vote digest.

    Raises:
        RecoveryFailedError: If no candidate yields a valid point.
    """
    return recover_with_candidates(digest, signature).address


def try_recover(
    digest: bytes,
    signature: NormalizedSignature,
    expected_signer: str | None = None,
) -> RecoveryOutcome:
    """Non-raising form of recover_with_candidates.

    Returns:
        Recovered on success, RecoveryFailure with the reason otherwise.
    """
    try:
        return recover_with_candidates(digest, signature, expected_signer)
    except RecoveryFailedError as e:
        return RecoveryFailure(reason=e.reason)
