"""Signature-related domain exceptions.

Raised synchronously by the pure signature helpers (codec and recovery)
and by the signing session when the recovered identity is not the one
that was bound into the signed digest.
"""

from ajo_governance.domain.exceptions import GovernanceError


class SignatureError(GovernanceError):
    """Base exception for signature handling failures."""

    pass


class MalformedSignatureError(SignatureError):
    """Raised when raw signature bytes cannot be normalized.

    This can occur when:
    - The input is not valid hex
    - The decoded length is outside {64, 65} bytes
    - r or s is zero, or the embedded recovery byte is not 0, 1, 27 or 28
    """

    def __init__(self, reason: str = "") -> None:
        """Initialize with the normalization failure reason.

        Args:
            reason: Why the signature was rejected.
        """
        message = f"Malformed signature: {reason}" if reason else "Malformed signature"
        super().__init__(message)
        self.reason = reason


class RecoveryFailedError(SignatureError):
    """Raised when no recovery candidate yields an acceptable signer."""

    def __init__(self, reason: str = "") -> None:
        """Initialize with the recovery failure reason.

        Args:
            reason: Why recovery failed.
        """
        message = (
            f"Could not recover signer from signature: {reason}"
            if reason
            else "Could not recover signer from signature"
        )
        super().__init__(message)
        self.reason = reason


class SignerMismatchError(SignatureError):
    """Raised when the final signature recovers to a different account.

    The preliminary signature established the voter. A final signature
    produced by another account is only adopted after explicit
    confirmation by the member.
    """

    def __init__(self, expected: str, actual: str) -> None:
        """Initialize with both recovered identities.

        Args:
            expected: Voter recovered from the preliminary signature.
            actual: Address recovered from the final signature.
        """
        super().__init__(
            f"Final signature was produced by {actual}, expected {expected}. "
            "Confirm the account change before signing again."
        )
        self.expected = expected
        self.actual = actual
