"""Signing capability port.

Key custody lives in the member's wallet. This port is the only way the
application reaches it: hand over the 32 digest bytes, get a signature
back. Implementations MUST apply the EIP-191 personal-message prefix
before signing, as every wallet's ``signMessage`` does.
"""

from abc import ABC, abstractmethod


class SignerProtocol(ABC):
    """Abstract signing capability.

    Each call is an interactive round-trip with the wallet and may be
    declined by the member; implementations raise in that case.
    """

    @abstractmethod
    async def sign(self, message: bytes) -> bytes | str:
        """Sign raw message bytes.

        Args:
            message: The bytes to sign (a 32-byte vote digest).

        Returns:
            Signature as raw bytes or hex string, 64 or 65 bytes long,
            with or without an embedded recovery byte.
        """
        ...
