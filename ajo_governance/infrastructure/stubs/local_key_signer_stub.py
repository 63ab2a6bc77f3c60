"""Local-key signer stub for testing and development.

Signs with in-process secp256k1 keys through eth_account, applying the
same EIP-191 personal-message prefix a wallet applies. Never use with
keys that hold value.

The stub can mimic wallet behaviours the signing session must cope with:
- compact 64-byte signatures without a recovery byte
- hex string output instead of raw bytes
- the member switching accounts between two signatures
- the member declining a request
"""

from __future__ import annotations

from dataclasses import dataclass, field

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount

from ajo_governance.application.ports.signer import SignerProtocol


class SigningDeclinedError(Exception):
    """Raised by the stub when a signature request is declined."""


@dataclass
class SignRequest:
    """Record of a sign() call."""

    message: bytes
    signer: str


@dataclass
class LocalKeySignerStub(SignerProtocol):
    """In-memory signer backed by one or more local keys.

    Attributes:
        accounts: Keys available to the stub; ``active`` indexes the one in use.
        compact: Return 64-byte ``r || s`` signatures.
        as_hex: Return ``0x``-prefixed hex strings instead of bytes.
        requests: Every message that was signed, in order.
    """

    accounts: list[LocalAccount] = field(default_factory=lambda: [Account.create()])
    active: int = 0
    compact: bool = False
    as_hex: bool = False
    requests: list[SignRequest] = field(default_factory=list)
    _switch_after: dict[int, int] = field(default_factory=dict)
    _decline_next: bool = False

    @classmethod
    def from_keys(cls, *private_keys: str | bytes, **options) -> LocalKeySignerStub:
        """Create a stub from explicit private keys."""
        return cls(accounts=[Account.from_key(key) for key in private_keys], **options)

    @property
    def address(self) -> str:
        """Checksummed address of the active key."""
        return self.accounts[self.active].address

    def use_account(self, index: int) -> None:
        """Switch the active key immediately."""
        if not 0 <= index < len(self.accounts):
            raise IndexError(f"no account at index {index}")
        self.active = index

    def switch_account_after(self, signatures: int, index: int) -> None:
        """Switch to ``index`` once ``signatures`` more signatures were made."""
        self._switch_after[len(self.requests) + signatures] = index

    def decline_next(self) -> None:
        """Make the next sign() call fail as if the member declined."""
        self._decline_next = True

    async def sign(self, message: bytes) -> bytes | str:
        """Sign message bytes with the active key."""
        if self._decline_next:
            self._decline_next = False
            raise SigningDeclinedError("signature request declined")

        pending_switch = self._switch_after.pop(len(self.requests), None)
        if pending_switch is not None:
            self.use_account(pending_switch)

        account = self.accounts[self.active]
        signed = account.sign_message(encode_defunct(primitive=message))
        signature = bytes(signed.signature)
        if self.compact:
            signature = signature[:64]

        self.requests.append(SignRequest(message=message, signer=account.address))
        return "0x" + signature.hex() if self.as_hex else signature
