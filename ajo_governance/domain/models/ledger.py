"""Ledger transaction results as reported by the mirror node."""

from __future__ import annotations

from dataclasses import dataclass, field

SUCCESS_RESULT: str = "SUCCESS"


@dataclass(frozen=True)
class ContractLog:
    """A single EVM log emitted by a contract call.

    Attributes:
        address: Emitting contract address.
        topics: Indexed topics, topic 0 being the event signature hash.
        data: ABI-encoded non-indexed arguments.
    """

    address: str
    topics: tuple[bytes, ...]
    data: bytes


@dataclass(frozen=True)
class ContractCallResult:
    """Outcome of a confirmed contract call.

    Attributes:
        transaction_id: Transaction that executed the call.
        result: Ledger result code, ``SUCCESS`` on success.
        gas_used: Gas consumed by the call.
        logs: Logs emitted by the call.
        error_message: Revert reason, when the ledger reports one.
    """

    transaction_id: str
    result: str
    gas_used: int = 0
    logs: tuple[ContractLog, ...] = field(default_factory=tuple)
    error_message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.result == SUCCESS_RESULT
