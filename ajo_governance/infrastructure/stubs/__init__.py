"""Stub implementations for testing and local development."""

from ajo_governance.infrastructure.stubs.ledger_stub import GovernanceLedgerStub
from ajo_governance.infrastructure.stubs.local_key_signer_stub import (
    LocalKeySignerStub,
    SigningDeclinedError,
)
from ajo_governance.infrastructure.stubs.vote_log_stub import VoteLogStub
from ajo_governance.infrastructure.stubs.vote_store_stub import VoteStoreStub

__all__: list[str] = [
    "GovernanceLedgerStub",
    "LocalKeySignerStub",
    "SigningDeclinedError",
    "VoteLogStub",
    "VoteStoreStub",
]
