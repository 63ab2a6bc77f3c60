"""Ports for the application layer.

Ports are abstract interfaces that infrastructure adapters implement.
"""

from ajo_governance.application.ports.confirmation import TransactionConfirmationPort
from ajo_governance.application.ports.ledger import LedgerGatewayProtocol
from ajo_governance.application.ports.signer import SignerProtocol
from ajo_governance.application.ports.vote_log import VoteLogPort
from ajo_governance.application.ports.vote_store import VoteStorePort

__all__: list[str] = [
    "LedgerGatewayProtocol",
    "SignerProtocol",
    "TransactionConfirmationPort",
    "VoteLogPort",
    "VoteStorePort",
]
