"""Ledger gateway port.

Contract execution goes through the member's wallet, which signs and
submits the transaction. The gateway only reports the transaction id;
the outcome is read back separately (see TransactionConfirmationPort).
"""

from abc import ABC, abstractmethod


class LedgerGatewayProtocol(ABC):
    """Abstract contract execution capability."""

    @abstractmethod
    async def execute_contract(
        self,
        contract_id: str,
        function_parameters: bytes,
        gas: int,
    ) -> str:
        """Submit a contract call transaction.

        Args:
            contract_id: Target contract as ``shard.realm.num`` or EVM address.
            function_parameters: ABI-encoded call data, selector included.
            gas: Gas limit for the call.

        Returns:
            The transaction id (``0.0.A@seconds.nanos``).

        Raises:
            ExecutionRevertedError: If the ledger rejected the transaction
                before it could be confirmed; the reason carries the
                ledger status code.
        """
        ...
