"""Transaction confirmation port."""

from abc import ABC, abstractmethod

from ajo_governance.domain.models.ledger import ContractCallResult


class TransactionConfirmationPort(ABC):
    """Abstract source of confirmed contract call results."""

    @abstractmethod
    async def await_contract_result(self, transaction_id: str) -> ContractCallResult:
        """Wait for a transaction to reach consensus and return its result.

        Waiting is bounded; it never hangs indefinitely.

        Args:
            transaction_id: Transaction returned by the ledger gateway.

        Returns:
            The confirmed call result, successful or not.

        Raises:
            ConfirmationTimeoutError: If the bound is exceeded.
        """
        ...
