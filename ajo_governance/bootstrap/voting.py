"""Bootstrap wiring for vote protocol dependencies.

Adapters are built lazily from GovernanceConfig.from_environment(). The
ledger gateway is the member's wallet, so it has no default and must be
provided with set_ledger_gateway() before a tally coordinator is built.
"""

from __future__ import annotations

from ajo_governance.application.ports.confirmation import TransactionConfirmationPort
from ajo_governance.application.ports.ledger import LedgerGatewayProtocol
from ajo_governance.application.ports.vote_log import VoteLogPort
from ajo_governance.application.ports.vote_store import VoteStorePort
from ajo_governance.application.services.tally_coordinator import TallyCoordinator
from ajo_governance.config.governance_config import GovernanceConfig
from ajo_governance.infrastructure.adapters.log_client import LogClient
from ajo_governance.infrastructure.adapters.mirror_reader import MirrorReader
from ajo_governance.infrastructure.stubs.vote_store_stub import VoteStoreStub

_config: GovernanceConfig | None = None
_vote_log: VoteLogPort | None = None
_mirror_reader: MirrorReader | None = None
_confirmations: TransactionConfirmationPort | None = None
_ledger_gateway: LedgerGatewayProtocol | None = None
_vote_store: VoteStorePort | None = None


def get_governance_config() -> GovernanceConfig:
    """Get configuration, read from the environment on first use."""
    global _config
    if _config is None:
        _config = GovernanceConfig.from_environment()
    return _config


def get_vote_log() -> VoteLogPort:
    """Get the ordered log client."""
    global _vote_log
    if _vote_log is None:
        config = get_governance_config().log
        _vote_log = LogClient(
            base_url=config.submit_url,
            timeout=config.timeout_seconds,
            allow_simulated_fallback=config.allow_simulated_fallback,
        )
    return _vote_log


def get_mirror_reader() -> MirrorReader:
    """Get the mirror node reader."""
    global _mirror_reader
    if _mirror_reader is None:
        config = get_governance_config()
        _mirror_reader = MirrorReader(
            base_url=config.mirror.base_url,
            timeout=config.mirror.timeout_seconds,
            page_limit=config.mirror.page_limit,
            voting_power=config.tally.voting_power,
            confirmation_initial_delay=config.mirror.confirmation_initial_delay_seconds,
            confirmation_attempts=config.mirror.confirmation_attempts,
            confirmation_interval=config.mirror.confirmation_interval_seconds,
        )
    return _mirror_reader


def get_transaction_confirmations() -> TransactionConfirmationPort:
    """Get the transaction confirmation source (the mirror reader by default)."""
    global _confirmations
    if _confirmations is None:
        _confirmations = get_mirror_reader()
    return _confirmations


def get_ledger_gateway() -> LedgerGatewayProtocol:
    """Get the wallet-backed ledger gateway.

    Raises:
        RuntimeError: If no gateway has been set.
    """
    if _ledger_gateway is None:
        raise RuntimeError("No ledger gateway configured; call set_ledger_gateway() first")
    return _ledger_gateway


def get_vote_store() -> VoteStorePort:
    """Get the local finalized-vote store."""
    global _vote_store
    if _vote_store is None:
        _vote_store = VoteStoreStub()
    return _vote_store


def get_tally_coordinator() -> TallyCoordinator:
    """Build a tally coordinator from the configured dependencies.

    Raises:
        RuntimeError: If no ledger gateway or contract id is configured.
    """
    config = get_governance_config().tally
    if not config.contract_id:
        raise RuntimeError("GOVERNANCE_CONTRACT_ID is not configured")
    return TallyCoordinator(
        ledger=get_ledger_gateway(),
        confirmations=get_transaction_confirmations(),
        contract_id=config.contract_id,
        gas_limit=config.gas_limit,
        allow_simulated_votes=config.allow_simulated_votes,
        vote_store=get_vote_store(),
    )


async def close_voting_dependencies() -> None:
    """Close network clients created by this module."""
    if isinstance(_vote_log, LogClient):
        await _vote_log.close()
    if _mirror_reader is not None:
        await _mirror_reader.close()
    reset_voting_dependencies()


def reset_voting_dependencies() -> None:
    """Reset all singleton instances for testing."""
    global _config
    global _vote_log
    global _mirror_reader
    global _confirmations
    global _ledger_gateway
    global _vote_store

    _config = None
    _vote_log = None
    _mirror_reader = None
    _confirmations = None
    _ledger_gateway = None
    _vote_store = None


def set_governance_config(config: GovernanceConfig) -> None:
    """Set custom configuration for testing."""
    global _config
    _config = config


def set_vote_log(vote_log: VoteLogPort) -> None:
    """Set custom ordered log client for testing."""
    global _vote_log
    _vote_log = vote_log


def set_transaction_confirmations(confirmations: TransactionConfirmationPort) -> None:
    """Set custom transaction confirmation source for testing."""
    global _confirmations
    _confirmations = confirmations


def set_ledger_gateway(gateway: LedgerGatewayProtocol) -> None:
    """Set the wallet-backed ledger gateway."""
    global _ledger_gateway
    _ledger_gateway = gateway


def set_vote_store(store: VoteStorePort) -> None:
    """Set custom vote store for testing."""
    global _vote_store
    _vote_store = store
