"""Dependency wiring for the vote protocol."""

from ajo_governance.bootstrap.voting import (
    close_voting_dependencies,
    get_governance_config,
    get_ledger_gateway,
    get_mirror_reader,
    get_tally_coordinator,
    get_transaction_confirmations,
    get_vote_log,
    get_vote_store,
    reset_voting_dependencies,
    set_governance_config,
    set_ledger_gateway,
    set_transaction_confirmations,
    set_vote_log,
    set_vote_store,
)

__all__: list[str] = [
    "close_voting_dependencies",
    "get_governance_config",
    "get_ledger_gateway",
    "get_mirror_reader",
    "get_tally_coordinator",
    "get_transaction_confirmations",
    "get_vote_log",
    "get_vote_store",
    "reset_voting_dependencies",
    "set_governance_config",
    "set_ledger_gateway",
    "set_transaction_confirmations",
    "set_vote_log",
    "set_vote_store",
]
