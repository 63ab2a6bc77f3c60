"""
Pytest configuration and shared fixtures for the vote protocol tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async function mocking
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
- Signature tests use real secp256k1 keys through eth-account
"""

import pytest
from eth_account import Account

from ajo_governance.infrastructure.stubs import (
    GovernanceLedgerStub,
    LocalKeySignerStub,
    VoteLogStub,
    VoteStoreStub,
)

# Test-only keys, never funded
MEMBER_KEY = "0x" + "11" * 32
OTHER_MEMBER_KEY = "0x" + "22" * 32
TOPIC_ID = "0.0.4821"
CONTRACT_ID = "0.0.5005"


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from ajo_governance import __version__

    return __version__


@pytest.fixture
def member_address() -> str:
    """Address of the default test member."""
    return Account.from_key(MEMBER_KEY).address


@pytest.fixture
def other_member_address() -> str:
    """Address of the second test member."""
    return Account.from_key(OTHER_MEMBER_KEY).address


@pytest.fixture
def signer() -> LocalKeySignerStub:
    """Local signer holding both test keys, the first one active."""
    return LocalKeySignerStub.from_keys(MEMBER_KEY, OTHER_MEMBER_KEY)


@pytest.fixture
def vote_log() -> VoteLogStub:
    """In-memory ordered log."""
    return VoteLogStub()


@pytest.fixture
def vote_store() -> VoteStoreStub:
    """In-memory finalized-vote store."""
    return VoteStoreStub()


@pytest.fixture
def ledger() -> GovernanceLedgerStub:
    """In-memory governance contract with confirmation."""
    return GovernanceLedgerStub()


@pytest.fixture
def topic_id() -> str:
    return TOPIC_ID


@pytest.fixture
def contract_id() -> str:
    return CONTRACT_ID


@pytest.fixture
def make_finalized_vote():
    """Factory for FinalizedVotes signed with a real key over the final digest."""
    from eth_account.messages import encode_defunct

    from ajo_governance.domain.models.vote import FinalizedVote, VoteSupport
    from ajo_governance.domain.services.vote_digest import (
        compute_vote_digest,
        encode_log_message_id,
    )

    def _make(
        proposal_id: int = 7,
        support: VoteSupport = VoteSupport.FOR,
        sequence_number: int = 1,
        key: str = MEMBER_KEY,
        voting_power: int = 100,
        simulated: bool = False,
    ) -> FinalizedVote:
        account = Account.from_key(key)
        message_id = encode_log_message_id(sequence_number)
        digest = compute_vote_digest(
            proposal_id, account.address, support, message_id, sequence_number
        )
        signed = account.sign_message(encode_defunct(primitive=digest))
        return FinalizedVote(
            proposal_id=proposal_id,
            voter=account.address,
            support=support,
            voting_power=voting_power,
            timestamp=1_700_000_000,
            log_message_id=message_id,
            log_sequence_number=sequence_number,
            signature=bytes(signed.signature),
            simulated=simulated,
        )

    return _make
