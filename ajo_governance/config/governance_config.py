"""Vote protocol configuration.

This module defines configuration for the ordered log, the mirror node,
and tally submission, with environment variable overrides.

Environment Variables (Log):
- HCS_LOG_SUBMIT_URL: Log submission endpoint (default: unset, which
  makes every submission use the simulated fallback)
- HCS_LOG_TIMEOUT_SECONDS: Submission timeout (default: 10.0)
- HCS_ALLOW_SIMULATED_FALLBACK: Simulate sequence numbers when the log is
  unreachable (default: true)

Environment Variables (Mirror):
- HEDERA_MIRROR_NODE_URL: Mirror node base URL
  (default: https://testnet.mirrornode.hedera.com)
- MIRROR_TIMEOUT_SECONDS: Request timeout (default: 30.0)
- MIRROR_PAGE_LIMIT: Messages per page (default: 100)
- MIRROR_CONFIRMATION_INITIAL_DELAY_SECONDS: Wait before first poll (default: 5.0)
- MIRROR_CONFIRMATION_ATTEMPTS: Polling attempts (default: 20)
- MIRROR_CONFIRMATION_INTERVAL_SECONDS: Delay between polls (default: 3.0)

Environment Variables (Tally):
- GOVERNANCE_CONTRACT_ID: Governance contract id or EVM address
- GOVERNANCE_GAS_LIMIT: Tally gas limit (default: 2000000)
- GOVERNANCE_VOTING_POWER: Weight per vote (default: 100)
- GOVERNANCE_ALLOW_SIMULATED_VOTES: Tally simulated votes (default: false)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from ajo_governance.domain.models.vote import DEFAULT_VOTING_POWER

DEFAULT_MIRROR_NODE_URL = "https://testnet.mirrornode.hedera.com"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed float value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool_env(key: str, default: bool) -> bool:
    value = os.environ.get(key)
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


def _get_str_env(key: str) -> str | None:
    value = os.environ.get(key, "").strip()
    return value or None


@dataclass(frozen=True)
class LogConfig:
    """Configuration for the ordered log client.

    Attributes:
        submit_url: Base URL of the log submission service. None means
            the log is not configured and submissions are simulated.
        timeout_seconds: Submission timeout.
        allow_simulated_fallback: Whether unreachable logs produce
            simulated receipts instead of LogUnavailableError.
    """

    submit_url: str | None = None
    timeout_seconds: float = 10.0
    allow_simulated_fallback: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.timeout_seconds <= 0:
            raise ValueError(
                f"timeout_seconds must be positive, got {self.timeout_seconds}"
            )

    @classmethod
    def from_environment(cls) -> LogConfig:
        """Create config from environment variables with defaults."""
        return cls(
            submit_url=_get_str_env("HCS_LOG_SUBMIT_URL"),
            timeout_seconds=_get_float_env("HCS_LOG_TIMEOUT_SECONDS", 10.0),
            allow_simulated_fallback=_get_bool_env("HCS_ALLOW_SIMULATED_FALLBACK", True),
        )


@dataclass(frozen=True)
class MirrorConfig:
    """Configuration for the mirror node reader.

    Attributes:
        base_url: Mirror node REST base URL.
        timeout_seconds: Request timeout.
        page_limit: Topic messages requested per page.
        confirmation_initial_delay_seconds: Wait before the first
            transaction poll.
        confirmation_attempts: Bound on transaction polls.
        confirmation_interval_seconds: Delay between transaction polls.
    """

    base_url: str = DEFAULT_MIRROR_NODE_URL
    timeout_seconds: float = 30.0
    page_limit: int = 100
    confirmation_initial_delay_seconds: float = 5.0
    confirmation_attempts: int = 20
    confirmation_interval_seconds: float = 3.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        if self.timeout_seconds <= 0:
            raise ValueError(
                f"timeout_seconds must be positive, got {self.timeout_seconds}"
            )
        if not 1 <= self.page_limit <= 100:
            raise ValueError(f"page_limit must be between 1 and 100, got {self.page_limit}")
        if self.confirmation_initial_delay_seconds < 0:
            raise ValueError(
                "confirmation_initial_delay_seconds must be non-negative, "
                f"got {self.confirmation_initial_delay_seconds}"
            )
        if self.confirmation_attempts < 1:
            raise ValueError(
                f"confirmation_attempts must be positive, got {self.confirmation_attempts}"
            )
        if self.confirmation_interval_seconds < 0:
            raise ValueError(
                "confirmation_interval_seconds must be non-negative, "
                f"got {self.confirmation_interval_seconds}"
            )

    @classmethod
    def from_environment(cls) -> MirrorConfig:
        """Create config from environment variables with defaults."""
        return cls(
            base_url=_get_str_env("HEDERA_MIRROR_NODE_URL") or DEFAULT_MIRROR_NODE_URL,
            timeout_seconds=_get_float_env("MIRROR_TIMEOUT_SECONDS", 30.0),
            page_limit=_get_int_env("MIRROR_PAGE_LIMIT", 100),
            confirmation_initial_delay_seconds=_get_float_env(
                "MIRROR_CONFIRMATION_INITIAL_DELAY_SECONDS", 5.0
            ),
            confirmation_attempts=_get_int_env("MIRROR_CONFIRMATION_ATTEMPTS", 20),
            confirmation_interval_seconds=_get_float_env(
                "MIRROR_CONFIRMATION_INTERVAL_SECONDS", 3.0
            ),
        )


@dataclass(frozen=True)
class TallyConfig:
    """Configuration for tally submission.

    Attributes:
        contract_id: Governance contract id or EVM address.
        gas_limit: Gas limit for the batched tally call.
        voting_power: Weight recorded on each vote.
        allow_simulated_votes: Accept simulated votes (never in production).
    """

    contract_id: str | None = None
    gas_limit: int = 2_000_000
    voting_power: int = DEFAULT_VOTING_POWER
    allow_simulated_votes: bool = False

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.gas_limit < 1:
            raise ValueError(f"gas_limit must be positive, got {self.gas_limit}")
        if self.voting_power < 1:
            raise ValueError(f"voting_power must be positive, got {self.voting_power}")

    @classmethod
    def from_environment(cls) -> TallyConfig:
        """Create config from environment variables with defaults."""
        return cls(
            contract_id=_get_str_env("GOVERNANCE_CONTRACT_ID"),
            gas_limit=_get_int_env("GOVERNANCE_GAS_LIMIT", 2_000_000),
            voting_power=_get_int_env("GOVERNANCE_VOTING_POWER", DEFAULT_VOTING_POWER),
            allow_simulated_votes=_get_bool_env("GOVERNANCE_ALLOW_SIMULATED_VOTES", False),
        )


@dataclass(frozen=True)
class GovernanceConfig:
    """Complete vote protocol configuration."""

    log: LogConfig
    mirror: MirrorConfig
    tally: TallyConfig

    @classmethod
    def from_environment(cls) -> GovernanceConfig:
        """Create the full configuration from environment variables."""
        return cls(
            log=LogConfig.from_environment(),
            mirror=MirrorConfig.from_environment(),
            tally=TallyConfig.from_environment(),
        )


# Testing config: no real log, no waiting on confirmation polls
TEST_GOVERNANCE_CONFIG = GovernanceConfig(
    log=LogConfig(submit_url=None, timeout_seconds=1.0),
    mirror=MirrorConfig(
        base_url="http://mirror.test",
        timeout_seconds=1.0,
        confirmation_initial_delay_seconds=0.0,
        confirmation_attempts=3,
        confirmation_interval_seconds=0.0,
    ),
    tally=TallyConfig(contract_id="0.0.5005", allow_simulated_votes=True),
)
