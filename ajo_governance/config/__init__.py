"""Configuration for the vote protocol."""

from ajo_governance.config.governance_config import (
    DEFAULT_MIRROR_NODE_URL,
    TEST_GOVERNANCE_CONFIG,
    GovernanceConfig,
    LogConfig,
    MirrorConfig,
    TallyConfig,
)

__all__: list[str] = [
    "DEFAULT_MIRROR_NODE_URL",
    "TEST_GOVERNANCE_CONFIG",
    "GovernanceConfig",
    "LogConfig",
    "MirrorConfig",
    "TallyConfig",
]
