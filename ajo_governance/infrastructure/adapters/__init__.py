"""Network adapters for the ordered log and the mirror node."""

from ajo_governance.infrastructure.adapters.log_client import LogClient
from ajo_governance.infrastructure.adapters.mirror_reader import MirrorReader

__all__: list[str] = ["LogClient", "MirrorReader"]
