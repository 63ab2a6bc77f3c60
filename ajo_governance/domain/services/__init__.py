"""Pure protocol services: digest, signature codec, signer recovery."""

from ajo_governance.domain.services.signature_codec import normalize_signature
from ajo_governance.domain.services.signer_recovery import (
    candidate_signers,
    prefixed_digest,
    recover_signer,
    recover_with_candidates,
    try_recover,
)
from ajo_governance.domain.services.vote_digest import (
    compute_vote_digest,
    encode_log_message_id,
)

__all__: list[str] = [
    "candidate_signers",
    "compute_vote_digest",
    "encode_log_message_id",
    "normalize_signature",
    "prefixed_digest",
    "recover_signer",
    "recover_with_candidates",
    "try_recover",
]
