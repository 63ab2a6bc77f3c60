"""
Ajo HCS Governance - signed off-chain voting for savings circles

Members sign votes off-chain, the votes are ordered by an append-only
consensus topic, read back through a mirror node, re-verified, and
submitted as a single batched tally transaction to the governance
contract.

Protocol truths:
- The voter is whoever the signature recovers to, never a claimed address
- A vote is only tallied once its signature binds the log sequence number
- A simulated log receipt is never authoritative
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
