"""Ordered log submission receipts.

A receipt is either sequenced by the log or simulated locally. The two
are distinct types so a call site cannot read a sequence number without
the receipt's authority travelling with it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class SequencedReceipt:
    """The log accepted the message and assigned a sequence number.

    Attributes:
        topic_id: Topic the message was appended to.
        sequence_number: Per-topic sequence number, never reused.
        transaction_id: Log submission transaction identifier.
    """

    topic_id: str
    sequence_number: int
    transaction_id: str

    @property
    def simulated(self) -> bool:
        return False


@dataclass(frozen=True)
class SimulatedReceipt:
    """The log was unreachable; the sequence number was generated locally.

    Never authoritative. Only usable in development and demos.

    Attributes:
        topic_id: Topic the message was addressed to.
        sequence_number: Locally generated sequence number.
        transaction_id: Synthetic ``simulated-<ms>`` identifier.
        reason: Why the log could not be used.
    """

    topic_id: str
    sequence_number: int
    transaction_id: str
    reason: str = ""

    @property
    def simulated(self) -> bool:
        return True


LogReceipt = Union[SequencedReceipt, SimulatedReceipt]
