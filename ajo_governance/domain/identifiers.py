"""Ledger identifier conversions.

Topics and accounts are addressed as ``shard.realm.num`` on the ledger
and as 32-byte / 20-byte values on the EVM side. Transaction ids use
``0.0.A@seconds.nanos`` in wallets and ``0.0.A-seconds-nanos`` in mirror
node URLs.
"""

from __future__ import annotations

import re

from eth_utils import is_address, to_checksum_address

_ENTITY_ID = re.compile(r"^\d+\.\d+\.\d+$")
_TRANSACTION_ID = re.compile(r"^(\d+\.\d+\.\d+)@(\d+)\.(\d+)$")


def to_topic_id(topic: str) -> str:
    """Convert a topic reference to ``shard.realm.num`` form.

    Args:
        topic: Either ``0.0.N`` or a hex value (typically a bytes32 from
            the governance contract) whose integer value is ``N``.

    Returns:
        The topic id as ``shard.realm.num``.

    Raises:
        ValueError: If the value is neither form.
    """
    topic = topic.strip()
    if _ENTITY_ID.match(topic):
        return topic
    hex_part = topic[2:] if topic[:2].lower() == "0x" else topic
    try:
        number = int(hex_part, 16)
    except ValueError as e:
        raise ValueError(f"Invalid topic id: {topic!r}") from e
    return f"0.0.{number}"


def account_to_evm_address(account: str) -> str:
    """Convert an account id to its long-zero EVM address.

    EVM addresses are returned checksummed and unchanged otherwise.

    Raises:
        ValueError: If the value is neither an account id nor an address.
    """
    account = account.strip()
    if account.startswith("0x"):
        if not is_address(account):
            raise ValueError(f"Invalid EVM address: {account!r}")
        return to_checksum_address(account)
    if not _ENTITY_ID.match(account):
        raise ValueError(f"Invalid account id: {account!r}")
    number = int(account.split(".")[2])
    return to_checksum_address("0x" + number.to_bytes(20, "big").hex())


def to_mirror_transaction_id(transaction_id: str) -> str:
    """Format a wallet transaction id for mirror node URLs.

    ``0.0.1234@1700000000.123456789`` becomes
    ``0.0.1234-1700000000-123456789``. Ids already in mirror form are
    returned unchanged.
    """
    match = _TRANSACTION_ID.match(transaction_id.strip())
    if not match:
        return transaction_id.strip()
    account, seconds, nanos = match.groups()
    return f"{account}-{seconds}-{nanos}"
