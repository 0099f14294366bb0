"""Token account layout decoding.

The SPL Token and Token-2022 programs share the same base layout for the
fields the pipeline needs. Decoding reads that fixed prefix and tolerates
extra trailing bytes (account state, extensions).
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from rewardsweep.errors import AccountDecodeError

TOKEN_ACCOUNT_SIZE = 165


def _pubkey(data: bytes, offset: int) -> Pubkey:
    return Pubkey.from_bytes(data[offset : offset + 32])


@dataclass(frozen=True)
class TokenAccount:
    mint: Pubkey  # 32 bytes
    owner: Pubkey  # 32 bytes
    amount: int  # u64

    STRUCT_SIZE = 72  # decoded prefix: mint + owner + amount

    @classmethod
    def from_bytes(cls, data: bytes) -> TokenAccount:
        data = bytes(data)
        if len(data) < cls.STRUCT_SIZE:
            raise AccountDecodeError(
                f"token account data too short: have {len(data)} bytes, need at least {cls.STRUCT_SIZE}"
            )
        mint = _pubkey(data, 0)
        owner = _pubkey(data, 32)
        (amount,) = struct.unpack_from("<Q", data, 64)
        return cls(mint=mint, owner=owner, amount=amount)

    def to_bytes(self) -> bytes:
        """Serialize into a full-size SPL Token account (remaining state zeroed)."""
        head = bytes(self.mint) + bytes(self.owner) + struct.pack("<Q", self.amount)
        return head + b"\x00" * (TOKEN_ACCOUNT_SIZE - len(head))
