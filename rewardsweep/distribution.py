"""Equal-split distribution planning and the reward pool instruction."""

from __future__ import annotations

import struct
from collections.abc import Sequence
from dataclasses import dataclass

from solders.instruction import AccountMeta, Instruction  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.system_program import ID as SYSTEM_PROGRAM_ID  # type: ignore[import-untyped]

from rewardsweep.amounts import checked_u64, equal_share
from rewardsweep.discriminator import DISCRIMINATOR_DISTRIBUTE_REWARDS
from rewardsweep.holders import Holder
from rewardsweep.pda import derive_pool_pda, derive_vault_pda


@dataclass(frozen=True)
class DistributionPlan:
    distributable: int
    per_holder_share: int
    holders: tuple[Holder, ...]

    @property
    def total_payout(self) -> int:
        return self.per_holder_share * len(self.holders)

    @property
    def remainder(self) -> int:
        """Lamports left in the vault after the split."""
        return self.distributable - self.total_payout


def plan_distribution(
    vault_balance: int, rent_exempt: int, holders: Sequence[Holder]
) -> DistributionPlan:
    """Split everything above the rent floor equally, flooring each share.

    Callers gate the skip conditions (vault at or below the floor, no
    holders) before planning.
    """
    if vault_balance <= rent_exempt:
        raise ValueError(
            f"vault balance {vault_balance} does not exceed rent floor {rent_exempt}"
        )
    distributable = vault_balance - rent_exempt
    share, _ = equal_share(distributable, len(holders))
    return DistributionPlan(
        distributable=distributable,
        per_holder_share=share,
        holders=tuple(holders),
    )


class RewardPoolClient:
    """Builds instructions for the reward pool program."""

    def __init__(
        self,
        program_id: Pubkey,
        distribute_discriminator: bytes = DISCRIMINATOR_DISTRIBUTE_REWARDS,
    ) -> None:
        self._program_id = program_id
        self._distribute_discriminator = distribute_discriminator
        self._pool, _ = derive_pool_pda(program_id)
        self._vault, _ = derive_vault_pda(program_id)

    @property
    def program_id(self) -> Pubkey:
        return self._program_id

    @property
    def pool_address(self) -> Pubkey:
        return self._pool

    @property
    def vault_address(self) -> Pubkey:
        return self._vault

    def distribute_rewards_instruction(
        self, authority: Pubkey, holders: Sequence[Holder]
    ) -> Instruction:
        """One atomic equal-split instruction paying every holder.

        Args are Borsh ``Vec<HolderInfo { address: Pubkey, balance: u64 }>``;
        every holder is also passed as a writable remaining account.
        """
        data = bytearray(self._distribute_discriminator)
        data += struct.pack("<I", len(holders))
        for h in holders:
            data += bytes(h.address)
            data += struct.pack("<Q", checked_u64(h.balance, f"balance of {h.address}"))

        accounts = [
            AccountMeta(pubkey=self._pool, is_signer=False, is_writable=True),
            AccountMeta(pubkey=self._vault, is_signer=False, is_writable=True),
            AccountMeta(pubkey=authority, is_signer=True, is_writable=True),
            AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        ]
        accounts += [
            AccountMeta(pubkey=h.address, is_signer=False, is_writable=True)
            for h in holders
        ]
        return Instruction(self._program_id, bytes(data), accounts)
