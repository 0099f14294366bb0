"""Pump.fun creator fee reader and claim instruction builder.

Creator fees accrue in two venues. Bonding-curve trades pay into a
lamport-holding creator vault PDA on the Pump program; trades after
migration pay wrapped SOL into a token account owned by a creator vault
authority PDA on the PumpSwap AMM program. The claimable balance is the
sum across both.
"""

from __future__ import annotations

import logging

from solders.instruction import AccountMeta, Instruction  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.system_program import ID as SYSTEM_PROGRAM_ID  # type: ignore[import-untyped]
from spl.token.constants import TOKEN_PROGRAM_ID, WRAPPED_SOL_MINT  # type: ignore[import-untyped]
from spl.token.instructions import (  # type: ignore[import-untyped]
    create_idempotent_associated_token_account,
    get_associated_token_address,
)

from rewardsweep.config import PUMP_AMM_PROGRAM_ID, PUMP_PROGRAM_ID
from rewardsweep.discriminator import (
    DISCRIMINATOR_COLLECT_COIN_CREATOR_FEE,
    DISCRIMINATOR_COLLECT_CREATOR_FEE,
)
from rewardsweep.ledger import Ledger
from rewardsweep.pda import (
    derive_coin_creator_vault_authority_pda,
    derive_creator_vault_pda,
    derive_event_authority_pda,
)
from rewardsweep.state import TokenAccount

logger = logging.getLogger(__name__)


class PumpFeeClient:
    """Reads pending creator fees and builds the instructions that claim them."""

    def __init__(
        self,
        ledger: Ledger,
        pump_program_id: Pubkey = Pubkey.from_string(PUMP_PROGRAM_ID),
        amm_program_id: Pubkey = Pubkey.from_string(PUMP_AMM_PROGRAM_ID),
    ) -> None:
        self._ledger = ledger
        self._pump_program_id = pump_program_id
        self._amm_program_id = amm_program_id

    def creator_vault_address(self, creator: Pubkey) -> Pubkey:
        addr, _ = derive_creator_vault_pda(creator, self._pump_program_id)
        return addr

    def coin_creator_vault_ata(self, creator: Pubkey) -> Pubkey:
        authority, _ = derive_coin_creator_vault_authority_pda(creator, self._amm_program_id)
        return get_associated_token_address(authority, WRAPPED_SOL_MINT)

    def get_creator_vault_balance(self, creator: Pubkey) -> int:
        """Bonding-curve vault lamports above its rent-exempt minimum."""
        account = self._ledger.get_account(self.creator_vault_address(creator))
        if account is None:
            return 0
        rent = self._ledger.get_minimum_balance_for_rent_exemption(len(account.data))
        return max(int(account.lamports) - rent, 0)

    def get_coin_creator_vault_balance(self, creator: Pubkey) -> int:
        """Wrapped SOL held in the PumpSwap creator vault token account."""
        account = self._ledger.get_account(self.coin_creator_vault_ata(creator))
        if account is None:
            return 0
        return TokenAccount.from_bytes(account.data).amount

    def get_creator_vault_balance_both_programs(self, creator: Pubkey) -> int:
        pump = self.get_creator_vault_balance(creator)
        amm = self.get_coin_creator_vault_balance(creator)
        logger.debug("creator vault balances: pump=%d pumpswap=%d", pump, amm)
        return pump + amm

    def collect_creator_fee_instructions(self, creator: Pubkey) -> list[Instruction]:
        """Claim instructions for every venue currently holding fees.

        Returns an empty list when neither vault has anything to collect,
        which can happen even after a positive pending read.
        """
        instructions: list[Instruction] = []
        if self.get_creator_vault_balance(creator) > 0:
            instructions.append(self._collect_creator_fee_ix(creator))
        if self.get_coin_creator_vault_balance(creator) > 0:
            instructions.append(
                create_idempotent_associated_token_account(creator, creator, WRAPPED_SOL_MINT)
            )
            instructions.append(self._collect_coin_creator_fee_ix(creator))
        return instructions

    def _collect_creator_fee_ix(self, creator: Pubkey) -> Instruction:
        event_authority, _ = derive_event_authority_pda(self._pump_program_id)
        return Instruction(
            program_id=self._pump_program_id,
            accounts=[
                AccountMeta(pubkey=creator, is_signer=True, is_writable=True),
                AccountMeta(pubkey=self.creator_vault_address(creator), is_signer=False, is_writable=True),
                AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
                AccountMeta(pubkey=event_authority, is_signer=False, is_writable=False),
                AccountMeta(pubkey=self._pump_program_id, is_signer=False, is_writable=False),
            ],
            data=DISCRIMINATOR_COLLECT_CREATOR_FEE,
        )

    def _collect_coin_creator_fee_ix(self, creator: Pubkey) -> Instruction:
        authority, _ = derive_coin_creator_vault_authority_pda(creator, self._amm_program_id)
        event_authority, _ = derive_event_authority_pda(self._amm_program_id)
        return Instruction(
            program_id=self._amm_program_id,
            accounts=[
                AccountMeta(pubkey=WRAPPED_SOL_MINT, is_signer=False, is_writable=False),
                AccountMeta(pubkey=TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
                AccountMeta(pubkey=creator, is_signer=True, is_writable=False),
                AccountMeta(pubkey=authority, is_signer=False, is_writable=False),
                AccountMeta(pubkey=self.coin_creator_vault_ata(creator), is_signer=False, is_writable=True),
                AccountMeta(
                    pubkey=get_associated_token_address(creator, WRAPPED_SOL_MINT),
                    is_signer=False,
                    is_writable=True,
                ),
                AccountMeta(pubkey=event_authority, is_signer=False, is_writable=False),
                AccountMeta(pubkey=self._amm_program_id, is_signer=False, is_writable=False),
            ],
            data=DISCRIMINATOR_COLLECT_COIN_CREATOR_FEE,
        )
