"""Program-derived address helpers."""

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

SEED_VAULT = b"vault"
SEED_POOL = b"pool"
SEED_CREATOR_VAULT = b"creator-vault"
SEED_COIN_CREATOR_VAULT_AUTHORITY = b"creator_vault"
SEED_EVENT_AUTHORITY = b"__event_authority"


def derive_vault_pda(program_id: Pubkey) -> tuple[Pubkey, int]:
    return Pubkey.find_program_address([SEED_VAULT], program_id)


def derive_pool_pda(program_id: Pubkey) -> tuple[Pubkey, int]:
    return Pubkey.find_program_address([SEED_POOL], program_id)


def derive_creator_vault_pda(
    creator: Pubkey, pump_program_id: Pubkey
) -> tuple[Pubkey, int]:
    return Pubkey.find_program_address(
        [SEED_CREATOR_VAULT, bytes(creator)], pump_program_id
    )


def derive_coin_creator_vault_authority_pda(
    creator: Pubkey, amm_program_id: Pubkey
) -> tuple[Pubkey, int]:
    return Pubkey.find_program_address(
        [SEED_COIN_CREATOR_VAULT_AUTHORITY, bytes(creator)], amm_program_id
    )


def derive_event_authority_pda(program_id: Pubkey) -> tuple[Pubkey, int]:
    return Pubkey.find_program_address([SEED_EVENT_AUTHORITY], program_id)


def is_program_derived(pubkey: Pubkey) -> bool:
    """True for off-curve addresses, which no private key can sign for."""
    return not pubkey.is_on_curve()
