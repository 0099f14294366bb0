"""Environment-driven settings for a collection run.

Everything here is validated up front so a misconfigured deployment fails
before touching the ledger.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from dotenv import load_dotenv
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from rewardsweep.amounts import sol_to_lamports
from rewardsweep.config import (
    DEFAULT_COMMITMENT,
    DEFAULT_DEVELOPER_KEYPAIR_PATH,
    DEFAULT_FEE_BUFFER_LAMPORTS,
    DEFAULT_HOLDER_COUNT,
    DEFAULT_IDL_PATH,
    DEFAULT_POOL_OWNER_KEYPAIR_PATH,
)
from rewardsweep.discriminator import discriminator_from_idl
from rewardsweep.errors import ConfigError
from rewardsweep.idl import load_idl, program_id_from_idl
from rewardsweep.keys import load_keypair
from rewardsweep.pda import derive_vault_pda

RPC_URL_VARS = ("SOLANA_RPC_URL", "SOLANA_MAINNET_RPC_URL", "SOLANA_DEVNET_RPC_URL")
COMMITMENTS = ("processed", "confirmed", "finalized")


@dataclass(frozen=True)
class Settings:
    rpc_url: str
    commitment: str
    token_mint: Pubkey
    developer: Keypair
    pool_owner: Keypair
    fee_buffer_lamports: int
    reward_threshold_sol: Decimal
    threshold_lamports: int
    idl: dict
    program_id: Pubkey
    distribute_discriminator: bytes
    vault_address: Pubkey
    holder_count: int


def _pubkey(value: str, name: str) -> Pubkey:
    try:
        return Pubkey.from_string(value.strip())
    except ValueError as e:
        raise ConfigError(f"{name} is not a valid address: {value!r}") from e


def _int(environ: Mapping[str, str], name: str, default: int, minimum: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw.strip())
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    if environ is None:
        load_dotenv()
        environ = os.environ

    rpc_url = next((environ[v] for v in RPC_URL_VARS if environ.get(v)), None)
    if not rpc_url:
        raise ConfigError(
            "Set SOLANA_RPC_URL (or SOLANA_MAINNET_RPC_URL / SOLANA_DEVNET_RPC_URL)."
        )

    commitment = environ.get("RPC_COMMITMENT", DEFAULT_COMMITMENT).strip().lower()
    if commitment not in COMMITMENTS:
        raise ConfigError(f"RPC_COMMITMENT must be one of {', '.join(COMMITMENTS)}")

    mint_raw = environ.get("TOKEN_MINT")
    if not mint_raw:
        raise ConfigError("Set TOKEN_MINT to the token mint address.")
    token_mint = _pubkey(mint_raw, "TOKEN_MINT")

    fee_buffer = _int(
        environ, "CREATOR_TRANSFER_FEE_BUFFER_LAMPORTS", DEFAULT_FEE_BUFFER_LAMPORTS, 0
    )
    holder_count = _int(environ, "HOLDER_COUNT", DEFAULT_HOLDER_COUNT, 1)

    threshold_raw = environ.get("REWARD_THRESHOLD_SOL", "0").strip() or "0"
    threshold_lamports = sol_to_lamports(threshold_raw)

    developer = load_keypair(
        environ,
        "PUMPFUN_DEVELOPER_PRIVATE_KEY",
        "PUMPFUN_DEVELOPER_KEYPAIR",
        DEFAULT_DEVELOPER_KEYPAIR_PATH,
    )
    pool_owner = load_keypair(
        environ,
        "POOL_OWNER_PRIVATE_KEY",
        "POOL_OWNER_KEYPAIR",
        DEFAULT_POOL_OWNER_KEYPAIR_PATH,
    )

    idl = load_idl(environ, DEFAULT_IDL_PATH)
    program_id = program_id_from_idl(idl)
    distribute_discriminator = discriminator_from_idl(idl, "distribute_rewards")

    vault_raw = environ.get("VAULT_ADDRESS")
    if vault_raw:
        vault_address = _pubkey(vault_raw, "VAULT_ADDRESS")
    else:
        vault_address, _ = derive_vault_pda(program_id)

    return Settings(
        rpc_url=rpc_url,
        commitment=commitment,
        token_mint=token_mint,
        developer=developer,
        pool_owner=pool_owner,
        fee_buffer_lamports=fee_buffer,
        reward_threshold_sol=Decimal(threshold_raw),
        threshold_lamports=threshold_lamports,
        idl=idl,
        program_id=program_id,
        distribute_discriminator=distribute_discriminator,
        vault_address=vault_address,
        holder_count=holder_count,
    )
