"""Reward pool program descriptor (Anchor IDL) loading."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from rewardsweep.errors import ConfigError


def load_idl(environ: Mapping[str, str], default_path: str | Path) -> dict:
    """Read the IDL from ``REWARD_POOL_IDL`` (inline JSON), else from a file."""
    inline = environ.get("REWARD_POOL_IDL")
    if inline:
        try:
            return json.loads(inline)
        except json.JSONDecodeError as e:
            raise ConfigError(
                "Failed to parse REWARD_POOL_IDL environment variable. Ensure it is valid JSON."
            ) from e

    path = Path(environ.get("REWARD_POOL_IDL_PATH") or default_path)
    if not path.is_file():
        raise ConfigError(
            f"Reward pool IDL not found. Set REWARD_POOL_IDL or ensure {path} exists."
        )
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Reward pool IDL at {path} is not valid JSON: {e}") from e


def program_id_from_idl(idl: Mapping) -> Pubkey:
    # Anchor >= 0.30 puts the address at the top level; older IDLs use metadata.
    address = idl.get("address") or (idl.get("metadata") or {}).get("address")
    if not address:
        raise ConfigError("Program address missing from reward_pool IDL.")
    try:
        return Pubkey.from_string(address)
    except ValueError as e:
        raise ConfigError(f"Invalid program address in reward_pool IDL: {address}") from e
