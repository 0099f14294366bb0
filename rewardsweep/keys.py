"""Signing identity loading from inline secrets or solana-keygen files."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path

import base58  # type: ignore[import-untyped]
from solders.keypair import Keypair  # type: ignore[import-untyped]

from rewardsweep.errors import ConfigError

SECRET_KEY_SIZE = 64


def _keypair_from_secret(secret: bytes, source: str) -> Keypair:
    if len(secret) != SECRET_KEY_SIZE:
        raise ConfigError(
            f"{source}: secret key must be {SECRET_KEY_SIZE} bytes, got {len(secret)}"
        )
    try:
        return Keypair.from_bytes(secret)
    except ValueError as e:
        raise ConfigError(f"{source}: invalid secret key: {e}") from e


def parse_secret_key(raw: str, source: str = "secret key") -> Keypair:
    """Parse a JSON array, a comma-separated list of ints, or a base58 string."""
    raw = raw.strip()
    try:
        if raw.startswith("["):
            secret = bytes(int(x) for x in json.loads(raw))
        elif "," in raw:
            secret = bytes(int(x.strip()) for x in raw.split(","))
        else:
            secret = base58.b58decode(raw)
    except (ValueError, TypeError) as e:
        raise ConfigError(
            f"Failed to parse {source}. Ensure it is a JSON array, comma-separated numbers or base58."
        ) from e
    return _keypair_from_secret(secret, source)


def load_keypair_file(path: str | Path) -> Keypair:
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"keypair file not found: {path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        secret = bytes(int(x) for x in payload)
    except (ValueError, TypeError) as e:
        raise ConfigError(f"keypair file {path} is not a JSON array of bytes") from e
    return _keypair_from_secret(secret, str(path))


def load_keypair(
    environ: Mapping[str, str],
    secret_var: str,
    path_var: str,
    default_path: str,
) -> Keypair:
    """Inline secret in ``secret_var`` wins over the file named by ``path_var``."""
    inline = environ.get(secret_var)
    if inline:
        return parse_secret_key(inline, secret_var)
    path = Path(environ.get(path_var) or default_path).expanduser().resolve()
    if not path.is_file():
        raise ConfigError(
            f"Keypair not found. Set {secret_var} (private key) or {path_var} (path to keypair file)."
        )
    return load_keypair_file(path)
