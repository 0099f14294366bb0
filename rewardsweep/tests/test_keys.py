"""Secret key parsing in the formats operators paste into .env files."""

import json

import base58  # type: ignore[import-untyped]
import pytest
from solders.keypair import Keypair  # type: ignore[import-untyped]

from rewardsweep.errors import ConfigError
from rewardsweep.keys import load_keypair_file, parse_secret_key


@pytest.fixture
def kp():
    return Keypair()


def test_json_array(kp):
    assert parse_secret_key(json.dumps(list(bytes(kp)))).pubkey() == kp.pubkey()


def test_comma_separated(kp):
    raw = ", ".join(str(b) for b in bytes(kp))
    assert parse_secret_key(raw).pubkey() == kp.pubkey()


def test_base58(kp):
    raw = base58.b58encode(bytes(kp)).decode()
    assert parse_secret_key(f"  {raw}\n").pubkey() == kp.pubkey()


@pytest.mark.parametrize("raw", ["[1, 2, 3]", "0OIl", "[1, \"x\"]", "1,2,300"])
def test_rejects_malformed(raw):
    with pytest.raises(ConfigError):
        parse_secret_key(raw, "POOL_OWNER_PRIVATE_KEY")


def test_keypair_file(kp, tmp_path):
    path = tmp_path / "id.json"
    path.write_text(json.dumps(list(bytes(kp))))
    assert load_keypair_file(path).pubkey() == kp.pubkey()


def test_keypair_file_not_json(tmp_path):
    path = tmp_path / "id.json"
    path.write_text("not json")
    with pytest.raises(ConfigError, match="JSON array"):
        load_keypair_file(path)
