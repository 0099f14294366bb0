import hashlib

from rewardsweep.errors import ConfigError

DISCRIMINATOR_SIZE = 8


def instruction_discriminator(name: str) -> bytes:
    """Anchor instruction discriminator: sha256("global:<name>")[:8]."""
    return hashlib.sha256(f"global:{name}".encode()).digest()[:DISCRIMINATOR_SIZE]


DISCRIMINATOR_DISTRIBUTE_REWARDS = instruction_discriminator("distribute_rewards")
DISCRIMINATOR_COLLECT_CREATOR_FEE = instruction_discriminator("collect_creator_fee")
DISCRIMINATOR_COLLECT_COIN_CREATOR_FEE = instruction_discriminator(
    "collect_coin_creator_fee"
)


def discriminator_from_idl(idl: dict, name: str) -> bytes:
    """Use the IDL's discriminator when present (Anchor >= 0.30), else derive it.

    Raises ConfigError when the IDL carries a malformed discriminator.
    """
    for ix in idl.get("instructions", []):
        if ix.get("name") not in (name, _camel(name)):
            continue
        disc = ix.get("discriminator")
        if disc is None:
            break
        try:
            got = bytes(disc)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid discriminator for {name}: {disc!r}") from e
        if len(got) != DISCRIMINATOR_SIZE:
            raise ConfigError(
                f"invalid discriminator for {name}: {len(got)} bytes, want {DISCRIMINATOR_SIZE}"
            )
        return got
    return instruction_discriminator(name)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.title() for p in rest)
