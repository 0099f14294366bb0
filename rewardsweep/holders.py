"""Holder aggregation over the mint's largest token accounts."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from rewardsweep.errors import AccountDecodeError
from rewardsweep.ledger import Ledger
from rewardsweep.pda import is_program_derived
from rewardsweep.state import TokenAccount

logger = logging.getLogger(__name__)

# Owners with several token accounts collapse into one holder, so read more
# accounts than holders requested.
OVERFETCH_FACTOR = 2


@dataclass(frozen=True)
class Holder:
    address: Pubkey  # owner wallet, never the token account
    balance: int  # raw token units summed across the owner's accounts


def aggregate_holders(
    snapshots: Iterable[tuple[Pubkey, TokenAccount]], limit: int
) -> list[Holder]:
    """Collapse token accounts into at most ``limit`` on-curve owners.

    Order is first-encountered, i.e. the ledger's largest-account ranking;
    the payout is an equal split so no re-sort is needed.
    """
    balances: dict[Pubkey, int] = {}
    for token_account, account in snapshots:
        if is_program_derived(account.owner):
            logger.info(
                "skipping off-curve owner %s for token account %s",
                account.owner,
                token_account,
            )
            continue
        if account.amount == 0:
            continue
        balances[account.owner] = balances.get(account.owner, 0) + account.amount

    holders = [Holder(owner, bal) for owner, bal in balances.items() if bal > 0]
    return holders[:limit]


def fetch_top_holders(ledger: Ledger, mint: Pubkey, limit: int) -> list[Holder]:
    if limit < 1:
        raise ValueError(f"holder limit must be >= 1, got {limit}")

    largest = ledger.get_largest_token_accounts(mint)
    if not largest:
        return []

    token_accounts = largest[: min(len(largest), limit * OVERFETCH_FACTOR)]
    infos = ledger.get_multiple_accounts(token_accounts)

    snapshots: list[tuple[Pubkey, TokenAccount]] = []
    for addr, info in zip(token_accounts, infos):
        if info is None:
            continue
        try:
            snapshots.append((addr, TokenAccount.from_bytes(info.data)))
        except AccountDecodeError as e:
            logger.warning("unable to decode token account %s: %s", addr, e)

    return aggregate_holders(snapshots, limit)
