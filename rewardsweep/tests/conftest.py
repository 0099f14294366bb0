"""In-memory ledger and fee program fakes shared by the pipeline tests."""

from __future__ import annotations

import struct
from types import SimpleNamespace

import pytest
from solders.instruction import AccountMeta, Instruction  # type: ignore[import-untyped]
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.system_program import ID as SYSTEM_PROGRAM_ID  # type: ignore[import-untyped]
from spl.token.constants import TOKEN_PROGRAM_ID  # type: ignore[import-untyped]

from rewardsweep.distribution import RewardPoolClient
from rewardsweep.errors import LedgerError
from rewardsweep.state import TokenAccount

RENT_EXEMPT_ZERO_DATA = 890_880
TOKEN_ACCOUNT_RENT = 2_039_280
FAKE_FEE_PROGRAM_ID = Pubkey.from_string("6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P")
REWARD_POOL_PROGRAM_ID = Pubkey.from_string("4uQeVj5tqViQh7yWWGStvkEG1Zmhx6uasJtWCJziofM")

_CLOSE_ACCOUNT = 9
_SYSTEM_TRANSFER = 2


def account(lamports: int, data: bytes = b"") -> SimpleNamespace:
    return SimpleNamespace(lamports=lamports, data=data)


def token_account(mint: Pubkey, owner: Pubkey, amount: int) -> SimpleNamespace:
    return account(TOKEN_ACCOUNT_RENT, TokenAccount(mint, owner, amount).to_bytes())


def off_curve_owner(seed: int) -> Pubkey:
    addr, _ = Pubkey.find_program_address([b"owner", seed.to_bytes(4, "little")], REWARD_POOL_PROGRAM_ID)
    return addr


class FakeLedger:
    """Ledger double that applies the effects of the instructions it confirms.

    System transfers move lamports, SPL CloseAccount credits the owner with
    the account's lamports, and the fake fee program credits the creator with
    ``claim_lamports`` minus ``tx_fee``.
    """

    def __init__(self) -> None:
        self.balances: dict[Pubkey, int] = {}
        self.accounts: dict[Pubkey, SimpleNamespace] = {}
        self.largest: dict[Pubkey, list[Pubkey]] = {}
        self.rent: dict[int, int] = {0: RENT_EXEMPT_ZERO_DATA, 165: TOKEN_ACCOUNT_RENT}
        self.sent: list[tuple[list[Instruction], Pubkey]] = []
        self.claim_lamports = 0
        self.tx_fee = 0
        self.fail_programs: set[Pubkey] = set()
        self.multiple_account_calls = 0
        self.fail_reads: set[str] = set()

    # -- reads --

    def _read(self, method: str) -> None:
        if method in self.fail_reads:
            raise LedgerError(f"{method} failed: node is behind")

    def get_balance(self, pubkey: Pubkey) -> int:
        self._read("getBalance")
        return self.balances.get(pubkey, 0)

    def get_account(self, pubkey: Pubkey):
        return self.accounts.get(pubkey)

    def get_multiple_accounts(self, pubkeys):
        self._read("getMultipleAccounts")
        self.multiple_account_calls += 1
        return [self.accounts.get(p) for p in pubkeys]

    def get_largest_token_accounts(self, mint: Pubkey) -> list[Pubkey]:
        self._read("getTokenLargestAccounts")
        return list(self.largest.get(mint, []))

    def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        return self.rent[size]

    # -- writes --

    def send_and_confirm(self, instructions, payer: Keypair):
        instructions = list(instructions)
        for ix in instructions:
            if ix.program_id in self.fail_programs:
                raise LedgerError(f"transaction failed: custom program error in {ix.program_id}")
        self.sent.append((instructions, payer.pubkey()))
        fee_payer = payer.pubkey()
        self.balances[fee_payer] = self.balances.get(fee_payer, 0) - self.tx_fee
        for ix in instructions:
            self._apply(ix)
        return f"sig{len(self.sent)}"

    def _apply(self, ix: Instruction) -> None:
        data = bytes(ix.data)
        if ix.program_id == SYSTEM_PROGRAM_ID and struct.unpack_from("<I", data)[0] == _SYSTEM_TRANSFER:
            (lamports,) = struct.unpack_from("<Q", data, 4)
            src, dst = ix.accounts[0].pubkey, ix.accounts[1].pubkey
            self.balances[src] = self.balances.get(src, 0) - lamports
            self.balances[dst] = self.balances.get(dst, 0) + lamports
        elif ix.program_id == TOKEN_PROGRAM_ID and data[0] == _CLOSE_ACCOUNT:
            closed, dest = ix.accounts[0].pubkey, ix.accounts[1].pubkey
            acct = self.accounts.pop(closed)
            self.balances[dest] = self.balances.get(dest, 0) + acct.lamports
        elif ix.program_id == FAKE_FEE_PROGRAM_ID:
            creator = ix.accounts[0].pubkey
            self.balances[creator] = self.balances.get(creator, 0) + self.claim_lamports

    def sent_programs(self) -> list[list[Pubkey]]:
        return [[ix.program_id for ix in ixs] for ixs, _ in self.sent]


class FakeFeeProgram:
    def __init__(self, pending: int = 0, produces_instructions: bool = True) -> None:
        self.pending = pending
        self.produces_instructions = produces_instructions

    def get_creator_vault_balance_both_programs(self, creator: Pubkey) -> int:
        return self.pending

    def collect_creator_fee_instructions(self, creator: Pubkey) -> list[Instruction]:
        if not self.produces_instructions:
            return []
        return [
            Instruction(
                FAKE_FEE_PROGRAM_ID,
                b"collect",
                [AccountMeta(pubkey=creator, is_signer=True, is_writable=True)],
            )
        ]


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def developer() -> Keypair:
    return Keypair()


@pytest.fixture
def pool_owner() -> Keypair:
    return Keypair()


@pytest.fixture
def mint() -> Pubkey:
    return Keypair().pubkey()


@pytest.fixture
def reward_pool() -> RewardPoolClient:
    return RewardPoolClient(REWARD_POOL_PROGRAM_ID)
