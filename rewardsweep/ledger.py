"""Ledger RPC access used by every pipeline stage.

All reads go to the RPC node at the configured commitment and are never
cached; each caller re-reads the balance it needs. Submissions block until
the transaction is confirmed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

import httpx
from solana.exceptions import SolanaRpcException  # type: ignore[import-untyped]
from solana.rpc.commitment import Commitment, Confirmed  # type: ignore[import-untyped]
from solana.rpc.core import (  # type: ignore[import-untyped]
    RPCException,
    TransactionExpiredBlockheightExceededError,
    UnconfirmedTxError,
)
from solana.rpc.types import TxOpts  # type: ignore[import-untyped]
from solders.instruction import Instruction  # type: ignore[import-untyped]
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.message import Message  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.signature import Signature  # type: ignore[import-untyped]
from solders.transaction import Transaction  # type: ignore[import-untyped]

from rewardsweep.errors import LedgerError

logger = logging.getLogger(__name__)

_RPC_ERRORS = (
    SolanaRpcException,
    RPCException,
    UnconfirmedTxError,
    TransactionExpiredBlockheightExceededError,
    httpx.HTTPError,
)


class SolanaClient(Protocol):
    def get_balance(self, pubkey: Pubkey, commitment: Commitment | None = None) -> Any: ...

    def get_account_info(
        self, pubkey: Pubkey, commitment: Commitment | None = None, encoding: str = "base64"
    ) -> Any: ...

    def get_multiple_accounts(
        self, pubkeys: list[Pubkey], commitment: Commitment | None = None, encoding: str = "base64"
    ) -> Any: ...

    def get_token_largest_accounts(self, pubkey: Pubkey, commitment: Commitment | None = None) -> Any: ...

    def get_minimum_balance_for_rent_exemption(
        self, usize: int, commitment: Commitment | None = None
    ) -> Any: ...

    def get_latest_blockhash(self, commitment: Commitment | None = None) -> Any: ...

    def send_raw_transaction(self, txn: bytes, opts: TxOpts | None = None) -> Any: ...

    def confirm_transaction(
        self,
        tx_sig: Signature,
        commitment: Commitment | None = None,
        sleep_seconds: float = 0.5,
        last_valid_block_height: int | None = None,
    ) -> Any: ...


class Ledger:
    """Thin, error-normalizing wrapper over a solana-py RPC client."""

    def __init__(self, rpc: SolanaClient, commitment: Commitment = Confirmed) -> None:
        self._rpc = rpc
        self._commitment = commitment

    @property
    def commitment(self) -> Commitment:
        return self._commitment

    def get_balance(self, pubkey: Pubkey) -> int:
        try:
            return int(self._rpc.get_balance(pubkey, self._commitment).value)
        except _RPC_ERRORS as e:
            raise LedgerError(f"getBalance failed for {pubkey}: {e}") from e

    def get_account(self, pubkey: Pubkey) -> Any | None:
        try:
            return self._rpc.get_account_info(pubkey, self._commitment, encoding="base64").value
        except _RPC_ERRORS as e:
            raise LedgerError(f"getAccountInfo failed for {pubkey}: {e}") from e

    def get_multiple_accounts(self, pubkeys: Sequence[Pubkey]) -> list[Any | None]:
        """Fetch several accounts in one batched request, preserving order."""
        try:
            resp = self._rpc.get_multiple_accounts(
                list(pubkeys), self._commitment, encoding="base64"
            )
        except _RPC_ERRORS as e:
            raise LedgerError(f"getMultipleAccounts failed: {e}") from e
        accounts = list(resp.value)
        if len(accounts) != len(pubkeys):
            raise LedgerError(
                f"getMultipleAccounts returned {len(accounts)} entries for {len(pubkeys)} keys"
            )
        return accounts

    def get_largest_token_accounts(self, mint: Pubkey) -> list[Pubkey]:
        """Token account addresses for ``mint``, ranked by balance, largest first."""
        try:
            resp = self._rpc.get_token_largest_accounts(mint, self._commitment)
        except _RPC_ERRORS as e:
            raise LedgerError(f"getTokenLargestAccounts failed for {mint}: {e}") from e
        return [item.address for item in (resp.value or [])]

    def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        try:
            resp = self._rpc.get_minimum_balance_for_rent_exemption(size, self._commitment)
        except _RPC_ERRORS as e:
            raise LedgerError(f"getMinimumBalanceForRentExemption failed: {e}") from e
        return int(resp.value)

    def send_and_confirm(
        self,
        instructions: Sequence[Instruction],
        payer: Keypair,
    ) -> Signature:
        """Sign with ``payer`` as fee payer and sole signer, submit and wait.

        Raises LedgerError when submission fails, the transaction errors on
        chain, or confirmation does not arrive before the blockhash expires.
        """
        if not instructions:
            raise ValueError("no instructions to send")
        try:
            latest = self._rpc.get_latest_blockhash(self._commitment).value
            blockhash = latest.blockhash
            msg = Message.new_with_blockhash(list(instructions), payer.pubkey(), blockhash)
            tx = Transaction([payer], msg, blockhash)
            sig = self._rpc.send_raw_transaction(
                bytes(tx), opts=TxOpts(preflight_commitment=self._commitment)
            ).value
            logger.debug("submitted %s, waiting for %s", sig, self._commitment)
            statuses = self._rpc.confirm_transaction(
                sig,
                self._commitment,
                last_valid_block_height=latest.last_valid_block_height,
            ).value
        except _RPC_ERRORS as e:
            raise LedgerError(f"transaction submission failed: {e}") from e

        status = statuses[0] if statuses else None
        if status is None:
            raise LedgerError(f"transaction {sig} was not confirmed")
        if status.err is not None:
            raise LedgerError(f"transaction {sig} failed: {status.err}")
        return sig
