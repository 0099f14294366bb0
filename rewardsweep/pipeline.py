"""Collection and distribution pipeline.

A run walks a fixed sequence of stages::

    READ_FEES -> CLAIM -> NORMALIZE -> FORWARD -> AGGREGATE_HOLDERS -> DISTRIBUTE -> DONE

Each stage returns a :class:`StageOutcome`. ``PROCEED`` moves to the next
stage, ``SKIP`` ends the run successfully ("nothing to do"), ``FATAL`` ends
it with an error. Every amount is computed from balances re-read from the
ledger; nothing is carried over between runs.

There is no lease or lock across runs. Two overlapping runs can both read the
same pending balance and both try to claim; the scheduler must not overlap
runs.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from solders.instruction import Instruction  # type: ignore[import-untyped]
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.system_program import TransferParams, transfer  # type: ignore[import-untyped]
from spl.token.constants import TOKEN_PROGRAM_ID, WRAPPED_SOL_MINT  # type: ignore[import-untyped]
from spl.token.instructions import (  # type: ignore[import-untyped]
    CloseAccountParams,
    close_account,
    get_associated_token_address,
)

from rewardsweep.amounts import checked_u64, format_sol, forward_amount
from rewardsweep.config import DEFAULT_FEE_BUFFER_LAMPORTS, DEFAULT_HOLDER_COUNT
from rewardsweep.distribution import DistributionPlan, RewardPoolClient, plan_distribution
from rewardsweep.holders import Holder, fetch_top_holders
from rewardsweep.ledger import Ledger
from rewardsweep.state import TokenAccount

logger = logging.getLogger(__name__)


class Stage(enum.Enum):
    READ_FEES = "read_fees"
    CLAIM = "claim"
    NORMALIZE = "normalize"
    FORWARD = "forward"
    AGGREGATE_HOLDERS = "aggregate_holders"
    DISTRIBUTE = "distribute"
    DONE = "done"


class Status(enum.Enum):
    PROCEED = "proceed"
    SKIP = "skip"
    FATAL = "fatal"


class SkipReason(enum.Enum):
    NO_PENDING_FEES = "no pending rewards"
    BELOW_THRESHOLD = "pending rewards below threshold"
    NO_CLAIM_INSTRUCTIONS = "no collection instructions generated"
    NO_NET_GAIN = "no net increase in balance after collection"
    INSUFFICIENT_BALANCE = "balance too low after claim to keep fee buffer"
    NOTHING_TO_FORWARD = "collected amount too small to transfer"
    NO_HOLDERS = "no eligible holders"
    VAULT_AT_RENT_FLOOR = "vault balance at or below rent-exempt floor"
    SHARE_BELOW_ONE_LAMPORT = "per-holder share below one lamport"


@dataclass(frozen=True)
class StageOutcome:
    stage: Stage
    status: Status
    reason: SkipReason | None = None
    error: Exception | None = None
    signature: Any = None

    @classmethod
    def proceed(cls, stage: Stage, signature: Any = None) -> StageOutcome:
        return cls(stage, Status.PROCEED, signature=signature)

    @classmethod
    def skip(cls, stage: Stage, reason: SkipReason) -> StageOutcome:
        return cls(stage, Status.SKIP, reason=reason)

    @classmethod
    def fatal(cls, stage: Stage, error: Exception) -> StageOutcome:
        return cls(stage, Status.FATAL, error=error)


@dataclass
class RunContext:
    """Ledger observations made during one run."""

    pending: int | None = None
    balance_before: int | None = None
    balance_after: int | None = None
    collected: int | None = None
    forwarded: int | None = None
    holders: list[Holder] = field(default_factory=list)
    plan: DistributionPlan | None = None


@dataclass
class RunReport:
    outcomes: list[StageOutcome]
    context: RunContext

    @property
    def final(self) -> StageOutcome:
        return self.outcomes[-1]

    @property
    def completed(self) -> bool:
        return self.final.stage is Stage.DONE

    @property
    def exit_code(self) -> int:
        return 1 if self.final.status is Status.FATAL else 0

    @property
    def signatures(self) -> dict[str, str]:
        return {
            o.stage.value: str(o.signature)
            for o in self.outcomes
            if o.signature is not None
        }

    def summary(self) -> dict[str, Any]:
        ctx = self.context
        plan = ctx.plan
        return {
            "status": self.final.status.value,
            "stage": self.final.stage.value,
            "reason": self.final.reason.value if self.final.reason else None,
            "error": str(self.final.error) if self.final.error else None,
            "pending_lamports": ctx.pending,
            "collected_lamports": ctx.collected,
            "forwarded_lamports": ctx.forwarded,
            "holders": len(ctx.holders),
            "distributable_lamports": plan.distributable if plan else None,
            "per_holder_share_lamports": plan.per_holder_share if plan else None,
            "retained_lamports": plan.remainder if plan else None,
            "signatures": self.signatures,
        }


class FeeProgram(Protocol):
    def get_creator_vault_balance_both_programs(self, creator: Pubkey) -> int: ...

    def collect_creator_fee_instructions(self, creator: Pubkey) -> list[Instruction]: ...


class RewardPipeline:
    """Claims creator fees, forwards them to the vault, and splits the vault."""

    def __init__(
        self,
        ledger: Ledger,
        fees: FeeProgram,
        reward_pool: RewardPoolClient,
        developer: Keypair,
        pool_owner: Keypair,
        token_mint: Pubkey,
        vault: Pubkey,
        fee_buffer_lamports: int = DEFAULT_FEE_BUFFER_LAMPORTS,
        threshold_lamports: int = 0,
        holder_count: int = DEFAULT_HOLDER_COUNT,
    ) -> None:
        if fee_buffer_lamports < 0:
            raise ValueError("fee buffer must be non-negative")
        if threshold_lamports < 0:
            raise ValueError("reward threshold must be non-negative")
        if holder_count < 1:
            raise ValueError("holder count must be >= 1")
        self._ledger = ledger
        self._fees = fees
        self._reward_pool = reward_pool
        self._developer = developer
        self._pool_owner = pool_owner
        self._token_mint = token_mint
        self._vault = vault
        self._fee_buffer = fee_buffer_lamports
        self._threshold = threshold_lamports
        self._holder_count = holder_count

        if vault != reward_pool.vault_address:
            logger.warning(
                "vault %s differs from reward pool vault PDA %s; distribution pays from the PDA",
                vault,
                reward_pool.vault_address,
            )

    @property
    def developer(self) -> Pubkey:
        return self._developer.pubkey()

    def run(self) -> RunReport:
        ctx = RunContext()
        outcomes: list[StageOutcome] = []
        for stage, step in self._steps():
            try:
                outcome = step(ctx)
            except Exception as e:
                logger.error("stage %s failed: %s", stage.value, e)
                outcome = StageOutcome.fatal(stage, e)
            outcomes.append(outcome)
            if outcome.status is not Status.PROCEED:
                return RunReport(outcomes, ctx)
        outcomes.append(StageOutcome.proceed(Stage.DONE))
        return RunReport(outcomes, ctx)

    def _steps(self) -> list[tuple[Stage, Callable[[RunContext], StageOutcome]]]:
        return [
            (Stage.READ_FEES, self.read_fees),
            (Stage.CLAIM, self.claim),
            (Stage.NORMALIZE, self.normalize),
            (Stage.FORWARD, self.forward),
            (Stage.AGGREGATE_HOLDERS, self.aggregate_holders),
            (Stage.DISTRIBUTE, self.distribute),
        ]

    # -- Stages --

    def read_fees(self, ctx: RunContext) -> StageOutcome:
        pending = self._fees.get_creator_vault_balance_both_programs(self.developer)
        ctx.pending = pending
        if pending == 0:
            logger.info("No pending creator rewards to claim.")
            return StageOutcome.skip(Stage.READ_FEES, SkipReason.NO_PENDING_FEES)
        if pending < self._threshold:
            logger.info(
                "Pending rewards %s SOL below threshold %s SOL. Skipping claim.",
                format_sol(pending),
                format_sol(self._threshold),
            )
            return StageOutcome.skip(Stage.READ_FEES, SkipReason.BELOW_THRESHOLD)
        logger.info(
            "Pending rewards: %s SOL (%d lamports) across Pump and PumpSwap vaults",
            format_sol(pending),
            pending,
        )
        return StageOutcome.proceed(Stage.READ_FEES)

    def claim(self, ctx: RunContext) -> StageOutcome:
        ctx.balance_before = self._ledger.get_balance(self.developer)
        logger.info("Developer balance before collection: %s SOL", format_sol(ctx.balance_before))

        instructions = self._fees.collect_creator_fee_instructions(self.developer)
        if not instructions:
            logger.info("No collection instructions generated.")
            return StageOutcome.skip(Stage.CLAIM, SkipReason.NO_CLAIM_INSTRUCTIONS)

        sig = self._ledger.send_and_confirm(instructions, self._developer)
        logger.info("Fees collected. Signature: %s", sig)
        return StageOutcome.proceed(Stage.CLAIM, sig)

    def normalize(self, ctx: RunContext) -> StageOutcome:
        wsol_ata = get_associated_token_address(self.developer, WRAPPED_SOL_MINT)
        info = self._ledger.get_account(wsol_ata)
        if info is None:
            logger.info("No wSOL account found (rewards may already be in native SOL).")
            return StageOutcome.proceed(Stage.NORMALIZE)

        amount = TokenAccount.from_bytes(info.data).amount
        if amount == 0:
            logger.info("wSOL account exists but has 0 balance.")
            return StageOutcome.proceed(Stage.NORMALIZE)

        logger.info("Found %s wSOL. Unwrapping...", format_sol(amount))
        ix = close_account(
            CloseAccountParams(
                program_id=TOKEN_PROGRAM_ID,
                account=wsol_ata,
                dest=self.developer,
                owner=self.developer,
            )
        )
        sig = self._ledger.send_and_confirm([ix], self._developer)
        logger.info("wSOL unwrapped. Signature: %s", sig)
        return StageOutcome.proceed(Stage.NORMALIZE, sig)

    def forward(self, ctx: RunContext) -> StageOutcome:
        if ctx.balance_before is None:
            raise ValueError("forward needs the balance sampled before the claim")

        after = self._ledger.get_balance(self.developer)
        ctx.balance_after = after
        logger.info("Developer balance after collection: %s SOL", format_sol(after))

        collected = after - ctx.balance_before
        if collected <= 0:
            ctx.collected = 0
            logger.warning("No net increase in balance after collection (may have only covered fees).")
            return StageOutcome.skip(Stage.FORWARD, SkipReason.NO_NET_GAIN)
        ctx.collected = collected
        logger.info("Collected rewards: %s SOL (%d lamports)", format_sol(collected), collected)

        if after <= self._fee_buffer:
            logger.warning("Developer balance is too low after claim; skipping transfer to vault.")
            return StageOutcome.skip(Stage.FORWARD, SkipReason.INSUFFICIENT_BALANCE)

        to_send = forward_amount(collected, self._fee_buffer)
        if to_send <= 0:
            logger.warning("Collected amount is too small to transfer after reserving fee buffer.")
            return StageOutcome.skip(Stage.FORWARD, SkipReason.NOTHING_TO_FORWARD)

        lamports = checked_u64(to_send, "transfer amount")
        logger.info("Transferring %s SOL (%d lamports) to vault %s", format_sol(lamports), lamports, self._vault)
        ix = transfer(
            TransferParams(from_pubkey=self.developer, to_pubkey=self._vault, lamports=lamports)
        )
        sig = self._ledger.send_and_confirm([ix], self._developer)
        ctx.forwarded = lamports
        logger.info("Vault funded. Signature: %s", sig)
        return StageOutcome.proceed(Stage.FORWARD, sig)

    def aggregate_holders(self, ctx: RunContext) -> StageOutcome:
        holders = fetch_top_holders(self._ledger, self._token_mint, self._holder_count)
        ctx.holders = holders
        logger.info("Retrieved %d unique holders (on-curve owners only).", len(holders))
        for i, h in enumerate(holders, start=1):
            logger.debug("  %d. %s: %d tokens", i, h.address, h.balance)
        if not holders:
            logger.warning("No eligible holders found; skipping distribution.")
            return StageOutcome.skip(Stage.AGGREGATE_HOLDERS, SkipReason.NO_HOLDERS)
        return StageOutcome.proceed(Stage.AGGREGATE_HOLDERS)

    def distribute(self, ctx: RunContext) -> StageOutcome:
        if not ctx.holders:
            return StageOutcome.skip(Stage.DISTRIBUTE, SkipReason.NO_HOLDERS)

        rent_exempt = self._ledger.get_minimum_balance_for_rent_exemption(0)
        vault_balance = self._ledger.get_balance(self._vault)
        if vault_balance <= rent_exempt:
            logger.info(
                "Vault balance %s SOL is at/below rent buffer %s SOL. Skipping distribution.",
                format_sol(vault_balance),
                format_sol(rent_exempt),
            )
            return StageOutcome.skip(Stage.DISTRIBUTE, SkipReason.VAULT_AT_RENT_FLOOR)

        plan = plan_distribution(vault_balance, rent_exempt, ctx.holders)
        ctx.plan = plan
        if plan.per_holder_share == 0:
            logger.warning(
                "Distributable rewards per holder are below 1 lamport after retaining rent; skipping distribution."
            )
            return StageOutcome.skip(Stage.DISTRIBUTE, SkipReason.SHARE_BELOW_ONE_LAMPORT)

        logger.info(
            "Distributable rewards: %s SOL (retaining %s SOL for rent). Each of %d holders receives %s SOL.",
            format_sol(plan.distributable),
            format_sol(rent_exempt),
            len(plan.holders),
            format_sol(plan.per_holder_share),
        )
        ix = self._reward_pool.distribute_rewards_instruction(
            self._pool_owner.pubkey(), plan.holders
        )
        sig = self._ledger.send_and_confirm([ix], self._pool_owner)
        logger.info("Distribution submitted. Signature: %s", sig)
        return StageOutcome.proceed(Stage.DISTRIBUTE, sig)
