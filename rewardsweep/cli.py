"""Command-line entry point for a scheduled collection run.

Exit status is 0 when the run completes or stops on a "nothing to do"
condition, 1 on a configuration error or a fatal ledger error.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from dotenv import load_dotenv
from solana.rpc.commitment import Commitment  # type: ignore[import-untyped]

from rewardsweep.distribution import RewardPoolClient
from rewardsweep.errors import ConfigError
from rewardsweep.fees import PumpFeeClient
from rewardsweep.ledger import Ledger
from rewardsweep.pipeline import RewardPipeline, RunReport, Status
from rewardsweep.rpc import new_rpc_client
from rewardsweep.settings import Settings, load_settings

logger = logging.getLogger("rewardsweep")


def build_pipeline(settings: Settings, holder_count: int | None = None) -> RewardPipeline:
    rpc = new_rpc_client(settings.rpc_url, settings.commitment)
    ledger = Ledger(rpc, Commitment(settings.commitment))
    return RewardPipeline(
        ledger=ledger,
        fees=PumpFeeClient(ledger),
        reward_pool=RewardPoolClient(settings.program_id, settings.distribute_discriminator),
        developer=settings.developer,
        pool_owner=settings.pool_owner,
        token_mint=settings.token_mint,
        vault=settings.vault_address,
        fee_buffer_lamports=settings.fee_buffer_lamports,
        threshold_lamports=settings.threshold_lamports,
        holder_count=holder_count or settings.holder_count,
    )


def _report(report: RunReport) -> None:
    final = report.final
    if final.status is Status.FATAL:
        print(f"Reward collection failed: {final.error}", file=sys.stderr)
    elif final.status is Status.SKIP:
        logger.info("Run finished early at %s: %s", final.stage.value, final.reason.value)
    else:
        logger.info("Pump.fun rewards collected, forwarded, and distributed.")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="rewardsweep",
        description="Claim Pump.fun creator fees, fund the reward vault and split it among top holders",
    )
    parser.add_argument(
        "--holders",
        type=int,
        default=None,
        help="Number of holders to pay (default: HOLDER_COUNT or 20)",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Load environment variables from this file before reading settings",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the run summary as JSON on stdout",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.holders is not None and args.holders < 1:
        parser.error("--holders must be >= 1")

    try:
        if args.env_file:
            load_dotenv(args.env_file)
        settings = load_settings()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    logger.info("RPC endpoint: %s", settings.rpc_url)
    logger.info("Developer wallet: %s", settings.developer.pubkey())
    logger.info("Pool owner wallet: %s", settings.pool_owner.pubkey())
    logger.info("Vault address: %s", settings.vault_address)
    logger.info("Reward pool program: %s", settings.program_id)
    logger.info(
        "Reward threshold: %s SOL (%d lamports)",
        settings.reward_threshold_sol,
        settings.threshold_lamports,
    )

    report = build_pipeline(settings, args.holders).run()
    _report(report)
    if args.json:
        print(json.dumps(report.summary(), indent=2))
    return report.exit_code
