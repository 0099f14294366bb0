from rewardsweep.amounts import checked_u64, equal_share, format_sol, forward_amount
from rewardsweep.config import (
    LAMPORTS_PER_SOL,
    PUMP_AMM_PROGRAM_ID,
    PUMP_PROGRAM_ID,
    SOLANA_RPC_URLS,
)
from rewardsweep.distribution import DistributionPlan, RewardPoolClient, plan_distribution
from rewardsweep.errors import (
    AccountDecodeError,
    AmountOverflowError,
    ConfigError,
    LedgerError,
    RewardSweepError,
)
from rewardsweep.fees import PumpFeeClient
from rewardsweep.holders import Holder, aggregate_holders, fetch_top_holders
from rewardsweep.ledger import Ledger
from rewardsweep.pda import (
    derive_pool_pda,
    derive_vault_pda,
    is_program_derived,
)
from rewardsweep.pipeline import (
    RewardPipeline,
    RunContext,
    RunReport,
    SkipReason,
    Stage,
    StageOutcome,
    Status,
)
from rewardsweep.rpc import new_rpc_client
from rewardsweep.settings import Settings, load_settings
from rewardsweep.state import TokenAccount

__all__ = [
    "AccountDecodeError",
    "AmountOverflowError",
    "ConfigError",
    "DistributionPlan",
    "Holder",
    "LAMPORTS_PER_SOL",
    "Ledger",
    "LedgerError",
    "PUMP_AMM_PROGRAM_ID",
    "PUMP_PROGRAM_ID",
    "PumpFeeClient",
    "RewardPipeline",
    "RewardPoolClient",
    "RewardSweepError",
    "RunContext",
    "RunReport",
    "SOLANA_RPC_URLS",
    "Settings",
    "SkipReason",
    "Stage",
    "StageOutcome",
    "Status",
    "TokenAccount",
    "aggregate_holders",
    "checked_u64",
    "derive_pool_pda",
    "derive_vault_pda",
    "equal_share",
    "fetch_top_holders",
    "format_sol",
    "forward_amount",
    "is_program_derived",
    "load_settings",
    "new_rpc_client",
    "plan_distribution",
]
