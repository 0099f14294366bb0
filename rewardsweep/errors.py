"""Exceptions raised by the reward sweep pipeline.

Skip conditions ("nothing to do") are not exceptions; they are reported as
stage outcomes by :mod:`rewardsweep.pipeline`.
"""


class RewardSweepError(Exception):
    """Base class for all reward sweep errors."""


class ConfigError(RewardSweepError, ValueError):
    """Missing or malformed configuration. Raised before any ledger call."""


class AccountDecodeError(RewardSweepError, ValueError):
    """On-ledger account bytes do not match the expected layout."""


class LedgerError(RewardSweepError, RuntimeError):
    """RPC request or transaction confirmation failed."""


class AmountOverflowError(RewardSweepError, OverflowError):
    """An amount does not fit the fixed-width type required for submission."""
