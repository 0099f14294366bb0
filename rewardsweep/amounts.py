"""Lamport arithmetic shared by the pipeline stages.

Amounts are plain Python ints (arbitrary precision) everywhere inside the
pipeline. Narrowing to the ledger's fixed-width u64 happens only at the
submission boundary via :func:`checked_u64`.
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal, InvalidOperation

from rewardsweep.config import LAMPORTS_PER_SOL
from rewardsweep.errors import AmountOverflowError, ConfigError

U64_MAX = 2**64 - 1


def format_sol(lamports: int) -> str:
    """Display-only conversion; never feed the result back into a submission."""
    return f"{lamports / LAMPORTS_PER_SOL:.9f}"


def sol_to_lamports(value: str | Decimal) -> int:
    try:
        sol = Decimal(value)
    except InvalidOperation as e:
        raise ConfigError(f"not a decimal SOL amount: {value!r}") from e
    if not sol.is_finite() or sol < 0:
        raise ConfigError(f"SOL amount must be a non-negative number, got {value!r}")
    return int((sol * LAMPORTS_PER_SOL).to_integral_value(rounding=ROUND_FLOOR))


def checked_u64(amount: int, what: str = "amount") -> int:
    if amount < 0:
        raise AmountOverflowError(f"{what} is negative: {amount}")
    if amount > U64_MAX:
        raise AmountOverflowError(f"{what} {amount} exceeds u64 range")
    return amount


def forward_amount(collected: int, buffer: int) -> int:
    """Lamports to forward out of ``collected`` while keeping a fee buffer.

    When the collected amount cannot cover the buffer the whole amount is
    forwarded; the buffer is a target, not an extra withholding.
    """
    return collected - buffer if collected > buffer else collected


def equal_share(distributable: int, holder_count: int) -> tuple[int, int]:
    if holder_count <= 0:
        raise ValueError(f"holder count must be positive, got {holder_count}")
    return divmod(distributable, holder_count)
