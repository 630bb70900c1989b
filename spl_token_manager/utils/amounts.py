"""Conversion between human amounts and raw token base units.

Amounts going in are truncated toward zero; amounts going out are formatted
with either no fractional digits or exactly ``decimals`` of them.
"""

from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Union

from spl_token_manager.utils.errors import InvalidAmountError

AmountLike = Union[int, float, str, Decimal]

MAX_U64 = 2**64 - 1


def _as_decimal(amount: AmountLike) -> Decimal:
    if isinstance(amount, bool):
        raise InvalidAmountError("Amount must be a number", amount)
    try:
        # str() keeps 2.5 as "2.5" instead of its binary float expansion
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError) as e:
        raise InvalidAmountError(f"Invalid amount: {amount}", amount) from e
    if not value.is_finite():
        raise InvalidAmountError(f"Invalid amount: {amount}", amount)
    return value


def ensure_positive_amount(amount: AmountLike) -> Decimal:
    """Reject missing, zero or negative amounts before anything touches the network."""
    value = _as_decimal(amount)
    if value <= 0:
        raise InvalidAmountError("Amount must be greater than zero", amount)
    return value


def to_raw(amount: AmountLike, decimals: int, require_positive: bool = True) -> int:
    """Scale a human amount to raw base units.
    
    Args:
        amount: Human-readable amount, e.g. ``2.5``
        decimals: Decimal places of the mint
        require_positive: Fail when the scaled amount is zero or negative
        
    Returns:
        The raw amount, truncated toward zero
        
    Raises:
        InvalidAmountError: If the amount is not a finite number, scales to a
            non-positive value while a positive one is required, or does not
            fit in an unsigned 64-bit integer
    """
    if decimals < 0:
        raise InvalidAmountError(f"Invalid decimals: {decimals}", amount)
    value = _as_decimal(amount)
    raw = int(value.scaleb(decimals).to_integral_value(rounding=ROUND_DOWN))
    if require_positive and raw <= 0:
        raise InvalidAmountError("Amount must be greater than zero", amount)
    if raw < 0:
        raise InvalidAmountError("Amount must not be negative", amount)
    if raw > MAX_U64:
        raise InvalidAmountError("Amount is too large", amount)
    return raw


def to_decimal(raw: int, decimals: int) -> str:
    """Format a raw amount for display.
    
    Whole numbers are printed without a fractional part; anything else is
    printed with exactly ``decimals`` fractional digits.
    
    >>> to_decimal(5_000_000_000, 9)
    '5'
    >>> to_decimal(2_500_000_000, 9)
    '2.500000000'
    """
    value = Decimal(int(raw)).scaleb(-decimals)
    if value == value.to_integral_value():
        return f"{value:.0f}"
    return f"{value:.{decimals}f}"
