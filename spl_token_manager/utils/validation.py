"""Validation utilities for the SPL token manager.

This module provides utilities for validating Solana-specific data.
"""

import re
from typing import Any

from solders.pubkey import Pubkey

from spl_token_manager.utils.errors import ValidationError

# Solana public key validation pattern (base58 format)
PUBKEY_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def validate_public_key(pubkey: str) -> bool:
    """Validate a Solana public key.
    
    Args:
        pubkey: The public key to validate
        
    Returns:
        True if the public key is valid, False otherwise
    """
    if not pubkey or not isinstance(pubkey, str):
        return False
    return bool(PUBKEY_PATTERN.match(pubkey))


def parse_public_key(value: Any, field_name: str = "address") -> Pubkey:
    """Turn caller input into a ``Pubkey``.
    
    Args:
        value: A ``Pubkey`` or its base58 string form
        field_name: Name of the field for the error message
        
    Returns:
        The parsed public key
        
    Raises:
        ValidationError: If the value is missing or malformed
    """
    if isinstance(value, Pubkey):
        return value
    if not validate_public_key(value):
        raise ValidationError(
            f"Invalid {field_name}. Please check the address and try again.",
            details={"field": field_name, "value": str(value)}
        )
    try:
        return Pubkey.from_string(value)
    except ValueError as e:
        raise ValidationError(
            f"Invalid {field_name}. Please check the address and try again.",
            details={"field": field_name, "value": value, "reason": str(e)}
        ) from e


def format_address(address: str) -> str:
    """Shorten an address for display, e.g. ``Toke...5DA``."""
    address = str(address)
    if len(address) <= 8:
        return address
    return f"{address[:4]}...{address[-4:]}"
