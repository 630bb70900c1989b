"""
Token data models for the SPL token manager.

This module defines Pydantic models for mints, token accounts, balances and
history records, plus the small frozen dataclasses the submission pipeline
passes around.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from spl_token_manager.constants import UNKNOWN_MINT


class MintInfo(BaseModel):
    """
    On-chain state of a token mint, read fresh for every operation.
    """
    address: str
    decimals: int = Field(ge=0, le=255)
    mint_authority: Optional[str] = None
    freeze_authority: Optional[str] = None
    supply: int = 0
    is_initialized: bool = True


class TokenAccount(BaseModel):
    """
    An owner's associated token account for one mint.
    """
    owner: str
    mint: str
    address: str
    amount: int = Field(ge=0)


class TokenBalance(BaseModel):
    """
    A non-zero token holding of a wallet, ready for display.
    """
    mint: str
    address: str
    amount: str
    decimals: int
    formatted_amount: str


class TransactionKind(str, Enum):
    """Kinds of token activity recognised in history."""
    
    CREATE = "create"
    MINT = "mint"
    TRANSFER = "transfer"
    UNKNOWN = "unknown"


class TransactionRecord(BaseModel):
    """
    A classified entry of a wallet's transaction history.
    """
    signature: str
    timestamp: int
    kind: TransactionKind
    mint: str = UNKNOWN_MINT


@dataclass(frozen=True)
class FreshnessToken:
    """Recent blockhash and the last block height at which it is valid."""
    
    blockhash: str
    last_valid_block_height: int


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of a confirmed transaction."""
    
    signature: str
    blockhash: str
    last_valid_block_height: int
