"""Data models for the SPL token manager."""

from spl_token_manager.models.token import (
    FreshnessToken,
    MintInfo,
    SubmissionResult,
    TokenAccount,
    TokenBalance,
    TransactionKind,
    TransactionRecord,
)

__all__ = [
    "FreshnessToken",
    "MintInfo",
    "SubmissionResult",
    "TokenAccount",
    "TokenBalance",
    "TransactionKind",
    "TransactionRecord",
]
