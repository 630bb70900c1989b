"""
Error handling utilities for the SPL token manager.

This module defines the exception taxonomy raised by the token services and a
helper that turns any of them into a sentence suitable for end users.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Error codes for the SPL token manager."""
    
    # General errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    
    # Token rule violations
    NOT_MINT_AUTHORITY = "NOT_MINT_AUTHORITY"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    
    # Submission lifecycle
    SIGNING_REJECTED = "SIGNING_REJECTED"
    BROADCAST_FAILED = "BROADCAST_FAILED"
    CONFIRMATION_TIMEOUT = "CONFIRMATION_TIMEOUT"
    
    # Solana RPC errors
    RPC_ERROR = "RPC_ERROR"
    RPC_TIMEOUT = "RPC_TIMEOUT"
    RPC_CONNECTION_ERROR = "RPC_CONNECTION_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    RETRY_EXHAUSTED = "RETRY_EXHAUSTED"


class ErrorResponse(BaseModel):
    """Standard error payload handed to the presentation layer."""
    
    code: str
    message: str
    explanation: str
    details: Optional[Dict[str, Any]] = None
    
    @classmethod
    def from_exception(cls, error: Exception) -> "ErrorResponse":
        """Build a response from any exception."""
        if isinstance(error, TokenManagerError):
            return cls(
                code=error.code.value,
                message=error.message,
                explanation=explain_error(error),
                details=error.details or None,
            )
        return cls(
            code=ErrorCode.UNKNOWN_ERROR.value,
            message=str(error),
            explanation=explain_error(error),
        )


class TokenManagerError(Exception):
    """Base exception for all SPL token manager errors."""
    
    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize a new token manager error.
        
        Args:
            message: Error message
            code: Error code
            details: Additional error details
        """
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)
    
    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the error to a dictionary.
        
        Returns:
            Dictionary representation of the error
        """
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details
        }


class ConfigurationError(TokenManagerError):
    """Exception for invalid or missing configuration."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.CONFIGURATION_ERROR, details=details)


class ValidationError(TokenManagerError):
    """Exception for bad caller input, raised before any network call."""
    
    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR
    ):
        super().__init__(message, code=code, details=details)


class InvalidAmountError(ValidationError):
    """Exception for amounts that scale to a non-positive or non-finite value."""
    
    def __init__(self, message: str, amount: Any = None):
        super().__init__(
            message,
            details={"amount": str(amount)},
            code=ErrorCode.INVALID_AMOUNT
        )


class NotMintAuthorityError(TokenManagerError):
    """The payer is not allowed to mint new supply of this token."""
    
    def __init__(self, mint: str, payer: str, mint_authority: Optional[str]):
        super().__init__(
            "You are not the mint authority for this token. "
            "Only the mint authority can mint new tokens.",
            code=ErrorCode.NOT_MINT_AUTHORITY,
            details={"mint": mint, "payer": payer, "mint_authority": mint_authority}
        )


class InsufficientBalanceError(TokenManagerError):
    """The source account holds fewer tokens than requested."""
    
    def __init__(self, held: str, requested: str, mint: Optional[str] = None):
        super().__init__(
            f"Insufficient balance. You have {held} tokens, "
            f"but trying to send {requested} tokens.",
            code=ErrorCode.INSUFFICIENT_BALANCE,
            details={"held": held, "requested": requested, "mint": mint}
        )
        self.held = held
        self.requested = requested


class AccountNotFoundError(TokenManagerError):
    """A required on-chain account does not exist."""
    
    def __init__(self, message: str, address: str, account_type: str = "account"):
        super().__init__(
            message,
            code=ErrorCode.ACCOUNT_NOT_FOUND,
            details={"address": address, "account_type": account_type}
        )
        self.address = address


class SigningRejectedError(TokenManagerError):
    """The signer declined or failed; nothing was submitted."""
    
    def __init__(self, message: str = "Transaction signing was rejected",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.SIGNING_REJECTED, details=details)


class BroadcastFailedError(TokenManagerError):
    """The ledger refused the transaction. The operation must be restarted."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.BROADCAST_FAILED, details=details)


class ConfirmationTimeoutError(TokenManagerError):
    """Confirmation did not complete in the blockhash window; the outcome is unknown."""
    
    def __init__(self, signature: str, message: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        error_details = details or {}
        error_details["signature"] = signature
        super().__init__(
            message or f"Transaction {signature} was not confirmed before its blockhash expired",
            code=ErrorCode.CONFIRMATION_TIMEOUT,
            details=error_details
        )
        self.signature = signature


class RpcError(TokenManagerError):
    """Exception for Solana RPC errors."""
    
    def __init__(
        self,
        message: str,
        rpc_error: Optional[Dict[str, Any]] = None,
        http_status: Optional[int] = None,
        code: ErrorCode = ErrorCode.RPC_ERROR
    ):
        details: Dict[str, Any] = {"rpc_error": rpc_error or {}}
        if http_status is not None:
            details["http_status"] = http_status
        super().__init__(message, code=code, details=details)
        self.rpc_error = rpc_error or {}
        self.http_status = http_status


class RpcTimeoutError(RpcError):
    """Exception for Solana RPC timeout errors."""
    
    def __init__(self, message: str, timeout: Optional[float] = None):
        super().__init__(message, code=ErrorCode.RPC_TIMEOUT)
        self.details["timeout"] = timeout


class RpcConnectionError(RpcError):
    """Exception for Solana RPC connection errors."""
    
    def __init__(self, message: str):
        super().__init__(message, code=ErrorCode.RPC_CONNECTION_ERROR)


class RateLimitedError(TokenManagerError):
    """Base class for read paths that gave up because of rate limiting."""
    
    def __init__(self, message: str, code: ErrorCode = ErrorCode.RATE_LIMITED,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)


class RetryExhaustedError(RateLimitedError):
    """All backoff attempts for a rate-limited read were used up."""
    
    def __init__(self, operation: str, attempts: int):
        super().__init__(
            f"Failed to {operation} after {attempts} attempts",
            code=ErrorCode.RETRY_EXHAUSTED,
            details={"operation": operation, "attempts": attempts}
        )
        self.attempts = attempts


# Program and RPC error fragments mapped to explanations for end users
SOLANA_ERROR_EXPLANATIONS = {
    "tokeninvalidaccountowner": (
        "You don't have permission to use this token account. Make sure you are "
        "using the correct wallet that created this token."
    ),
    "tokeninvalidmint": "Invalid token mint address. Please check the address and try again.",
    "tokenaccountnotfound": (
        "Token account not found. There might be an issue with the associated token account."
    ),
    "insufficient funds": "The account does not have enough SOL to perform this operation.",
    "blockhash not found": "The transaction expired before it reached the network. Please try again.",
    "too many requests": "The Solana RPC node is rate limiting requests. Please try again later.",
}

_CODE_EXPLANATIONS = {
    ErrorCode.SIGNING_REJECTED: "The transaction was not signed, so nothing was sent to the network.",
    ErrorCode.BROADCAST_FAILED: (
        "The network rejected the transaction. Please start the operation again."
    ),
    ErrorCode.CONFIRMATION_TIMEOUT: (
        "The transaction was sent but could not be confirmed in time. It may still "
        "succeed; check its status before trying again."
    ),
    ErrorCode.RPC_TIMEOUT: "The request timed out. The Solana network might be experiencing high load.",
    ErrorCode.RPC_CONNECTION_ERROR: "Could not connect to the Solana RPC endpoint.",
    ErrorCode.RATE_LIMITED: "The request was rate limited by the Solana RPC node. Please try again later.",
    ErrorCode.RETRY_EXHAUSTED: (
        "The Solana RPC node kept rate limiting requests. Please wait a moment and try again."
    ),
}


def explain_error(error: Exception) -> str:
    """Convert an error into a user-friendly explanation.
    
    Messages of validation-style errors are already written for end users and
    are returned as they are. Other errors are matched against known Solana
    error fragments first and fall back to a per-code description.
    
    Args:
        error: The exception to explain
        
    Returns:
        A user-friendly explanation of the error
    """
    text = str(error)
    if isinstance(error, RpcError) and error.rpc_error:
        text = f"{text} {error.rpc_error}"
    lowered = text.lower()
    
    for fragment, explanation in SOLANA_ERROR_EXPLANATIONS.items():
        if fragment in lowered:
            return explanation
    
    if isinstance(error, TokenManagerError):
        explanation = _CODE_EXPLANATIONS.get(error.code)
        if explanation:
            return explanation
        if error.code != ErrorCode.RPC_ERROR:
            return error.message
        return "There was an error communicating with the Solana blockchain."
    
    return "An error occurred while processing your request on the Solana blockchain."
