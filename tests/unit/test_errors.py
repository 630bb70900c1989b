"""Unit tests for error explanations."""

from spl_token_manager.utils.errors import (
    ConfirmationTimeoutError,
    ErrorResponse,
    InsufficientBalanceError,
    RetryExhaustedError,
    RpcError,
    explain_error,
)


def test_explain_known_program_errors():
    """Test explanations of well-known token program failures."""
    owner_error = RpcError("Transaction simulation failed",
                           rpc_error={"data": {"err": "TokenInvalidAccountOwner"}})
    funds_error = RpcError("Attempt to debit an account but found no record of a prior credit, "
                           "insufficient funds for rent")

    assert "permission" in explain_error(owner_error)
    assert "enough SOL" in explain_error(funds_error)


def test_explain_rule_violation_keeps_message():
    """Test that user-facing messages are passed through."""
    error = InsufficientBalanceError(held="1", requested="2")

    assert explain_error(error) == (
        "Insufficient balance. You have 1 tokens, but trying to send 2 tokens."
    )


def test_explain_by_error_code():
    """Test the per-code fallbacks."""
    assert "may still succeed" in explain_error(ConfirmationTimeoutError("sig"))
    assert "rate limiting" in explain_error(RetryExhaustedError("fetch signatures", 6))
    assert explain_error(RpcError("Solana RPC error: boom")) == (
        "There was an error communicating with the Solana blockchain."
    )


def test_explain_unexpected_error():
    """Test errors from outside the package."""
    assert "processing your request" in explain_error(ValueError("boom"))


def test_error_response_from_exception():
    """Test the presentation payload."""
    response = ErrorResponse.from_exception(RetryExhaustedError("fetch signatures", 6))

    assert response.code == "RETRY_EXHAUSTED"
    assert response.message == "Failed to fetch signatures after 6 attempts"
    assert response.details == {"operation": "fetch signatures", "attempts": 6}
