"""Test configuration for pytest.

This module imports fixtures that should be available to all tests.
"""

# Import fixtures
from tests.fixtures.common import (  # noqa
    payer_keypair,
    signer,
    blockhash,
    mock_solana_client,
    mock_sleep,
    backoff,
    account_service,
    pipeline,
    mock_pipeline,
    token_service,
    transaction_service,
)
