"""Common test fixtures for SPL token manager tests.

This module provides fixtures that can be reused across different test modules.
"""

from typing import Any, Dict, Optional
from unittest.mock import AsyncMock

import pytest
from solders.hash import Hash
from solders.keypair import Keypair

from spl_token_manager.constants import TOKEN_PROGRAM_ID
from spl_token_manager.models.token import FreshnessToken
from spl_token_manager.services.account_service import AccountService
from spl_token_manager.services.retry import BackoffController, RetryPolicy
from spl_token_manager.services.submission import SubmissionPipeline
from spl_token_manager.services.token_service import TokenService
from spl_token_manager.services.transaction_service import TransactionService
from spl_token_manager.config import HistoryConfig
from spl_token_manager.solana_client import SolanaClient
from spl_token_manager.wallet import KeypairSigner

TEST_SIGNATURE = "5VERv8NMvzbJMEkV8xnrLkEaWRtSz9CosKDYjCJjBRnbJLgp8uirBgmQpjKhoR4tjF3ZpRzrFmBV6UjKdiSZkQUW"
LAST_VALID_BLOCK_HEIGHT = 1000


def make_mint_account(decimals: int, mint_authority: Optional[str],
                      supply: int = 0) -> Dict[str, Any]:
    """jsonParsed ``getAccountInfo`` value of a mint."""
    return {
        "lamports": 1461600,
        "owner": TOKEN_PROGRAM_ID,
        "executable": False,
        "rentEpoch": 0,
        "data": {
            "program": "spl-token",
            "parsed": {
                "type": "mint",
                "info": {
                    "decimals": decimals,
                    "mintAuthority": mint_authority,
                    "freezeAuthority": mint_authority,
                    "supply": str(supply),
                    "isInitialized": True,
                },
            },
            "space": 82,
        },
    }


def make_token_account(mint: str, owner: str, amount: int, decimals: int = 9) -> Dict[str, Any]:
    """jsonParsed ``getAccountInfo`` value of a token account."""
    return {
        "lamports": 2039280,
        "owner": TOKEN_PROGRAM_ID,
        "executable": False,
        "rentEpoch": 0,
        "data": {
            "program": "spl-token",
            "parsed": {
                "type": "account",
                "info": {
                    "mint": mint,
                    "owner": owner,
                    "state": "initialized",
                    "isNative": False,
                    "tokenAmount": {
                        "amount": str(amount),
                        "decimals": decimals,
                        "uiAmountString": str(amount / 10 ** decimals),
                    },
                },
            },
            "space": 165,
        },
    }


def accounts_by_address(accounts: Dict[str, Any]):
    """``get_account_info`` side effect serving accounts from a dict; others do not exist."""
    def lookup(address, *args, **kwargs):
        return accounts.get(str(address))
    return lookup


@pytest.fixture
def payer_keypair():
    """Keypair of the wallet running the operations."""
    return Keypair()


@pytest.fixture
def signer(payer_keypair):
    """Local signer for the payer wallet."""
    return KeypairSigner(payer_keypair)


@pytest.fixture
def blockhash():
    """A recent blockhash."""
    return str(Hash.new_unique())


@pytest.fixture
def mock_solana_client(blockhash):
    """Create a mock Solana client."""
    client = AsyncMock(spec=SolanaClient)
    
    # Common mock responses
    client.get_latest_blockhash.return_value = FreshnessToken(
        blockhash=blockhash,
        last_valid_block_height=LAST_VALID_BLOCK_HEIGHT
    )
    client.get_minimum_balance_for_rent_exemption.return_value = 1461600
    client.get_account_info.return_value = None
    client.send_raw_transaction.return_value = TEST_SIGNATURE
    client.confirm_transaction.return_value = {
        "slot": 12345,
        "confirmations": 1,
        "err": None,
        "confirmationStatus": "confirmed"
    }
    client.get_signatures_for_address.return_value = []
    
    return client


@pytest.fixture
def mock_sleep():
    """Stand-in for asyncio.sleep that returns immediately."""
    return AsyncMock()


@pytest.fixture
def backoff(mock_sleep):
    """Backoff controller with default policy, no jitter and no real waiting."""
    return BackoffController(RetryPolicy(), sleep=mock_sleep, jitter=lambda low, high: 0.0)


@pytest.fixture
def account_service(mock_solana_client):
    """Create an AccountService with mock dependencies."""
    return AccountService(mock_solana_client)


@pytest.fixture
def pipeline(mock_solana_client, signer):
    """Create a SubmissionPipeline with a mock client and a real signer."""
    return SubmissionPipeline(mock_solana_client, signer)


@pytest.fixture
def mock_pipeline():
    """Submission pipeline that records instruction lists instead of sending them."""
    return AsyncMock(spec=SubmissionPipeline)


@pytest.fixture
def token_service(mock_solana_client, signer, account_service, mock_pipeline):
    """Create a TokenService whose submissions are captured."""
    return TokenService(mock_solana_client, signer, account_service, mock_pipeline)


@pytest.fixture
def transaction_service(mock_solana_client, backoff, mock_sleep):
    """Create a TransactionService with mock dependencies."""
    return TransactionService(
        mock_solana_client,
        backoff=backoff,
        config=HistoryConfig(limit=10, fetch_delay=0.3),
        sleep=mock_sleep
    )


# Test data fixtures
def make_parsed_transaction(instructions, err=None, block_time=1628000000):
    """``getTransaction`` jsonParsed result with the given top-level instructions."""
    return {
        "slot": 12345,
        "blockTime": block_time,
        "meta": {"err": err, "fee": 5000},
        "transaction": {
            "signatures": [TEST_SIGNATURE],
            "message": {
                "accountKeys": [],
                "recentBlockhash": "11111111111111111111111111111111",
                "instructions": instructions,
            },
        },
    }


def token_instruction(ix_type: str, **info) -> Dict[str, Any]:
    """A parsed token program instruction."""
    return {
        "program": "spl-token",
        "programId": TOKEN_PROGRAM_ID,
        "parsed": {"type": ix_type, "info": info},
        "stackHeight": None,
    }
