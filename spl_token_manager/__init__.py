"""SPL Token Manager package.

This package creates SPL tokens, mints supply, transfers tokens between
wallets, and reads balances and transaction history from a Solana cluster.
"""

from spl_token_manager.services.account_service import AccountService
from spl_token_manager.services.token_service import TokenService
from spl_token_manager.services.transaction_service import TransactionService
from spl_token_manager.solana_client import SolanaClient, get_solana_client
from spl_token_manager.wallet import KeypairSigner, TransactionSigner

__version__ = "0.1.0"
__author__ = "SPL Token Manager Contributors"
__email__ = "maintainers@spl-token-manager.dev"

__all__ = [
    "AccountService",
    "KeypairSigner",
    "SolanaClient",
    "TokenService",
    "TransactionService",
    "TransactionSigner",
    "get_solana_client",
]
