"""
Wallet signers.

The token services only see the ``TransactionSigner`` protocol: something
that takes an unsigned transaction and returns it signed, or fails. A signer
backed by a local keypair is provided for the CLI and for tests.
"""

import json
import os
from typing import List, Protocol, runtime_checkable

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from spl_token_manager.logging_config import get_logger
from spl_token_manager.utils.errors import ConfigurationError

logger = get_logger(__name__)


@runtime_checkable
class TransactionSigner(Protocol):
    """Wallet capability used to sign transactions."""
    
    @property
    def pubkey(self) -> Pubkey:
        """Public key of the wallet; it pays fees and owns the token accounts."""
        ...
    
    async def sign_transaction(self, transaction: Transaction) -> Transaction:
        """Return ``transaction`` signed by this wallet, or raise if declined."""
        ...


class KeypairSigner:
    """Signer holding a keypair in memory."""
    
    def __init__(self, keypair: Keypair):
        self._keypair = keypair
    
    @property
    def pubkey(self) -> Pubkey:
        return self._keypair.pubkey()
    
    async def sign_transaction(self, transaction: Transaction) -> Transaction:
        # Keeps signatures already applied by other keypairs
        transaction.partial_sign([self._keypair], transaction.message.recent_blockhash)
        return transaction
    
    @classmethod
    def from_file(cls, path: str) -> "KeypairSigner":
        """Load a Solana CLI keypair file (a JSON array of 64 bytes)."""
        return cls(load_keypair(path))


def load_keypair(path: str) -> Keypair:
    """Read a keypair stored in the Solana CLI JSON format.
    
    Args:
        path: Path to the keypair file
        
    Returns:
        The keypair
        
    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    expanded = os.path.expanduser(path)
    try:
        with open(expanded, "r", encoding="utf-8") as f:
            secret: List[int] = json.load(f)
        keypair = Keypair.from_bytes(bytes(secret))
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"Keypair file not found: {expanded}",
            details={"path": expanded}
        ) from e
    except (ValueError, TypeError) as e:
        raise ConfigurationError(
            f"Keypair file is not a valid Solana keypair: {expanded}",
            details={"path": expanded, "reason": str(e)}
        ) from e
    
    logger.debug(f"Loaded keypair {keypair.pubkey()} from {expanded}")
    return keypair
