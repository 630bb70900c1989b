"""Transaction history service for the SPL token manager.

This module fetches a wallet's recent transactions and classifies them as
token creations, mints or transfers.
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, List, Optional

from spl_token_manager.config import HistoryConfig, get_history_config
from spl_token_manager.models.token import TransactionRecord
from spl_token_manager.services.base_service import BaseService
from spl_token_manager.services.classifier import classify_transaction
from spl_token_manager.services.retry import BackoffController
from spl_token_manager.solana_client import SolanaClient
from spl_token_manager.utils.errors import TokenManagerError
from spl_token_manager.utils.validation import parse_public_key


class TransactionService(BaseService):
    """Service for working with a wallet's transaction history."""

    def __init__(
        self,
        solana_client: SolanaClient,
        backoff: Optional[BackoffController] = None,
        config: Optional[HistoryConfig] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        """Initialize the transaction service.

        Args:
            solana_client: The Solana client to use
            backoff: Backoff controller shared by all reads of one retrieval
            config: History settings. Defaults to environment-based config.
            sleep: Awaitable used for the pause between per-signature fetches
        """
        super().__init__()
        self.client = solana_client
        self.backoff = backoff or BackoffController(sleep=sleep)
        self.config = config or get_history_config()
        self._sleep = sleep

    async def get_recent_transactions(self, address: str,
                                      limit: Optional[int] = None) -> List[TransactionRecord]:
        """Get the classified recent transactions of a wallet.

        Signatures are processed one at a time, with a fixed pause before each
        transaction fetch. Failed transactions are left out, as is any single
        transaction that cannot be fetched or parsed.

        Args:
            address: The wallet address
            limit: Maximum number of signatures to look at

        Returns:
            Records in the order of the signature list, most recent first

        Raises:
            ValidationError: If the address is malformed
            RetryExhaustedError: If the signature list stays rate limited
        """
        owner = str(parse_public_key(address, "wallet address"))
        if limit is None:
            limit = self.config.limit

        signatures = await self.backoff.call(
            lambda: self.client.get_signatures_for_address(owner, limit=limit),
            operation_name="fetch transaction signatures"
        )
        if not signatures:
            self.logger.info(f"No signatures found for wallet {owner}")
            return []

        self.logger.info(f"Found {len(signatures)} signatures, processing transactions...")
        records = []
        for signature_info in signatures:
            await self._sleep(self.config.fetch_delay)
            record = await self._process_signature(signature_info)
            if record is not None:
                records.append(record)

        self.logger.info(f"Successfully processed {len(records)} transactions")
        return records

    async def _process_signature(self, signature_info: dict) -> Optional[TransactionRecord]:
        signature = signature_info.get("signature")
        if not signature:
            return None
        try:
            transaction = await self.backoff.call(
                lambda: self.client.get_parsed_transaction(signature),
                operation_name=f"fetch transaction {signature}"
            )
            return classify_transaction(
                signature,
                signature_info.get("blockTime"),
                transaction,
                fallback_time=int(time.time()),
            )
        except (TokenManagerError, AttributeError, KeyError, TypeError, ValueError) as e:
            self.logger.error(f"Error processing transaction {signature}: {str(e)}")
            return None
