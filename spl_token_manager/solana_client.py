"""Async Solana JSON-RPC client for the SPL token manager."""

# Standard library imports
import asyncio
import base64
import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

# Third-party library imports
import httpx

# Internal imports
from spl_token_manager.config import SolanaConfig, get_solana_config
from spl_token_manager.constants import COMMITMENT_LEVELS, TOKEN_PROGRAM_ID
from spl_token_manager.logging_config import get_logger
from spl_token_manager.models.token import FreshnessToken
from spl_token_manager.utils.errors import RpcConnectionError, RpcError, RpcTimeoutError

# Get logger
logger = get_logger(__name__)


class SolanaClient:
    """Client for interacting with the Solana blockchain.

    Every call is a single JSON-RPC request. Retrying is left to the callers,
    which know whether a call is safe to repeat.
    """

    def __init__(self, config: Optional[SolanaConfig] = None,
                 http_client: Optional[httpx.AsyncClient] = None):
        """Initialize the Solana client.

        Args:
            config: Solana configuration. Defaults to environment-based config.
            http_client: Optional preconfigured httpx client
        """
        self.config = config or get_solana_config()
        self.headers = {"Content-Type": "application/json"}

        # Set up auth if provided
        self.auth = None
        if self.config.has_auth:
            self.auth = (self.config.rpc_user, self.config.rpc_password)

        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._request_id = 0

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.config.timeout,
                auth=self.auth,
                limits=httpx.Limits(max_keepalive_connections=10, max_connections=20)
            )
        return self._http_client

    async def _make_request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Make a JSON-RPC request to the Solana node.

        Args:
            method: The RPC method to call
            params: The parameters to pass to the method

        Returns:
            The ``result`` member of the JSON-RPC response

        Raises:
            RpcError: If the node answers with an error or a non-200 status
            RpcTimeoutError: If the request times out
            RpcConnectionError: If the node cannot be reached
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params or []
        }
        logger.debug(f"RPC request: method={method}")

        try:
            response = await self._get_http_client().post(
                self.config.rpc_url,
                headers=self.headers,
                json=payload
            )
        except httpx.TimeoutException as e:
            raise RpcTimeoutError(
                f"Solana RPC request {method} timed out",
                timeout=self.config.timeout
            ) from e
        except httpx.TransportError as e:
            raise RpcConnectionError(f"Could not reach Solana RPC for {method}: {str(e)}") from e

        if response.status_code != 200:
            raise RpcError(
                f"Solana RPC returned HTTP {response.status_code} for {method}: "
                f"{response.text[:200]}",
                http_status=response.status_code
            )

        try:
            result = response.json()
        except json.JSONDecodeError as e:
            raise RpcError(f"Solana RPC response for {method} was not valid JSON") from e

        if "error" in result:
            error = result["error"] or {}
            message = f"Solana RPC error: {error.get('message', 'Unknown error')}"
            if "data" in error:
                message += f" - {json.dumps(error['data'])}"
            raise RpcError(message, rpc_error=error)

        return result.get("result")

    def _commitment(self, commitment: Optional[str] = None) -> Dict[str, str]:
        return {"commitment": commitment or self.config.commitment}

    async def get_latest_blockhash(self) -> FreshnessToken:
        """Get a recent blockhash and the block height it stays valid until."""
        result = await self._make_request("getLatestBlockhash", [self._commitment()])
        value = result["value"]
        return FreshnessToken(
            blockhash=value["blockhash"],
            last_valid_block_height=int(value["lastValidBlockHeight"])
        )

    async def get_block_height(self) -> int:
        """Get the current block height."""
        return int(await self._make_request("getBlockHeight", [self._commitment()]))

    async def get_account_info(self, address: str,
                               encoding: str = "jsonParsed") -> Optional[Dict[str, Any]]:
        """Get account information.

        Args:
            address: The account public key
            encoding: The encoding for the account data

        Returns:
            The account value, or None when the account does not exist
        """
        options = {"encoding": encoding, **self._commitment()}
        result = await self._make_request("getAccountInfo", [str(address), options])
        return result.get("value") if result else None

    async def get_balance(self, address: str) -> int:
        """Get account balance in lamports."""
        result = await self._make_request("getBalance", [str(address), self._commitment()])
        return int(result["value"])

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        """Get the lamports an account of ``size`` bytes needs to be rent exempt."""
        return int(await self._make_request(
            "getMinimumBalanceForRentExemption", [size, self._commitment()]
        ))

    async def get_token_accounts_by_owner(self, owner: str,
                                          program_id: str = TOKEN_PROGRAM_ID) -> List[Dict[str, Any]]:
        """Get the parsed token accounts of an owner for a token program.

        Args:
            owner: The owner public key
            program_id: Token program to filter by

        Returns:
            List of ``{"pubkey": ..., "account": ...}`` entries
        """
        options = {"encoding": "jsonParsed", **self._commitment()}
        result = await self._make_request(
            "getTokenAccountsByOwner",
            [str(owner), {"programId": program_id}, options]
        )
        return result.get("value", []) if result else []

    async def send_raw_transaction(self, transaction: bytes,
                                   skip_preflight: bool = False) -> str:
        """Broadcast a signed, serialized transaction.

        Args:
            transaction: Wire-format transaction bytes
            skip_preflight: Skip the node's simulation step

        Returns:
            The transaction signature
        """
        encoded = base64.b64encode(transaction).decode("ascii")
        options = {
            "encoding": "base64",
            "skipPreflight": skip_preflight,
            "preflightCommitment": self.config.commitment,
        }
        return await self._make_request("sendTransaction", [encoded, options])

    async def get_signature_status(self, signature: str) -> Optional[Dict[str, Any]]:
        """Get the status of a single signature, or None if the node has not seen it."""
        result = await self._make_request(
            "getSignatureStatuses",
            [[signature], {"searchTransactionHistory": False}]
        )
        statuses = result.get("value") or [None]
        return statuses[0]

    def _reached_commitment(self, status: Dict[str, Any]) -> bool:
        reached = status.get("confirmationStatus")
        if reached is None:
            # Rooted transactions report no confirmationStatus
            return status.get("confirmations") is None
        target = self.config.commitment
        return COMMITMENT_LEVELS.index(reached) >= COMMITMENT_LEVELS.index(target)

    async def confirm_transaction(self, signature: str, blockhash: str,
                                  last_valid_block_height: int) -> Optional[Dict[str, Any]]:
        """Wait for a transaction to reach the configured commitment.

        Polls the signature status until the transaction is confirmed, fails,
        or the block height passes ``last_valid_block_height``, after which
        the transaction signed with ``blockhash`` can no longer land.

        Args:
            signature: The transaction signature
            blockhash: The blockhash the transaction was signed with
            last_valid_block_height: Last block height at which ``blockhash`` is valid

        Returns:
            The final signature status (check its ``err`` member), or None if
            the blockhash expired before confirmation
        """
        logger.debug(f"Confirming {signature} against blockhash {blockhash}")
        while True:
            status = await self.get_signature_status(signature)
            if status is not None and (status.get("err") or self._reached_commitment(status)):
                return status

            if await self.get_block_height() > last_valid_block_height:
                logger.warning(f"Blockhash {blockhash} expired before {signature} was confirmed")
                return None

            await asyncio.sleep(self.config.confirm_poll_interval)

    async def get_signatures_for_address(
        self,
        address: str,
        limit: int = 10,
        before: Optional[str] = None,
        until: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Get recent signatures involving an address, most recent first.

        Args:
            address: The account address
            limit: Maximum number of signatures to return
            before: Signature to search backwards from
            until: Signature to search until

        Returns:
            List of signature info dicts (``signature``, ``blockTime``, ``err``, ...)
        """
        options: Dict[str, Any] = {"limit": limit, **self._commitment()}
        if before:
            options["before"] = before
        if until:
            options["until"] = until
        return await self._make_request("getSignaturesForAddress", [str(address), options]) or []

    async def get_parsed_transaction(self, signature: str) -> Optional[Dict[str, Any]]:
        """Get a transaction with its instructions in jsonParsed form.

        Returns:
            Transaction details, or None if the node does not know the signature
        """
        options = {
            "encoding": "jsonParsed",
            "maxSupportedTransactionVersion": 0,
            **self._commitment(),
        }
        return await self._make_request("getTransaction", [signature, options])

    async def __aenter__(self) -> "SolanaClient":
        self._get_http_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Release the underlying HTTP client if this instance created it."""
        if self._http_client is not None and self._owns_http_client:
            await self._http_client.aclose()
            self._http_client = None


@asynccontextmanager
async def get_solana_client(config: Optional[SolanaConfig] = None) -> AsyncIterator[SolanaClient]:
    """Get a Solana client as an async context manager.

    Yields:
        SolanaClient: An initialized Solana client.
    """
    client = SolanaClient(config)
    try:
        yield client
    finally:
        await client.close()
