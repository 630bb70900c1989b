"""Account service for the SPL token manager.

This module resolves mints and associated token accounts, and reads the
balances shown to a wallet owner. Nothing here is cached: every operation
sees the ledger as it is at the time of the call.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from solders.instruction import Instruction
from solders.pubkey import Pubkey
from spl.token.instructions import create_associated_token_account, get_associated_token_address

from spl_token_manager.constants import LAMPORTS_PER_SOL, TOKEN_PROGRAM_ID
from spl_token_manager.models.token import MintInfo, TokenAccount, TokenBalance
from spl_token_manager.services.base_service import BaseService
from spl_token_manager.solana_client import SolanaClient
from spl_token_manager.utils.amounts import to_decimal
from spl_token_manager.utils.errors import AccountNotFoundError, ValidationError
from spl_token_manager.utils.validation import parse_public_key


def _parsed_info(account: Dict[str, Any]) -> Dict[str, Any]:
    data = account.get("data")
    if not isinstance(data, dict):
        return {}
    parsed = data.get("parsed")
    return parsed if isinstance(parsed, dict) else {}


class AccountService(BaseService):
    """Service for mints and associated token accounts."""

    def __init__(self, solana_client: SolanaClient):
        """Initialize the account service.

        Args:
            solana_client: The Solana client to use
        """
        super().__init__()
        self.client = solana_client

    @staticmethod
    def derive(mint: Pubkey, owner: Pubkey) -> Pubkey:
        """Derive the associated token account of ``owner`` for ``mint``.

        Pure; the account may not exist on the ledger yet.
        """
        return get_associated_token_address(owner, mint)

    async def exists(self, address: Pubkey) -> bool:
        """Check whether an account exists.

        A missing account is ``False``; RPC failures propagate.
        """
        return await self.client.get_account_info(str(address)) is not None

    async def ensure_create_instruction(self, mint: Pubkey, owner: Pubkey,
                                        payer: Pubkey) -> Optional[Instruction]:
        """Return an instruction creating the owner's associated account, if it is missing.

        Args:
            mint: Token mint
            owner: Wallet that will own the account
            payer: Wallet paying the account's rent

        Returns:
            The creation instruction, or None when the account already exists
        """
        address = self.derive(mint, owner)
        if await self.exists(address):
            return None
        self.log_with_context(
            "info",
            "Associated token account does not exist, it will be created",
            address=str(address),
            owner=str(owner)
        )
        return create_associated_token_account(payer=payer, owner=owner, mint=mint)

    async def get_mint_info(self, mint: Pubkey) -> MintInfo:
        """Read the current state of a mint.

        Args:
            mint: Mint address

        Returns:
            The mint's decimals and authorities

        Raises:
            AccountNotFoundError: If the mint account does not exist
            ValidationError: If the account is not an SPL token mint
        """
        account = await self.client.get_account_info(str(mint))
        if account is None:
            raise AccountNotFoundError(
                "Token mint not found. Please check the address and try again.",
                address=str(mint),
                account_type="mint"
            )

        parsed = _parsed_info(account)
        if account.get("owner") != TOKEN_PROGRAM_ID or parsed.get("type") != "mint":
            raise ValidationError(
                "Invalid token mint address. Please check the address and try again.",
                details={"address": str(mint), "owner": account.get("owner")}
            )

        info = parsed.get("info", {})
        return MintInfo(
            address=str(mint),
            decimals=int(info["decimals"]),
            mint_authority=info.get("mintAuthority"),
            freeze_authority=info.get("freezeAuthority"),
            supply=int(info.get("supply", 0)),
            is_initialized=bool(info.get("isInitialized", True)),
        )

    async def get_token_account(self, mint: Pubkey, owner: Pubkey) -> TokenAccount:
        """Read the owner's associated token account for a mint.

        Raises:
            AccountNotFoundError: If the account does not exist
        """
        address = self.derive(mint, owner)
        account = await self.client.get_account_info(str(address))
        if account is None:
            raise AccountNotFoundError(
                "Could not find tokens in your wallet. Make sure you own this token.",
                address=str(address),
                account_type="token_account"
            )

        info = _parsed_info(account).get("info", {})
        token_amount = info.get("tokenAmount", {})
        return TokenAccount(
            owner=str(owner),
            mint=str(mint),
            address=str(address),
            amount=int(token_amount.get("amount", 0)),
        )

    async def get_token_balances(self, owner: str) -> List[TokenBalance]:
        """List the non-zero token balances of a wallet.

        Args:
            owner: Wallet address

        Returns:
            One entry per token account holding a positive amount
        """
        owner_key = parse_public_key(owner, "wallet address")
        async with self.log_timing(f"Fetching token balances for {owner_key}"):
            accounts = await self.client.get_token_accounts_by_owner(str(owner_key))

        balances = []
        for entry in accounts:
            info = _parsed_info(entry.get("account", {})).get("info", {})
            token_amount = info.get("tokenAmount", {})
            raw = int(token_amount.get("amount", 0))
            if raw <= 0:
                continue
            decimals = int(token_amount.get("decimals", 0))
            balances.append(TokenBalance(
                mint=info.get("mint", ""),
                address=entry.get("pubkey", ""),
                amount=str(raw),
                decimals=decimals,
                formatted_amount=to_decimal(raw, decimals),
            ))
        return balances

    async def get_sol_balance(self, owner: str) -> Decimal:
        """Get a wallet's SOL balance."""
        owner_key = parse_public_key(owner, "wallet address")
        lamports = await self.client.get_balance(str(owner_key))
        return Decimal(lamports) / LAMPORTS_PER_SOL
