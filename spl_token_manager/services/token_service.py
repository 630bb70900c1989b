"""Token service for the SPL token manager.

This module provides the create, mint and transfer operations. Each one
validates its input, reads the ledger state it depends on, builds the
instruction list and hands it to the submission pipeline.
"""

from typing import Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from spl.token.constants import MINT_LEN

from spl_token_manager.models.token import MintInfo
from spl_token_manager.services.account_service import AccountService
from spl_token_manager.services.base_service import BaseService
from spl_token_manager.services.instruction_builder import (
    build_create_mint_instructions,
    build_mint_to_instructions,
    build_transfer_instructions,
)
from spl_token_manager.services.submission import SubmissionPipeline
from spl_token_manager.solana_client import SolanaClient
from spl_token_manager.utils.amounts import AmountLike, ensure_positive_amount, to_decimal, to_raw
from spl_token_manager.utils.errors import (
    InsufficientBalanceError,
    NotMintAuthorityError,
    ValidationError,
)
from spl_token_manager.utils.validation import parse_public_key
from spl_token_manager.wallet import TransactionSigner

MAX_DECIMALS = 255


class TokenService(BaseService):
    """Service for creating, minting and transferring SPL tokens."""

    def __init__(
        self,
        solana_client: SolanaClient,
        signer: TransactionSigner,
        account_service: Optional[AccountService] = None,
        pipeline: Optional[SubmissionPipeline] = None
    ):
        """Initialize the token service.

        Args:
            solana_client: The Solana client to use
            signer: Wallet that pays for and signs every operation
            account_service: Optional account service sharing the client
            pipeline: Optional submission pipeline sharing the client and signer
        """
        super().__init__()
        self.client = solana_client
        self.signer = signer
        self.accounts = account_service or AccountService(solana_client)
        self.pipeline = pipeline or SubmissionPipeline(solana_client, signer)

    @property
    def payer(self) -> Pubkey:
        """Wallet paying fees and rent for every operation (the signer)."""
        return self.signer.pubkey

    async def create_token(self, decimals: int, freeze_authority: Optional[str] = None) -> str:
        """Create a new token mint owned by the signer.

        Args:
            decimals: Decimal places of the new token
            freeze_authority: Optional freeze authority; defaults to the signer

        Returns:
            Address of the new mint
        """
        if isinstance(decimals, bool) or not isinstance(decimals, int) \
                or not 0 <= decimals <= MAX_DECIMALS:
            raise ValidationError(
                f"Decimals must be a whole number between 0 and {MAX_DECIMALS}",
                details={"decimals": decimals}
            )
        freeze_key = (
            parse_public_key(freeze_authority, "freeze authority address")
            if freeze_authority else None
        )

        mint_keypair = Keypair()
        mint_address = mint_keypair.pubkey()
        self.log_with_context("info", "Creating token", mint=str(mint_address),
                              decimals=decimals)

        lamports = await self.client.get_minimum_balance_for_rent_exemption(MINT_LEN)
        instructions = build_create_mint_instructions(
            payer=self.payer,
            mint=mint_address,
            lamports=lamports,
            decimals=decimals,
            freeze_authority=freeze_key,
        )

        async with self.log_timing(f"Create token {mint_address}"):
            await self.pipeline.submit(instructions, self.payer, partial_signers=[mint_keypair])

        return str(mint_address)

    async def mint_tokens(self, mint: str, amount: AmountLike,
                          destination: Optional[str] = None) -> str:
        """Mint new supply of a token.

        Args:
            mint: Token mint address; the signer must be its mint authority
            amount: Human-readable amount to mint
            destination: Receiving wallet; defaults to the signer

        Returns:
            Address of the receiver's associated token account

        Raises:
            ValidationError: For malformed addresses or non-positive amounts
            NotMintAuthorityError: If the signer is not the mint authority
        """
        mint_key = parse_public_key(mint, "token mint address")
        receiver = (
            parse_public_key(destination, "destination wallet address")
            if destination else self.payer
        )
        ensure_positive_amount(amount)

        mint_info = await self.accounts.get_mint_info(mint_key)
        self._check_mint_authority(mint_info)
        raw_amount = to_raw(amount, mint_info.decimals)

        destination_account = self.accounts.derive(mint_key, receiver)
        create_ix = await self.accounts.ensure_create_instruction(mint_key, receiver, self.payer)
        instructions = build_mint_to_instructions(
            mint=mint_key,
            destination=destination_account,
            payer=self.payer,
            amount=raw_amount,
            create_destination=create_ix,
        )

        self.log_with_context("info", "Minting tokens", mint=str(mint_key),
                              amount=raw_amount, destination=str(destination_account))
        async with self.log_timing(f"Mint {raw_amount} of {mint_key}"):
            await self.pipeline.submit(instructions, self.payer)

        return str(destination_account)

    async def transfer_tokens(self, mint: str, destination_wallet: str,
                              amount: AmountLike) -> str:
        """Transfer tokens from the signer to another wallet.

        Args:
            mint: Token mint address
            destination_wallet: Receiving wallet address
            amount: Human-readable amount to send

        Returns:
            Address of the receiver's associated token account

        Raises:
            ValidationError: For malformed addresses or non-positive amounts
            AccountNotFoundError: If the signer holds no account for this token
            InsufficientBalanceError: If the signer holds less than ``amount``
        """
        mint_key = parse_public_key(mint, "token mint address")
        receiver = parse_public_key(destination_wallet, "destination wallet address")
        ensure_positive_amount(amount)

        mint_info = await self.accounts.get_mint_info(mint_key)
        raw_amount = to_raw(amount, mint_info.decimals)

        source = await self.accounts.get_token_account(mint_key, self.payer)
        if source.amount < raw_amount:
            raise InsufficientBalanceError(
                held=to_decimal(source.amount, mint_info.decimals),
                requested=str(amount),
                mint=str(mint_key),
            )

        destination_account = self.accounts.derive(mint_key, receiver)
        create_ix = await self.accounts.ensure_create_instruction(mint_key, receiver, self.payer)
        instructions = build_transfer_instructions(
            source=parse_public_key(source.address),
            destination=destination_account,
            payer=self.payer,
            amount=raw_amount,
            create_destination=create_ix,
        )

        self.log_with_context("info", "Transferring tokens", mint=str(mint_key),
                              amount=raw_amount, destination=str(destination_account))
        async with self.log_timing(f"Transfer {raw_amount} of {mint_key}"):
            await self.pipeline.submit(instructions, self.payer)

        return str(destination_account)

    def _check_mint_authority(self, mint_info: MintInfo) -> None:
        if mint_info.mint_authority != str(self.payer):
            raise NotMintAuthorityError(
                mint=mint_info.address,
                payer=str(self.payer),
                mint_authority=mint_info.mint_authority,
            )
