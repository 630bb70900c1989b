"""
Signing and submission of token transactions.

``SubmissionPipeline.submit`` runs one transaction through a fixed sequence:
fetch a blockhash, build the unsigned transaction, apply extra partial
signatures, hand it to the wallet signer, broadcast, and confirm against the
same blockhash. A pipeline call owns its transaction; nothing is reused
between calls.
"""

from typing import Sequence

from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from spl_token_manager.models.token import SubmissionResult
from spl_token_manager.services.base_service import BaseService
from spl_token_manager.solana_client import SolanaClient
from spl_token_manager.utils.errors import (
    BroadcastFailedError,
    ConfirmationTimeoutError,
    RpcError,
    SigningRejectedError,
)
from spl_token_manager.wallet import TransactionSigner


class SubmissionPipeline(BaseService):
    """Builds, signs, broadcasts and confirms transactions."""
    
    def __init__(self, solana_client: SolanaClient, signer: TransactionSigner):
        """
        Args:
            solana_client: The Solana client to use
            signer: Wallet that pays fees and signs every transaction
        """
        super().__init__()
        self.client = solana_client
        self.signer = signer
    
    async def submit(
        self,
        instructions: Sequence[Instruction],
        payer: Pubkey,
        partial_signers: Sequence[Keypair] = ()
    ) -> SubmissionResult:
        """Sign, send and confirm a transaction made of ``instructions``.
        
        Args:
            instructions: Instructions in execution order
            payer: Fee payer; must be the signer's wallet
            partial_signers: Keypairs of accounts created by the transaction,
                applied before the wallet signs
            
        Returns:
            Signature and the blockhash window it was confirmed in
            
        Raises:
            RpcError: If the blockhash cannot be fetched
            SigningRejectedError: If the signer fails or declines
            BroadcastFailedError: If the ledger refuses or fails the transaction
            ConfirmationTimeoutError: If confirmation does not complete in time
        """
        # 1. Blockhash, fetched as late as possible
        freshness = await self.client.get_latest_blockhash()
        blockhash = Hash.from_string(freshness.blockhash)
        
        # 2. Unsigned transaction bound to that blockhash
        message = Message.new_with_blockhash(list(instructions), payer, blockhash)
        transaction = Transaction.new_unsigned(message)
        
        # 3. New accounts authorize their own creation
        if partial_signers:
            transaction.partial_sign(list(partial_signers), blockhash)
        
        # 4. Wallet signature
        try:
            signed = await self.signer.sign_transaction(transaction)
        except Exception as e:
            self.logger.warning(f"Signer rejected the transaction: {str(e)}")
            raise SigningRejectedError(
                f"Transaction signing was rejected: {str(e)}"
            ) from e
        if signed is None:
            raise SigningRejectedError()
        
        # 5. Broadcast once; a retry could reuse a stale blockhash
        try:
            signature = await self.client.send_raw_transaction(bytes(signed))
        except RpcError as e:
            self.logger.error(f"Broadcast failed: {str(e)}")
            raise BroadcastFailedError(
                f"Failed to send transaction: {e.message}",
                details=e.details
            ) from e
        
        self.log_with_context("info", "Transaction sent, awaiting confirmation",
                              signature=signature)
        
        # 6. Confirm against the same blockhash window
        try:
            status = await self.client.confirm_transaction(
                signature, freshness.blockhash, freshness.last_valid_block_height
            )
        except RpcError as e:
            raise ConfirmationTimeoutError(
                signature,
                message=f"Could not confirm transaction {signature}: {e.message}"
            ) from e
        
        if status is None:
            raise ConfirmationTimeoutError(
                signature,
                details={"last_valid_block_height": freshness.last_valid_block_height}
            )
        if status.get("err"):
            raise BroadcastFailedError(
                f"Transaction {signature} failed: {status['err']}",
                details={"signature": signature, "err": status["err"]}
            )
        
        self.log_with_context("info", "Transaction confirmed", signature=signature)
        return SubmissionResult(
            signature=signature,
            blockhash=freshness.blockhash,
            last_valid_block_height=freshness.last_valid_block_height,
        )
