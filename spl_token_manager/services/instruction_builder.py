"""
Instruction builders for token operations.

The builders are pure: every ledger fact they depend on (rent, account
existence, amounts) is resolved by the caller and passed in. Each returns the
instructions in the order they must execute.
"""

from typing import List, Optional

from solders.instruction import Instruction
from solders.pubkey import Pubkey
from solders.system_program import CreateAccountParams, create_account
from spl.token.constants import MINT_LEN
from spl.token.constants import TOKEN_PROGRAM_ID as SPL_TOKEN_PROGRAM_ID
from spl.token.instructions import (
    InitializeMintParams,
    MintToParams,
    TransferParams,
    initialize_mint,
    mint_to,
    transfer,
)


def build_create_mint_instructions(
    payer: Pubkey,
    mint: Pubkey,
    lamports: int,
    decimals: int,
    freeze_authority: Optional[Pubkey] = None
) -> List[Instruction]:
    """Instructions creating and initializing a new mint.

    The payer becomes the mint authority, and the freeze authority unless one
    is given. The transaction must also be signed by the mint keypair.

    Args:
        payer: Wallet funding the mint account
        mint: Address of the new mint keypair
        lamports: Rent-exempt balance for a mint-sized account
        decimals: Decimal places of the token
        freeze_authority: Optional explicit freeze authority

    Returns:
        ``[create_account, initialize_mint]``
    """
    return [
        create_account(CreateAccountParams(
            from_pubkey=payer,
            to_pubkey=mint,
            lamports=lamports,
            space=MINT_LEN,
            owner=SPL_TOKEN_PROGRAM_ID,
        )),
        initialize_mint(InitializeMintParams(
            decimals=decimals,
            program_id=SPL_TOKEN_PROGRAM_ID,
            mint=mint,
            mint_authority=payer,
            freeze_authority=freeze_authority or payer,
        )),
    ]


def build_mint_to_instructions(
    mint: Pubkey,
    destination: Pubkey,
    payer: Pubkey,
    amount: int,
    create_destination: Optional[Instruction] = None
) -> List[Instruction]:
    """Instructions minting ``amount`` raw units into ``destination``.

    Args:
        mint: Token mint; ``payer`` must be its mint authority
        destination: Receiver's associated token account
        payer: Fee payer and mint authority
        amount: Raw amount to mint
        create_destination: Creation instruction for ``destination``, placed
            first when the account does not exist yet
    """
    instructions = [create_destination] if create_destination is not None else []
    instructions.append(mint_to(MintToParams(
        program_id=SPL_TOKEN_PROGRAM_ID,
        mint=mint,
        dest=destination,
        mint_authority=payer,
        amount=amount,
    )))
    return instructions


def build_transfer_instructions(
    source: Pubkey,
    destination: Pubkey,
    payer: Pubkey,
    amount: int,
    create_destination: Optional[Instruction] = None
) -> List[Instruction]:
    """Instructions moving ``amount`` raw units from ``source`` to ``destination``.

    Args:
        source: Payer's associated token account
        destination: Receiver's associated token account
        payer: Fee payer and owner of ``source``
        amount: Raw amount to transfer
        create_destination: Creation instruction for ``destination``, placed
            first when the account does not exist yet
    """
    instructions = [create_destination] if create_destination is not None else []
    instructions.append(transfer(TransferParams(
        program_id=SPL_TOKEN_PROGRAM_ID,
        source=source,
        dest=destination,
        owner=payer,
        amount=amount,
    )))
    return instructions
