"""Unit tests for keypair loading and the local signer."""

import json

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import Message
from solders.transaction import Transaction

from spl_token_manager.services.instruction_builder import build_transfer_instructions
from spl_token_manager.utils.errors import ConfigurationError
from spl_token_manager.wallet import KeypairSigner, TransactionSigner, load_keypair


def test_load_keypair(tmp_path):
    """Test reading a Solana CLI keypair file."""
    keypair = Keypair()
    path = tmp_path / "id.json"
    path.write_text(json.dumps(list(bytes(keypair))))

    loaded = load_keypair(str(path))

    assert loaded.pubkey() == keypair.pubkey()


def test_load_keypair_missing(tmp_path):
    """Test that a missing file is a configuration error."""
    with pytest.raises(ConfigurationError):
        load_keypair(str(tmp_path / "missing.json"))


def test_load_keypair_malformed(tmp_path):
    """Test that a file of the wrong shape is a configuration error."""
    path = tmp_path / "id.json"
    path.write_text(json.dumps([1, 2, 3]))

    with pytest.raises(ConfigurationError):
        load_keypair(str(path))


@pytest.mark.asyncio
async def test_keypair_signer_signs(signer):
    """Test that the local signer produces a valid signature."""
    # Setup
    instructions = build_transfer_instructions(
        Keypair().pubkey(), Keypair().pubkey(), signer.pubkey, 1
    )
    message = Message.new_with_blockhash(instructions, signer.pubkey, Hash.new_unique())

    # Execute
    signed = await signer.sign_transaction(Transaction.new_unsigned(message))

    # Verify
    signed.verify()
    assert isinstance(signer, TransactionSigner)
    assert isinstance(KeypairSigner(Keypair()), TransactionSigner)
