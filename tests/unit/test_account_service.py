"""Unit tests for AccountService."""

from decimal import Decimal

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

from spl_token_manager.constants import ASSOCIATED_TOKEN_PROGRAM_ID, SYSTEM_PROGRAM_ID
from spl_token_manager.services.account_service import AccountService
from spl_token_manager.utils.errors import AccountNotFoundError, RpcError, ValidationError
from tests.fixtures.common import accounts_by_address, make_mint_account, make_token_account


@pytest.fixture
def mint():
    return Keypair().pubkey()


@pytest.fixture
def owner():
    return Keypair().pubkey()


def test_derive_is_deterministic(mint, owner):
    """Test that derivation is pure and matches the associated token program."""
    first = AccountService.derive(mint, owner)
    second = AccountService.derive(mint, owner)

    assert first == second
    assert first == get_associated_token_address(owner, mint)
    assert AccountService.derive(mint, Keypair().pubkey()) != first


@pytest.mark.asyncio
async def test_exists(account_service, mock_solana_client, mint, owner):
    """Test account existence checks."""
    # Setup
    address = AccountService.derive(mint, owner)
    mock_solana_client.get_account_info.side_effect = accounts_by_address({
        str(address): make_token_account(str(mint), str(owner), 0)
    })

    # Execute / Verify
    assert await account_service.exists(address) is True
    assert await account_service.exists(Keypair().pubkey()) is False


@pytest.mark.asyncio
async def test_exists_propagates_rpc_errors(account_service, mock_solana_client, owner):
    """Test that an RPC failure is not mistaken for a missing account."""
    mock_solana_client.get_account_info.side_effect = RpcError("Solana RPC returned HTTP 503",
                                                               http_status=503)

    with pytest.raises(RpcError):
        await account_service.exists(owner)


@pytest.mark.asyncio
async def test_ensure_create_instruction_when_missing(account_service, mock_solana_client,
                                                      mint, owner):
    """Test that a missing account yields a creation instruction."""
    # Setup
    payer = Keypair().pubkey()

    # Execute
    instruction = await account_service.ensure_create_instruction(mint, owner, payer)

    # Verify
    assert instruction is not None
    assert instruction.program_id == Pubkey.from_string(ASSOCIATED_TOKEN_PROGRAM_ID)
    keys = [meta.pubkey for meta in instruction.accounts]
    assert payer in keys
    assert AccountService.derive(mint, owner) in keys
    mock_solana_client.get_account_info.assert_awaited_once_with(
        str(AccountService.derive(mint, owner))
    )


@pytest.mark.asyncio
async def test_ensure_create_instruction_when_present(account_service, mock_solana_client,
                                                      mint, owner):
    """Test that an existing account needs no instruction."""
    mock_solana_client.get_account_info.return_value = make_token_account(str(mint), str(owner), 5)

    assert await account_service.ensure_create_instruction(mint, owner, owner) is None


@pytest.mark.asyncio
async def test_get_mint_info(account_service, mock_solana_client, mint, owner):
    """Test reading a mint."""
    # Setup
    mock_solana_client.get_account_info.return_value = make_mint_account(
        6, str(owner), supply=1_000_000
    )

    # Execute
    info = await account_service.get_mint_info(mint)

    # Verify
    assert info.address == str(mint)
    assert info.decimals == 6
    assert info.mint_authority == str(owner)
    assert info.supply == 1_000_000
    mock_solana_client.get_account_info.assert_awaited_once_with(str(mint))


@pytest.mark.asyncio
async def test_get_mint_info_not_found(account_service, mint):
    """Test that a missing mint is reported."""
    with pytest.raises(AccountNotFoundError) as exc_info:
        await account_service.get_mint_info(mint)

    assert exc_info.value.address == str(mint)


@pytest.mark.asyncio
async def test_get_mint_info_not_a_mint(account_service, mock_solana_client, mint, owner):
    """Test that accounts other than token mints are refused."""
    # A token account is owned by the token program but is not a mint
    mock_solana_client.get_account_info.return_value = make_token_account(str(mint), str(owner), 1)
    with pytest.raises(ValidationError):
        await account_service.get_mint_info(mint)

    # A wallet is owned by the system program
    mock_solana_client.get_account_info.return_value = {
        "lamports": 10, "owner": SYSTEM_PROGRAM_ID, "data": ["", "base64"]
    }
    with pytest.raises(ValidationError):
        await account_service.get_mint_info(mint)


@pytest.mark.asyncio
async def test_get_token_account(account_service, mock_solana_client, mint, owner):
    """Test reading an owner's token account."""
    # Setup
    mock_solana_client.get_account_info.return_value = make_token_account(
        str(mint), str(owner), 2_500_000_000
    )

    # Execute
    account = await account_service.get_token_account(mint, owner)

    # Verify
    assert account.amount == 2_500_000_000
    assert account.address == str(AccountService.derive(mint, owner))


@pytest.mark.asyncio
async def test_get_token_account_not_found(account_service, mint, owner):
    """Test that a missing token account is reported."""
    with pytest.raises(AccountNotFoundError) as exc_info:
        await account_service.get_token_account(mint, owner)

    assert "Could not find tokens in your wallet" in str(exc_info.value)


@pytest.mark.asyncio
async def test_get_token_balances_skips_empty(account_service, mock_solana_client, mint, owner):
    """Test that only non-zero balances are listed."""
    # Setup
    empty_mint = str(Keypair().pubkey())
    mock_solana_client.get_token_accounts_by_owner.return_value = [
        {"pubkey": "acct1", "account": make_token_account(str(mint), str(owner), 1_500_000, 6)},
        {"pubkey": "acct2", "account": make_token_account(empty_mint, str(owner), 0, 6)},
    ]

    # Execute
    balances = await account_service.get_token_balances(str(owner))

    # Verify
    assert len(balances) == 1
    assert balances[0].mint == str(mint)
    assert balances[0].address == "acct1"
    assert balances[0].amount == "1500000"
    assert balances[0].formatted_amount == "1.500000"


@pytest.mark.asyncio
async def test_get_token_balances_invalid_owner(account_service, mock_solana_client):
    """Test that a malformed owner is refused before any RPC call."""
    with pytest.raises(ValidationError):
        await account_service.get_token_balances("not-an-address")

    assert not mock_solana_client.get_token_accounts_by_owner.called


@pytest.mark.asyncio
async def test_get_sol_balance(account_service, mock_solana_client, owner):
    """Test reading a SOL balance."""
    mock_solana_client.get_balance.return_value = 1_250_000_000

    assert await account_service.get_sol_balance(str(owner)) == Decimal("1.25")
