"""Command line interface for the SPL token manager."""

import asyncio
import datetime
import sys
from typing import Any, Awaitable, Callable, Optional

import click

from spl_token_manager.config import AppConfig, get_app_config
from spl_token_manager.logging_config import configure_logging, get_logger
from spl_token_manager.services.account_service import AccountService
from spl_token_manager.services.token_service import TokenService
from spl_token_manager.services.transaction_service import TransactionService
from spl_token_manager.solana_client import get_solana_client
from spl_token_manager.utils.errors import TokenManagerError, explain_error
from spl_token_manager.utils.validation import format_address
from spl_token_manager.wallet import KeypairSigner

logger = get_logger(__name__)


def _run(ctx: click.Context, action: Callable[..., Awaitable[Any]], **kwargs: Any) -> Any:
    """Run an async action against a fresh client and report errors to the user."""
    config: AppConfig = ctx.obj["config"]

    async def runner():
        async with get_solana_client(config.solana) as client:
            return await action(client, config, **kwargs)

    try:
        return asyncio.run(runner())
    except TokenManagerError as e:
        logger.debug(f"Operation failed: {e.to_dict()}")
        click.echo(f"Error: {explain_error(e)}", err=True)
        sys.exit(1)


def _signer(config: AppConfig, keypair_path: Optional[str]) -> KeypairSigner:
    return KeypairSigner.from_file(keypair_path or config.wallet.keypair_path)


@click.group()
@click.option("--keypair", "keypair_path", type=str, default=None,
              help="Path to a Solana CLI keypair file (defaults to WALLET_KEYPAIR_PATH)")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                                               case_sensitive=False), default=None,
              help="Log level (defaults to LOG_LEVEL)")
@click.pass_context
def cli(ctx: click.Context, keypair_path: Optional[str], log_level: Optional[str]) -> None:
    """Create, mint and transfer SPL tokens."""
    config = get_app_config()
    configure_logging(log_level or config.log_level)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["keypair_path"] = keypair_path
    logger.debug(f"Using cluster {config.solana.cluster} at {config.solana.rpc_url.split('?')[0]}")


@cli.command("create-token")
@click.option("--decimals", type=int, default=9, show_default=True)
@click.option("--freeze-authority", type=str, default=None)
@click.pass_context
def create_token(ctx: click.Context, decimals: int, freeze_authority: Optional[str]) -> None:
    """Create a new token with the wallet as mint authority."""
    async def action(client, config):
        service = TokenService(client, _signer(config, ctx.obj["keypair_path"]))
        return await service.create_token(decimals, freeze_authority)

    mint = _run(ctx, action)
    click.echo(f"Token created with address: {mint}")


@cli.command("mint")
@click.option("--mint", "mint_address", required=True, type=str)
@click.option("--amount", required=True, type=str)
@click.option("--to", "destination", type=str, default=None,
              help="Receiving wallet (defaults to your own)")
@click.pass_context
def mint(ctx: click.Context, mint_address: str, amount: str, destination: Optional[str]) -> None:
    """Mint new supply of a token you control."""
    async def action(client, config):
        service = TokenService(client, _signer(config, ctx.obj["keypair_path"]))
        return await service.mint_tokens(mint_address, amount, destination)

    account = _run(ctx, action)
    click.echo(f"Minted {amount} tokens to {account}")


@cli.command("transfer")
@click.option("--mint", "mint_address", required=True, type=str)
@click.option("--to", "destination", required=True, type=str)
@click.option("--amount", required=True, type=str)
@click.pass_context
def transfer(ctx: click.Context, mint_address: str, destination: str, amount: str) -> None:
    """Send tokens to another wallet."""
    async def action(client, config):
        service = TokenService(client, _signer(config, ctx.obj["keypair_path"]))
        return await service.transfer_tokens(mint_address, destination, amount)

    account = _run(ctx, action)
    click.echo(f"Sent {amount} tokens to {account}")


@cli.command("balances")
@click.option("--owner", type=str, default=None, help="Wallet to inspect (defaults to your own)")
@click.pass_context
def balances(ctx: click.Context, owner: Optional[str]) -> None:
    """Show SOL and token balances."""
    async def action(client, config):
        wallet = owner or str(_signer(config, ctx.obj["keypair_path"]).pubkey)
        service = AccountService(client)
        return wallet, await service.get_sol_balance(wallet), await service.get_token_balances(wallet)

    wallet, sol, tokens = _run(ctx, action)
    click.echo(f"Wallet {wallet}: {sol} SOL")
    if not tokens:
        click.echo("No tokens found in your wallet")
    for balance in tokens:
        click.echo(f"  Mint {format_address(balance.mint)}  "
                   f"Account {format_address(balance.address)}  {balance.formatted_amount}")


@cli.command("history")
@click.option("--owner", type=str, default=None, help="Wallet to inspect (defaults to your own)")
@click.option("--limit", type=int, default=None)
@click.pass_context
def history(ctx: click.Context, owner: Optional[str], limit: Optional[int]) -> None:
    """Show recent token transactions."""
    async def action(client, config):
        wallet = owner or str(_signer(config, ctx.obj["keypair_path"]).pubkey)
        service = TransactionService(client, config=config.history)
        return await service.get_recent_transactions(wallet, limit)

    records = _run(ctx, action)
    if not records:
        click.echo("No transactions found")
    for record in records:
        when = datetime.datetime.fromtimestamp(record.timestamp, tz=datetime.timezone.utc)
        click.echo(f"{when:%Y-%m-%d %H:%M:%S}  {record.kind.value:<8}  "
                   f"{format_address(record.mint)}  {record.signature}")


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
