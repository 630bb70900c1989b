"""Unit tests for the command line interface."""

import json

import pytest
from click.testing import CliRunner
from solders.keypair import Keypair

from spl_token_manager.__main__ import cli


@pytest.fixture
def keypair_file(tmp_path):
    path = tmp_path / "id.json"
    path.write_text(json.dumps(list(bytes(Keypair()))))
    return str(path)


def test_transfer_zero_amount(keypair_file):
    """Test that a rejected transfer exits with an explanation."""
    runner = CliRunner()

    result = runner.invoke(cli, [
        "--keypair", keypair_file, "transfer",
        "--mint", str(Keypair().pubkey()),
        "--to", str(Keypair().pubkey()),
        "--amount", "0",
    ], obj={})

    assert result.exit_code == 1
    assert "Amount must be greater than zero" in result.output


def test_missing_keypair_file(tmp_path):
    """Test that an unreadable keypair is reported."""
    runner = CliRunner()

    result = runner.invoke(cli, [
        "--keypair", str(tmp_path / "missing.json"), "create-token",
    ], obj={})

    assert result.exit_code == 1
    assert "Keypair file not found" in result.output


def test_help_lists_commands():
    """Test the command group."""
    result = CliRunner().invoke(cli, ["--help"], obj={})

    assert result.exit_code == 0
    for command in ("create-token", "mint", "transfer", "balances", "history"):
        assert command in result.output
