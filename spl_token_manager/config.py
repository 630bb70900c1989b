"""Configuration module for the SPL token manager."""

# Standard library imports
import os
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, Optional

# Third-party library imports
from dotenv import load_dotenv

# Internal imports
from spl_token_manager.constants import CLUSTER_URLS, COMMITMENT_LEVELS, DEFAULT_CLUSTER

# Load environment variables from .env file
load_dotenv()


def get_env_var(key: str, default: Any = None, required: bool = False,
                validator: Optional[Callable[[str], Any]] = None) -> Any:
    """Get and validate environment variable.
    
    Args:
        key: Environment variable name
        default: Default value if not present
        required: If True, raises ValueError when not found
        validator: Optional validation function
        
    Returns:
        The environment variable value or default
        
    Raises:
        ValueError: If required and not found, or fails validation
    """
    value = os.environ.get(key)
    
    if value is None:
        if required:
            raise ValueError(f"Required environment variable '{key}' not found")
        return default
    
    if validator:
        try:
            return validator(value)
        except Exception as e:
            raise ValueError(f"Invalid value for environment variable '{key}': {str(e)}")
    
    return value


def int_validator(value: str) -> int:
    """Validate and convert string to integer.
    
    Raises:
        ValueError: If not a valid integer
    """
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid integer")


def float_validator(value: str) -> float:
    """Validate and convert string to a non-negative float."""
    try:
        number = float(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid number")
    if number < 0:
        raise ValueError(f"'{value}' must not be negative")
    return number


def url_validator(value: str) -> str:
    """Validate URL format.
    
    Args:
        value: URL to validate
        
    Returns:
        The validated URL
        
    Raises:
        ValueError: If not a valid URL format
    """
    url_pattern = re.compile(
        r'^(https?):\/\/'  # http:// or https://
        r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+(?:[A-Z]{2,6}\.?|[A-Z0-9-]{2,}\.?)|'  # domain
        r'localhost|'  # localhost
        r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})'  # or IPv4
        r'(?::\d+)?'  # optional port
        r'(?:/?|[/?]\S+)$', re.IGNORECASE)
    
    if not url_pattern.match(value):
        raise ValueError(f"'{value}' is not a valid URL")
    return value


def commitment_validator(value: str) -> str:
    """Validate Solana commitment level.
    
    Raises:
        ValueError: If not a valid commitment level
    """
    if value.lower() not in COMMITMENT_LEVELS:
        raise ValueError(f"Commitment must be one of: {', '.join(COMMITMENT_LEVELS)}")
    return value.lower()


def cluster_validator(value: str) -> str:
    """Validate the name of a public Solana cluster."""
    if value.lower() not in CLUSTER_URLS:
        raise ValueError(f"Cluster must be one of: {', '.join(CLUSTER_URLS)}")
    return value.lower()


def log_level_validator(value: str) -> str:
    """Validate log level.
    
    Raises:
        ValueError: If not a valid log level
    """
    valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
    upper_value = value.upper()
    if upper_value not in valid_levels:
        raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
    return upper_value


@dataclass
class SolanaConfig:
    """Configuration for the Solana RPC connection."""
    
    rpc_url: str = CLUSTER_URLS[DEFAULT_CLUSTER]
    cluster: str = DEFAULT_CLUSTER
    rpc_user: Optional[str] = None
    rpc_password: Optional[str] = None
    commitment: str = "confirmed"
    timeout: float = 30.0  # seconds
    confirm_poll_interval: float = 1.0  # seconds
    
    @property
    def has_auth(self) -> bool:
        """Check if authentication credentials are provided.
        
        Returns:
            True if both username and password are set, False otherwise
        """
        return bool(self.rpc_user and self.rpc_password)


@lru_cache()
def get_solana_config() -> SolanaConfig:
    """Get Solana configuration from environment variables.
    
    An explicit ``SOLANA_RPC_URL`` wins over the endpoint of ``SOLANA_CLUSTER``.
    
    Returns:
        SolanaConfig instance
        
    Raises:
        ValueError: If environment variables fail validation
    """
    cluster = get_env_var("SOLANA_CLUSTER", DEFAULT_CLUSTER, validator=cluster_validator)
    return SolanaConfig(
        rpc_url=get_env_var("SOLANA_RPC_URL", CLUSTER_URLS[cluster], validator=url_validator),
        cluster=cluster,
        rpc_user=get_env_var("SOLANA_RPC_USER"),
        rpc_password=get_env_var("SOLANA_RPC_PASSWORD"),
        commitment=get_env_var("SOLANA_COMMITMENT", "confirmed",
                               validator=commitment_validator),
        timeout=get_env_var("SOLANA_TIMEOUT", 30.0, validator=float_validator),
        confirm_poll_interval=get_env_var("SOLANA_CONFIRM_POLL_INTERVAL", 1.0,
                                          validator=float_validator),
    )


@dataclass
class RetryConfig:
    """Backoff settings for rate-limited RPC reads."""
    
    max_retries: int = 5
    initial_delay: float = 1.5  # seconds
    multiplier: float = 1.5
    max_jitter: float = 0.5  # seconds
    max_delay: float = 30.0  # seconds


@lru_cache()
def get_retry_config() -> RetryConfig:
    """Get retry configuration from environment variables."""
    return RetryConfig(
        max_retries=get_env_var("RETRY_MAX_RETRIES", 5, validator=int_validator),
        initial_delay=get_env_var("RETRY_INITIAL_DELAY", 1.5, validator=float_validator),
        multiplier=get_env_var("RETRY_MULTIPLIER", 1.5, validator=float_validator),
        max_jitter=get_env_var("RETRY_MAX_JITTER", 0.5, validator=float_validator),
        max_delay=get_env_var("RETRY_MAX_DELAY", 30.0, validator=float_validator),
    )


@dataclass
class HistoryConfig:
    """Configuration for transaction history retrieval."""
    
    limit: int = 10
    fetch_delay: float = 0.3  # seconds between per-signature fetches


@lru_cache()
def get_history_config() -> HistoryConfig:
    """Get history configuration from environment variables."""
    return HistoryConfig(
        limit=get_env_var("HISTORY_LIMIT", 10, validator=int_validator),
        fetch_delay=get_env_var("HISTORY_FETCH_DELAY", 0.3, validator=float_validator),
    )


@dataclass
class WalletConfig:
    """Location of the local keypair used by the CLI signer."""
    
    keypair_path: str = os.path.expanduser("~/.config/solana/id.json")


@lru_cache()
def get_wallet_config() -> WalletConfig:
    """Get wallet configuration from environment variables."""
    return WalletConfig(
        keypair_path=os.path.expanduser(
            get_env_var("WALLET_KEYPAIR_PATH", "~/.config/solana/id.json")
        )
    )


@dataclass
class AppConfig:
    """Comprehensive application configuration."""
    
    solana: SolanaConfig = field(default_factory=get_solana_config)
    retry: RetryConfig = field(default_factory=get_retry_config)
    history: HistoryConfig = field(default_factory=get_history_config)
    wallet: WalletConfig = field(default_factory=get_wallet_config)
    log_level: str = field(
        default_factory=lambda: get_env_var("LOG_LEVEL", "INFO", validator=log_level_validator)
    )


def get_app_config() -> AppConfig:
    """Get the comprehensive application configuration."""
    return AppConfig()
