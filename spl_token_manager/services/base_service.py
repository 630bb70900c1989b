"""
Base service class for SPL token manager services.

This module provides a base class for all services with common
functionality for logging and timing.
"""

import logging
import time
from typing import Optional

from spl_token_manager.logging_config import get_logger, log_with_context


class BaseService:
    """
    Base service class with common functionality.
    
    This class provides:
    - Logging with context
    - Timing of named operations
    """
    
    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the base service.
        
        Args:
            logger: Optional logger instance
        """
        self.logger = logger or get_logger(self.__class__.__name__)
    
    def log_with_context(self, level: str, message: str, **context) -> None:
        """Log a message through this service's logger with extra context."""
        log_with_context(self.logger, level, message, **context)
    
    def log_timing(self, operation_name: str) -> "TimingContextManager":
        """
        Create a context manager to log timing information.
        
        Args:
            operation_name: Name of the operation
            
        Returns:
            Timing context manager
        """
        return TimingContextManager(operation_name, self.logger)


class TimingContextManager:
    """Context manager to log timing information."""
    
    def __init__(self, operation_name: str, logger: logging.Logger):
        """
        Initialize the timing context manager.
        
        Args:
            operation_name: Name of the operation
            logger: Logger to use for logging
        """
        self.operation_name = operation_name
        self.logger = logger
        self.start_time = 0.0
    
    async def __aenter__(self) -> "TimingContextManager":
        self.start_time = time.monotonic()
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        elapsed = time.monotonic() - self.start_time
        if exc_val is not None:
            self.logger.error(
                f"{self.operation_name} failed after {elapsed:.2f}s: {str(exc_val)}"
            )
        else:
            self.logger.info(f"{self.operation_name} completed in {elapsed:.2f}s")
