"""
FeedForge Utilities
===================

Exceptions, logging and input validation shared across the package.
"""

from .exceptions import (
    ErrorCode,
    FeedForgeError,
    ConfigurationError,
    ValidationError,
    DecodeError,
    GenerationError,
    GenerationTimeoutError,
    RenderError,
    FeedFetchError,
    iter_exception_chain,
)
from .logging import get_logger_for_component, configure_application_logging

__all__ = [
    "ErrorCode",
    "FeedForgeError",
    "ConfigurationError",
    "ValidationError",
    "DecodeError",
    "GenerationError",
    "GenerationTimeoutError",
    "RenderError",
    "FeedFetchError",
    "iter_exception_chain",
    "get_logger_for_component",
    "configure_application_logging",
]
