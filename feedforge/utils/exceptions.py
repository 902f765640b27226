"""
FeedForge Exceptions
====================

Every FeedForge error carries a code, a context dict for logs, and a
message fit for end users. Generation-time failures are turned into error
feeds by the handler pipeline; decode failures surface to the caller.
"""

import logging
from enum import Enum
from typing import Any, Dict, Iterator, Optional

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


class ErrorCode(str, Enum):
    """Stable codes, grouped by the letter of the failing area."""

    # C: configuration
    CONFIG_INVALID = "C001"
    CONFIG_MISSING = "C002"
    CONFIG_PARSE_ERROR = "C003"

    # D: decoding
    DECODE_MALFORMED_XML = "D001"
    DECODE_UNKNOWN_DIALECT = "D002"
    DECODE_INVALID_DOCUMENT = "D003"

    # F: fetching remote documents
    FEED_INVALID_URL = "F001"
    FEED_FETCH_TIMEOUT = "F002"
    FEED_NETWORK_ERROR = "F003"
    FEED_HTTP_ERROR = "F004"
    FEED_TOO_LARGE = "F005"

    # G: feed generation
    GENERATION_FAILED = "G001"
    GENERATION_TIMEOUT = "G002"
    GENERATION_INVALID_RESULT = "G003"

    # R: rendering
    RENDER_FAILED = "R001"
    RENDER_UNSUPPORTED_DOCUMENT = "R002"

    # V: input validation
    VALIDATION_REQUIRED_FIELD = "V001"
    VALIDATION_INVALID_FORMAT = "V002"
    VALIDATION_OUT_OF_RANGE = "V003"


class FeedForgeError(Exception):
    """Base class for FeedForge errors.

    Subclasses set ``default_code`` and ``default_recoverable`` and may
    override ``describe_for_user``. Extra keyword arguments (``feed_url``,
    ``field_name`` and so on) are merged into ``context`` unless None.

    Args:
        message: Technical message for logs
        error_code: Overrides the class default code
        context: Initial context for logs
        user_message: Overrides ``describe_for_user``
        recoverable: Overrides the class default
        help_link: URL with more information, used as the error feed item link
    """

    default_code: Optional[ErrorCode] = None
    default_recoverable = False

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        recoverable: Optional[bool] = None,
        help_link: Optional[str] = None,
        **details: Any,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.context = dict(context or {})
        self.context.update({k: v for k, v in details.items() if v is not None})
        self.user_message = user_message or self.describe_for_user(message)
        self.recoverable = self.default_recoverable if recoverable is None else recoverable
        self.help_link = help_link

    def describe_for_user(self, message: str) -> str:
        return message

    def to_dict(self) -> Dict[str, Any]:
        """Flat representation for structured logs."""
        return {
            "error_type": type(self).__name__,
            "error_code": self.error_code.value if self.error_code else None,
            "error_message": str(self),
            "user_message": self.user_message,
            "context": self.context,
            "recoverable": self.recoverable,
        }

    def __str__(self) -> str:
        if self.error_code is None:
            return self.message
        return f"[{self.error_code.value}] {self.message}"


class ConfigurationError(FeedForgeError):
    """Invalid or missing settings (``config_key``)."""

    default_code = ErrorCode.CONFIG_INVALID

    def describe_for_user(self, message: str) -> str:
        return f"Configuration error: {message}"


class ValidationError(FeedForgeError):
    """Rejected input (``field_name``)."""

    default_code = ErrorCode.VALIDATION_INVALID_FORMAT

    def describe_for_user(self, message: str) -> str:
        return f"Invalid {self.context.get('field_name', 'input')}: {message}"


class DecodeError(FeedForgeError):
    """Malformed XML, or a root element no dialect claims.

    Context: ``root`` (Clark notation, when readable) and ``source`` (path
    or URL). Never recoverable: the same bytes fail the same way.
    """

    default_code = ErrorCode.DECODE_MALFORMED_XML

    def __init__(self, message: str, **kwargs: Any):
        kwargs["recoverable"] = False
        super().__init__(message, **kwargs)

    def describe_for_user(self, message: str) -> str:
        return f"Feed could not be read: {message}"


class GenerationError(FeedForgeError):
    """A feed generator failed or returned something that is not a feed (``handler``)."""

    default_code = ErrorCode.GENERATION_FAILED
    default_recoverable = True

    def describe_for_user(self, message: str) -> str:
        return "Feed generation failed"


class GenerationTimeoutError(GenerationError, TimeoutError):
    """The generator missed its deadline (``timeout_ms``)."""

    default_code = ErrorCode.GENERATION_TIMEOUT

    def __init__(self, message: str = "Timeout exceeded.", timeout_ms: Optional[int] = None, **kwargs: Any):
        super().__init__(message, timeout_ms=timeout_ms, **kwargs)

    def describe_for_user(self, message: str) -> str:
        return "Feed generation timed out"

    def __str__(self) -> str:
        return self.message


class RenderError(FeedForgeError):
    """Writing a feed to the response failed (``document_type``)."""

    default_code = ErrorCode.RENDER_FAILED

    def describe_for_user(self, message: str) -> str:
        return "Feed could not be rendered"


class FeedFetchError(FeedForgeError):
    """A remote feed could not be fetched (``feed_url``)."""

    default_code = ErrorCode.FEED_NETWORK_ERROR
    default_recoverable = True

    def describe_for_user(self, message: str) -> str:
        return f"Feed fetch failed: {message}"


def iter_exception_chain(exception: BaseException) -> Iterator[BaseException]:
    """Yield an exception followed by its causes, outermost first.

    Follows ``__cause__`` and, unless suppressed, ``__context__``. Each
    exception is yielded once even if the chain loops back on itself.
    """
    seen = set()
    current: Optional[BaseException] = exception
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None


def handle_exception(
    exception: Exception,
    logger: logging.Logger,
    operation: str,
    context: Optional[Dict[str, Any]] = None,
) -> FeedForgeError:
    """Log ``exception`` and return it as a FeedForgeError.

    FeedForge errors are returned unchanged; anything else is wrapped, with
    the original as ``__cause__``.
    """
    context = context or {}

    if isinstance(exception, FeedForgeError):
        logger.error(
            f"{operation} failed: {exception}",
            extra={"error_details": exception.to_dict(), **context},
            exc_info=True,
        )
        return exception

    logger.error(
        f"{operation} raised {type(exception).__name__}: {exception}",
        extra={"error_type": type(exception).__name__, **context},
        exc_info=True,
    )
    wrapped = FeedForgeError(
        f"{operation} failed: {exception}",
        context={"original_error": str(exception), **context},
        user_message=UNEXPECTED_ERROR_MESSAGE,
        recoverable=True,
    )
    wrapped.__cause__ = exception
    return wrapped


def is_retryable_error(exception: Exception) -> bool:
    if isinstance(exception, FeedForgeError):
        return exception.recoverable
    return isinstance(exception, (ConnectionError, TimeoutError))


def get_user_friendly_message(exception: Exception) -> str:
    if isinstance(exception, FeedForgeError):
        return exception.user_message
    return UNEXPECTED_ERROR_MESSAGE
