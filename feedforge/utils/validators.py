"""
FeedForge Input Validators
==========================

Validation for the remote feed URL accepted on the debug round-trip path.
"""

import re
from urllib.parse import urlparse, urlunparse

from .exceptions import ValidationError, ErrorCode


class URLValidator:
    """URL validation and normalization utilities."""

    ALLOWED_SCHEMES = {"http", "https"}

    # Hosts a public feed proxy must never be pointed at
    PRIVATE_HOST_PATTERNS = [
        r"^localhost$",
        r"^127\.\d+\.\d+\.\d+$",
        r"^10\.\d+\.\d+\.\d+$",
        r"^192\.168\.\d+\.\d+$",
        r"^172\.(1[6-9]|2\d|3[01])\.\d+\.\d+$",
        r"^169\.254\.\d+\.\d+$",
        r"^0\.0\.0\.0$",
        r"^\[?::1\]?$",
    ]

    @classmethod
    def validate_feed_url(cls, url: str, allow_private: bool = False) -> str:
        """Validate and normalize a feed URL.

        Args:
            url: URL to validate
            allow_private: Accept loopback and private network hosts

        Returns:
            Normalized URL

        Raises:
            ValidationError: If URL is invalid
        """
        if not url or not isinstance(url, str):
            raise ValidationError(
                "URL is required and must be a string",
                error_code=ErrorCode.VALIDATION_REQUIRED_FIELD,
                field_name="url",
            )

        url = url.strip()

        try:
            parsed = urlparse(url)
        except ValueError as e:
            raise ValidationError(
                f"Invalid URL format: {e}",
                error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
                field_name="url",
            )

        if parsed.scheme.lower() not in cls.ALLOWED_SCHEMES:
            raise ValidationError(
                f"URL scheme must be {' or '.join(sorted(cls.ALLOWED_SCHEMES))}",
                error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
                field_name="url",
            )

        if not parsed.netloc or not parsed.hostname:
            raise ValidationError(
                "URL must include a hostname",
                error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
                field_name="url",
            )

        if not allow_private and cls.is_private_host(parsed.hostname):
            raise ValidationError(
                "URL points at a private or loopback host",
                error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
                field_name="url",
            )

        return urlunparse(
            parsed._replace(
                scheme=parsed.scheme.lower(),
                netloc=parsed.netloc.lower(),
                path=parsed.path or "/",
                fragment="",
            )
        )

    @classmethod
    def is_private_host(cls, hostname: str) -> bool:
        host = hostname.lower()
        return any(re.search(pattern, host) for pattern in cls.PRIVATE_HOST_PATTERNS)
