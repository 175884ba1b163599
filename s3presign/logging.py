# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Logging configuration that keeps credentials out of log output.

Two kinds of redaction are applied to every record:

- Registered secrets (auth tokens, session tokens) are replaced with
  ``[REDACTED]`` wherever they appear.
- Signature-bearing query parameters of presigned URLs
  (``X-Amz-Signature``, ``X-Amz-Security-Token``, ``X-Amz-Credential``)
  have their values masked, since a logged URL is a usable credential
  until it expires.

Usage:
    # In entry points
    from s3presign.logging import configure_logging
    configure_logging(level=logging.DEBUG, secrets=[app_key, session_token])

    # In library modules
    import logging
    logger = logging.getLogger(__name__)
"""

import logging
import re
import threading
from collections.abc import Iterable
from typing import ClassVar


_PRESIGNED_PARAM_RE = re.compile(
    r"(X-Amz-(?:Signature|Security-Token|Credential)=)[^&\s\"']+"
)


def redact_presigned_url(text: str) -> str:
    """Mask the signature-bearing query values of any URL in ``text``."""
    return _PRESIGNED_PARAM_RE.sub(r"\1[REDACTED]", text)


class SecretFilter(logging.Filter):
    """Logging filter that redacts secrets and presigned URL credentials.

    Secrets are registered process-wide with ``register_secret()``, usually
    once at startup through ``configure_logging(secrets=...)``.  Signing
    never registers anything.

    Example:
        SecretFilter.register_secret("K001xyz-application-key")
        handler.addFilter(SecretFilter())
        logger.info("Signed %s", url)
        # Output: "Signed https://...&X-Amz-Signature=[REDACTED]"
    """

    _secrets: ClassVar[set[str]] = set()
    _pattern: ClassVar[re.Pattern[str] | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def _redact(self, text: str) -> str:
        pattern = self._pattern
        if pattern is not None:
            text = pattern.sub("[REDACTED]", text)
        return redact_presigned_url(text)

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact the record in place.

        Returns:
            Always True (records are modified, never suppressed).
        """
        msg = str(record.msg)
        redacted = self._redact(msg)
        if redacted != msg:
            record.msg = redacted
        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    k: self._redact(v) if isinstance(v, str) else v
                    for k, v in record.args.items()
                }
            else:
                record.args = tuple(
                    self._redact(arg) if isinstance(arg, str) else arg
                    for arg in record.args
                )
        return True

    @classmethod
    def register_secret(cls, secret: str | None) -> None:
        """Register a secret to be redacted from all log output.

        Empty values and None are ignored.
        """
        if not secret:
            return
        with cls._lock:
            if secret not in cls._secrets:
                cls._secrets.add(secret)
                cls._rebuild_pattern()

    @classmethod
    def clear_secrets(cls) -> None:
        """Clear all registered secrets. Primarily for testing."""
        with cls._lock:
            cls._secrets.clear()
            cls._pattern = None

    @classmethod
    def _rebuild_pattern(cls) -> None:
        # Caller holds _lock
        if cls._secrets:
            # Longest first so a secret containing another is fully masked
            ordered = sorted(cls._secrets, key=len, reverse=True)
            escaped = [re.escape(s) for s in ordered]
            cls._pattern = re.compile("|".join(escaped))
        else:
            cls._pattern = None


def configure_logging(
    level: int = logging.INFO,
    format_string: str | None = None,
    add_secret_filter: bool = True,
    secrets: Iterable[str | None] = (),
) -> None:
    """Configure the root logger.

    Replaces any existing root handlers with a single stream handler.

    Args:
        level: The logging level (e.g., logging.INFO, logging.DEBUG).
        format_string: Custom format string. If None, uses default format.
        add_secret_filter: Whether to attach ``SecretFilter``.
        secrets: Credentials to redact, such as the application key and
            any session token.  Empty values are skipped.
    """
    for secret in secrets:
        SecretFilter.register_secret(secret)

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format_string))

    if add_secret_filter:
        handler.addFilter(SecretFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for existing_handler in root_logger.handlers[:]:
        root_logger.removeHandler(existing_handler)

    root_logger.addHandler(handler)
