# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Wall-clock seam and SigV4 timestamp formatting.

Everything that reads the current time goes through a ``Clock`` so tests
can pin the instant a URL is signed at.
"""

from collections.abc import Callable
from datetime import UTC, datetime


Clock = Callable[[], datetime]

#: ISO 8601 basic format used by ``X-Amz-Date``.
AMZ_DATE_FORMAT = "%Y%m%dT%H%M%SZ"

#: Date part of the credential scope.
DATE_STAMP_FORMAT = "%Y%m%d"


def utc_now() -> datetime:
    """Return the current UTC time truncated to whole seconds."""
    return datetime.now(UTC).replace(microsecond=0)


def as_utc(timestamp: datetime) -> datetime:
    """Normalize a timestamp to aware UTC.

    Naive datetimes are taken to already be in UTC.
    """
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=UTC)
    return timestamp.astimezone(UTC)


def amz_date(timestamp: datetime) -> str:
    """Format a timestamp as ``YYYYMMDDTHHMMSSZ``."""
    return as_utc(timestamp).strftime(AMZ_DATE_FORMAT)


def date_stamp(timestamp: datetime) -> str:
    """Format a timestamp as ``YYYYMMDD``."""
    return as_utc(timestamp).strftime(DATE_STAMP_FORMAT)
