"""
Timestamp handling for Squad server logs.

Log lines carry ``YYYY.MM.DD-HH.MM.SS:mmm`` tokens in UTC. State files store
instants as ISO-8601 strings with an explicit offset.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)

LOG_TIMESTAMP_FORMAT = "%Y.%m.%d-%H.%M.%S:%f"
LOG_TIMESTAMP_PATTERN = re.compile(r'^\d{4}\.\d{2}\.\d{2}-\d{2}\.\d{2}\.\d{2}:\d{3}$')

# Start of time for a fresh state file.
EPOCH_DEFAULT = datetime(1985, 9, 21, 5, 0, 0, tzinfo=timezone.utc)


def parse_timestamp(token: str) -> Optional[datetime]:
    """
    Parse a log timestamp token into an aware UTC datetime.

    Args:
        token: Timestamp such as ``2021.01.01-00.00.00:000``

    Returns:
        The parsed instant, or None if the token is malformed.
    """
    if not LOG_TIMESTAMP_PATTERN.match(token):
        logger.warning(f"Invalid log timestamp: {token!r}")
        return None
    try:
        parsed = datetime.strptime(token, LOG_TIMESTAMP_FORMAT)
    except ValueError as e:
        logger.warning(f"Invalid log timestamp {token!r}: {e}")
        return None
    return parsed.replace(tzinfo=timezone.utc)


def format_timestamp(instant: datetime) -> str:
    """Format an instant as a log timestamp token (millisecond precision)."""
    instant = instant.astimezone(timezone.utc)
    return f"{instant.strftime('%Y.%m.%d-%H.%M.%S')}:{instant.microsecond // 1000:03d}"


def to_iso(instant: datetime) -> str:
    """Serialize an instant for the state file."""
    return instant.isoformat()


def from_iso(value: str) -> datetime:
    """
    Parse an instant written by :func:`to_iso`.

    A trailing ``Z`` is accepted as UTC. Naive values are taken as UTC.

    Raises:
        ValueError: If the value is not an ISO-8601 timestamp.
    """
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
