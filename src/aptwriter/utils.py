import datetime
import logging
from email.utils import format_datetime
from os import getenv
from pathlib import Path

from dateutil.parser import parse as parse_date

from aptwriter.exceptions import AptRepoError, ErrorKind

logger = logging.getLogger(__name__)


def try_parse_date(date_str: str | None) -> datetime.datetime | None:
    """Try to parse a date string into a timestamp.

    Args:
        date_str: The date string to parse (e.g., "2024-05-01 12:00" or an RFC 2822 date)

    Returns:
        The parsed timestamp, or None if parsing failed or date_str is None
    """

    try:
        return parse_date(date_str) if date_str else None
    except (ValueError, OverflowError) as e:
        logger.debug(f"Failed to parse date '{date_str}': {e}")
        return None


def source_date() -> datetime.datetime:
    """Timestamp to stamp into a Release file, honouring SOURCE_DATE_EPOCH."""
    if epoch := getenv("SOURCE_DATE_EPOCH"):
        try:
            return datetime.datetime.fromtimestamp(int(epoch), tz=datetime.UTC)
        except ValueError as e:
            raise AptRepoError(f"invalid SOURCE_DATE_EPOCH: {epoch}", kind=ErrorKind.CONFIG, cause=e)
    return datetime.datetime.now(tz=datetime.UTC)


def format_release_date(value: datetime.datetime) -> str:
    """Format a timestamp the way Release files carry it (RFC 2822, UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.UTC)
    value = value.astimezone(datetime.UTC).replace(microsecond=0)
    # format_datetime emits "+0000" for UTC; apt-ftparchive writes "UTC"
    return format_datetime(value, usegmt=True).replace("GMT", "UTC")


def read_first_line(path: Path) -> str:
    """Return the first line of a text file without its line terminator."""
    try:
        with path.open("r", encoding="utf-8") as f:
            return f.readline().rstrip("\r\n")
    except OSError as e:
        raise AptRepoError(f"reading passphrase file failed: {path}", kind=ErrorKind.IO, cause=e)
