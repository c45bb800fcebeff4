"""Content fingerprints for commits.

A fingerprint survives rebase and squash-merge because it is derived from the
commit message and the author date only. The committer date and the SHA both
change when GitHub rewrites a pull request onto the main branch, the author
date does not.

Without an author date the fingerprint is built from the message alone, so
two commits with the same message collide.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from .models import Commit

logger = logging.getLogger(__name__)

FNV32_OFFSET_BASIS = 0x811C9DC5
FNV32_PRIME = 0x01000193
_UINT32_MASK = 0xFFFFFFFF


def fnv1a_32(data: bytes, value: int = FNV32_OFFSET_BASIS) -> int:
    """Feed ``data`` into a running 32-bit FNV-1a hash and return the new state."""
    for byte in data:
        value ^= byte
        value = (value * FNV32_PRIME) & _UINT32_MASK
    return value


def as_utc(value: datetime) -> datetime:
    """The same instant in UTC; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def canonical_date(author_date: datetime) -> str:
    """ISO-8601 form of the instant in UTC."""
    return as_utc(author_date).isoformat()


def fingerprint(message: str, author_date: Optional[datetime] = None) -> int:
    """Compute the 32-bit content fingerprint of a commit.

    The message bytes are hashed first, then the canonical author date.

    Args:
        message: Full commit message
        author_date: Author timestamp, if the API reported one

    Returns:
        Unsigned 32-bit fingerprint
    """
    value = fnv1a_32(message.encode("utf-8", "surrogatepass"))
    if author_date is None:
        logger.debug(f"No author date, fingerprint {value:#010x} is message-only")
        return value
    return fnv1a_32(canonical_date(author_date).encode("utf-8", "surrogatepass"), value)


def commit_fingerprint(commit: Commit) -> int:
    """Fingerprint of a Commit value object."""
    return fingerprint(commit.message, commit.author_date)
