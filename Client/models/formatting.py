"""
PatraKosh Client - Display Formatting Helpers

Author: PatraKosh Project
"""

import math
from typing import Optional

from .auth import UserProfile
from .file_record import FileRecord, CollectionStats, DEFAULT_MIME_TYPE


SIZE_UNITS = ['B', 'KB', 'MB', 'GB', 'TB']


def format_bytes(size_bytes: int) -> str:
    """
    Format a byte count for display.

    Bytes are shown without decimals, larger units with two
    (0 -> "0 B", 512 -> "512 B", 1024 -> "1.00 KB").
    """
    if not size_bytes or size_bytes <= 0:
        return "0 B"

    index = min(int(math.floor(math.log(size_bytes, 1024))), len(SIZE_UNITS) - 1)
    value = size_bytes / math.pow(1024, index)

    # log() can land just below an exact power of 1024
    if index + 1 < len(SIZE_UNITS) and value >= 1024:
        index += 1
        value /= 1024

    decimals = 0 if index == 0 else 2
    return f"{value:.{decimals}f} {SIZE_UNITS[index]}"


def display_mime_type(record: FileRecord) -> str:
    return record.mime_type or DEFAULT_MIME_TYPE


def display_user_name(user: Optional[UserProfile]) -> str:
    """Name shown in "Signed in as ...": username, then email, then "User"."""
    if user is None:
        return "User"
    return user.username or user.email or "User"


def summarize_stats(stats: CollectionStats) -> str:
    return f"{stats.file_count} files • {format_bytes(stats.storage_used)} used"


def empty_list_text(loading: bool) -> str:
    return "Loading…" if loading else "No files found"
