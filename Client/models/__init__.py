"""
PatraKosh Client - Models Package

Contains data models and display helpers used by the client.

Author: PatraKosh Project
"""

from .file_record import FileRecord, CollectionStats, DEFAULT_MIME_TYPE
from .auth import LoginRequest, SignupRequest, UserProfile, AuthResponse
from .collection import CollectionView, FileCollectionCache
from .operation_state import OperationState
from .formatting import (
    format_bytes,
    display_mime_type,
    display_user_name,
    summarize_stats,
    empty_list_text
)

__all__ = [
    'FileRecord',
    'CollectionStats',
    'DEFAULT_MIME_TYPE',
    'LoginRequest',
    'SignupRequest',
    'UserProfile',
    'AuthResponse',
    'CollectionView',
    'FileCollectionCache',
    'OperationState',
    'format_bytes',
    'display_mime_type',
    'display_user_name',
    'summarize_stats',
    'empty_list_text'
]
