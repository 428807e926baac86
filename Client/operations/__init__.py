"""
PatraKosh Client - Operations Package

This package contains the sync controller, the download helper and the
authentication flows.
"""

from .sync_controller import (
    SyncController,
    LOAD_FAILED,
    UPLOAD_FAILED,
    DELETE_FAILED,
    RENAME_FAILED,
    DOWNLOAD_FAILED
)
from .transfer_helper import TransferHelper, safe_filename
from .auth_operations import AuthOperations, LOGIN_FAILED, SIGNUP_FAILED

__all__ = [
    'SyncController',
    'TransferHelper',
    'AuthOperations',
    'safe_filename',
    'LOAD_FAILED',
    'UPLOAD_FAILED',
    'DELETE_FAILED',
    'RENAME_FAILED',
    'DOWNLOAD_FAILED',
    'LOGIN_FAILED',
    'SIGNUP_FAILED'
]
