"""
PatraKosh Client - Exceptions Package

Contains all exception classes for the PatraKosh client.

Author: PatraKosh Project
"""

from .api_error import PatraKoshAPIError
from .auth_error import PatraKoshAuthError
from .server_error import PatraKoshServerError
from .validation_error import PatraKoshValidationError

__all__ = [
    'PatraKoshAPIError',
    'PatraKoshAuthError',
    'PatraKoshServerError',
    'PatraKoshValidationError'
]
