"""
PatraKosh Client - Authentication Error Exception

Exception raised for authentication-related errors (HTTP 401 or missing token).

Author: PatraKosh Project
"""

from .api_error import PatraKoshAPIError


class PatraKoshAuthError(PatraKoshAPIError):
    """Exception for authentication errors."""
    pass
