"""
PatraKosh Client - Server Error Exception

Exception raised for server-reported failures and transport errors.

Author: PatraKosh Project
"""

from .api_error import PatraKoshAPIError


class PatraKoshServerError(PatraKoshAPIError):
    """Exception for server errors."""
    pass
