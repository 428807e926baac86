"""
PatraKosh Client - API Error Exception

Base exception class for all API-related errors.

Author: PatraKosh Project
"""

from typing import Optional


class PatraKoshAPIError(Exception):
    """
    Base exception for API errors.

    Attributes:
        server_message: The "message" field of the server's JSON error body,
                        or None when the server sent none (e.g. network failure)
        status_code: HTTP status code, or None for transport failures
    """

    def __init__(self, message: str, server_message: Optional[str] = None,
                 status_code: Optional[int] = None):
        super().__init__(message)
        self.server_message = server_message
        self.status_code = status_code

    def user_message(self, fallback: str) -> str:
        """
        Text to show the user for this failure.

        Args:
            fallback: Fixed string used when the server gave no message

        Returns:
            The server-provided message if present, otherwise the fallback
        """
        return self.server_message or fallback
