"""
PatraKosh Client - Validation Error Exception

Exception raised when signup is rejected with field-level validation errors.

Author: PatraKosh Project
"""

from typing import Dict, Optional

from .api_error import PatraKoshAPIError


class PatraKoshValidationError(PatraKoshAPIError):
    """Exception for field-keyed validation errors returned by the server."""

    def __init__(self, field_errors: Dict[str, str], status_code: Optional[int] = None):
        message = " | ".join(f"{field}: {error}" for field, error in field_errors.items())
        # The joined field errors are what the user sees
        super().__init__(message, server_message=message, status_code=status_code)
        self.field_errors = dict(field_errors)
