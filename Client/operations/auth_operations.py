"""
PatraKosh Client - Authentication Operations Module

Login, signup and logout. Successful login/signup stores the returned token
and user profile in the session; logout removes them.

Author: PatraKosh Project
"""

import logging
from typing import Optional

from exceptions import PatraKoshAPIError
from models import UserProfile

# Configure logging
logger = logging.getLogger(__name__)


# Messages shown when the server did not provide one
LOGIN_FAILED = "Login failed"
SIGNUP_FAILED = "Signup failed"


class AuthOperations:
    """
    Authentication flows against the server.

    Errors are raised as PatraKosh exceptions; callers show
    `error.user_message(LOGIN_FAILED)` (or SIGNUP_FAILED). For signup field
    errors that message is the joined "field: error | field: error" text.
    """

    def __init__(self, api_client, session_manager):
        """
        Args:
            api_client: PatraKoshAPI instance
            session_manager: SessionManager that persists the token and user
        """
        self.api = api_client
        self.session = session_manager

    def login(self, username_or_email: str, password: str) -> Optional[UserProfile]:
        """
        Log in and store the session.

        Returns:
            The signed-in user's profile

        Raises:
            PatraKoshAPIError: If login fails
        """
        try:
            result = self.api.login(username_or_email.strip(), password)
        except PatraKoshAPIError as e:
            logger.warning(f"Login failed: {e.user_message(LOGIN_FAILED)}")
            raise

        self.session.set_auth(result.token, result.user)
        return result.user

    def signup(self, username: str, email: str, password: str,
               confirm_password: str) -> Optional[UserProfile]:
        """
        Create an account and store the session.

        Returns:
            The new user's profile

        Raises:
            PatraKoshValidationError: If individual fields are rejected
            PatraKoshAPIError: If signup fails for any other reason
        """
        try:
            result = self.api.signup(username.strip(), email.strip(), password, confirm_password)
        except PatraKoshAPIError as e:
            logger.warning(f"Signup failed: {e.user_message(SIGNUP_FAILED)}")
            raise

        self.session.set_auth(result.token, result.user)
        return result.user

    def logout(self):
        """Forget the stored token and user."""
        self.session.clear_auth()
        logger.info("Logged out")
