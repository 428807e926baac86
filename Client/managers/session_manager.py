"""
PatraKosh Client - Session Manager

Holds the signed-in user's bearer token and profile. Both are persisted in
the OS credential store via keyring under two fixed keys, written at
login/signup and removed at logout.

Author: PatraKosh Project
"""

import json
import logging
from typing import Optional, Tuple

import keyring
from keyring.errors import PasswordDeleteError

from models import UserProfile

# Configure logging
logger = logging.getLogger(__name__)


KEYRING_SERVICE = "PatraKosh"
TOKEN_KEY = "patrakosh_token"
USER_KEY = "patrakosh_user"


class SessionManager:
    """
    Session context for the client.

    The sync controller only ever reads from it (through the API client's
    token provider); login, signup and logout are the only writers.
    """

    def __init__(self, service_name: str = KEYRING_SERVICE):
        self.service_name = service_name

    def get_token(self) -> Optional[str]:
        """Return the stored bearer token, or None when signed out."""
        return keyring.get_password(self.service_name, TOKEN_KEY)

    def get_user(self) -> Optional[UserProfile]:
        """Return the stored user profile, or None."""
        raw = keyring.get_password(self.service_name, USER_KEY)
        if not raw:
            return None
        try:
            data = json.loads(raw)
            return UserProfile.model_validate(data) if data is not None else None
        except ValueError as e:
            logger.warning(f"Ignoring unreadable stored user profile: {e}")
            return None

    def get_auth(self) -> Tuple[Optional[str], Optional[UserProfile]]:
        """Return (token, user) as currently stored."""
        return self.get_token(), self.get_user()

    def set_auth(self, token: str, user: Optional[UserProfile]):
        """
        Persist a new session.

        Args:
            token: Bearer token returned by login/signup
            user: User profile returned alongside the token
        """
        user_json = json.dumps(user.model_dump(exclude_none=True) if user else None)
        keyring.set_password(self.service_name, TOKEN_KEY, token)
        keyring.set_password(self.service_name, USER_KEY, user_json)
        logger.debug("Session stored in credential store")

    def clear_auth(self):
        """Remove both session keys from the credential store."""
        for key in (TOKEN_KEY, USER_KEY):
            try:
                keyring.delete_password(self.service_name, key)
            except PasswordDeleteError:
                # Key was not stored
                logger.debug(f"No stored value for {key}")
        logger.info("Session cleared")

    def is_authed(self) -> bool:
        return bool(self.get_token())
