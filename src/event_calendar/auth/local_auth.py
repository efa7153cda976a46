"""In-process identity provider for the offline demo mode."""

import logging
import uuid

from ..utils.exceptions import AuthenticationError
from .base import AuthUser, IdentityProvider

logger = logging.getLogger(__name__)


class LocalIdentityProvider(IdentityProvider):
    """Mints anonymous identities locally. Nothing is persisted."""

    def sign_in_anonymously(self) -> AuthUser:
        user = AuthUser(uid=f"local-{uuid.uuid4().hex[:16]}", is_anonymous=True)
        logger.info(f"Signed in anonymously as {user.uid}")
        self._set_current_user(user)
        return user

    def sign_in_with_token(self, token: str) -> AuthUser:
        raise AuthenticationError("Custom tokens are not supported by the local identity provider")

    def get_id_token(self) -> str:
        if self._current_user is None:
            raise AuthenticationError("Not signed in")
        return self._current_user.uid
