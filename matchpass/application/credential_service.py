import logging

import bcrypt

from matchpass.domain.exceptions import InvalidInputError
from matchpass.domain.limits import ADMIN_NAME_MAX_LENGTH, USERNAME_MAX_LENGTH, ensure_fits
from matchpass.domain.models import AdminIdentity
from matchpass.infrastructure.repositories.interfaces import Store

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes.
MAX_PASSWORD_BYTES = 72


class CredentialVerifier:
    """
    Checks admin logins against bcrypt hashes.
    Fails closed: anything but a matching password yields None.
    """

    def __init__(self, store: Store, rounds: int = 12):
        self.store = store
        self.rounds = rounds
        # Checked whenever a login cannot match, so every failure costs one bcrypt round.
        self._dummy_hash = bcrypt.hashpw(b"matchpass-dummy", bcrypt.gensalt(rounds))

    def hash_password(self, password: str) -> bytes:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(self.rounds))

    def verify(self, username: str, password: str) -> AdminIdentity | None:
        if not username or not password:
            return None

        with self.store.unit_of_work() as uow:
            credential = uow.admins.get_by_username(username)

        candidate = password.encode("utf-8")
        if credential is None or len(candidate) > MAX_PASSWORD_BYTES:
            # checkpw raises on inputs over 72 bytes.
            bcrypt.checkpw(candidate[:MAX_PASSWORD_BYTES], self._dummy_hash)
            logger.warning("Admin login failed. username=%s", username)
            return None

        if not bcrypt.checkpw(candidate, credential.password_hash):
            logger.warning("Admin login failed. username=%s", username)
            return None

        logger.info("Admin login succeeded. username=%s", username)
        return credential.identity

    def provision(self, username: str, password: str, name: str) -> AdminIdentity:
        """Create an admin account. Used by provisioning scripts only."""
        username = (username or "").strip()
        name = (name or "").strip()
        if not username or not password or not name:
            raise InvalidInputError("username, password and name are required")
        ensure_fits(username, USERNAME_MAX_LENGTH, "username")
        ensure_fits(name, ADMIN_NAME_MAX_LENGTH, "name")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise InvalidInputError(f"password cannot exceed {MAX_PASSWORD_BYTES} bytes")

        with self.store.unit_of_work() as uow:
            identity = uow.admins.add(username, self.hash_password(password), name)

        logger.info("Admin provisioned. username=%s", username)
        return identity
