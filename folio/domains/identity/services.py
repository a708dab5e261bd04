import logging
from typing import Optional

from folio.config import settings
from folio.core.security import ADMIN_SUBJECT, create_access_token, verify_password

log = logging.getLogger(__name__)


class AdminSessionService:
    """Single-administrator login"""

    def __init__(self, password_hash: Optional[str] = None):
        self.password_hash = password_hash if password_hash is not None else settings.admin_password_hash

    def login(self, password: str) -> Optional[str]:
        """Session token for the correct password, None otherwise"""
        if not self.password_hash:
            log.warning("Admin login attempted but no admin password hash is configured")
            return None
        if not verify_password(password, self.password_hash):
            log.info("Rejected admin login")
            return None
        return create_access_token(data={"sub": ADMIN_SUBJECT})
