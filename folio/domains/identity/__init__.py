from folio.domains.identity.schemas import AdminLogin, SessionStatus, Token
from folio.domains.identity.services import AdminSessionService

__all__ = [
    "AdminLogin",
    "SessionStatus",
    "Token",
    "AdminSessionService",
]
