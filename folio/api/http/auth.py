from fastapi import APIRouter, Depends, HTTPException, Response, status

from folio.config import settings
from folio.core.auth import SESSION_COOKIE, get_is_admin
from folio.domains.identity.schemas import AdminLogin, SessionStatus, Token
from folio.domains.identity.services import AdminSessionService

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/login", response_model=Token)
async def login(login_data: AdminLogin, response: Response):
    """Open an admin session"""
    token = AdminSessionService().login(login_data.password)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=settings.session_ttl_minutes * 60,
        httponly=True,
        samesite="lax",
    )
    return Token(access_token=token)


@router.post("/logout")
async def logout(response: Response):
    """Close the admin session"""
    response.delete_cookie(SESSION_COOKIE)
    return {"ok": True}


@router.get("/session", response_model=SessionStatus)
async def session_status(is_admin: bool = Depends(get_is_admin)):
    return SessionStatus(is_admin=is_admin)
