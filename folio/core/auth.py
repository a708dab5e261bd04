from typing import Optional

from fastapi import Depends, HTTPException, Request, WebSocket, status

from folio.core.security import extract_token_from_header, is_admin_token

SESSION_COOKIE = "session"


def _token_from(cookies, headers) -> Optional[str]:
    return cookies.get(SESSION_COOKIE) or extract_token_from_header(headers.get("authorization"))


async def get_is_admin(request: Request) -> bool:
    """Whether the caller holds a valid admin session"""
    return is_admin_token(_token_from(request.cookies, request.headers))


async def require_admin(is_admin: bool = Depends(get_is_admin)) -> bool:
    if not is_admin:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin session required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return True


def websocket_is_admin(websocket: WebSocket) -> bool:
    token = _token_from(websocket.cookies, websocket.headers) or websocket.query_params.get("token")
    return is_admin_token(token)
