"""
Bearer-token gateway: resolves the caller before any protected route runs.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from playerfeed.config import get_settings
from playerfeed.dependencies import get_token_service, get_user_store
from playerfeed.errors import NotFoundError, UnauthorizedError
from playerfeed.feeds import CallerIdentity
from playerfeed.security import TokenService
from playerfeed.users import UserStore

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{get_settings().api_prefix.lstrip('/')}/user/login"
)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    tokens: TokenService = Depends(get_token_service),
    users: UserStore = Depends(get_user_store),
) -> CallerIdentity:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        claims = tokens.verify(token)
    except UnauthorizedError:
        raise credentials_exception

    user_id = claims.get("id")
    if not user_id:
        raise credentials_exception
    try:
        user = users.get_by_id(user_id)
    except NotFoundError:
        raise credentials_exception

    return CallerIdentity(
        id=user["id"],
        email=user.get("email", ""),
        name=user.get("name"),
        profilePicture=user.get("profilePicture"),
    )
