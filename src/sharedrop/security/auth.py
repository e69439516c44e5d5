"""Optional HTTP basic authentication for every route."""

from __future__ import annotations

import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

_basic = HTTPBasic(auto_error=False, realm="Restricted")


def credentials_match(
    credentials: HTTPBasicCredentials | None, username: str, password: str
) -> bool:
    if credentials is None:
        return False
    # Evaluate both comparisons so timing does not reveal which one failed.
    user_ok = secrets.compare_digest(credentials.username.encode(), username.encode())
    pass_ok = secrets.compare_digest(credentials.password.encode(), password.encode())
    return user_ok and pass_ok


async def require_auth(
    request: Request,
    credentials: HTTPBasicCredentials | None = Depends(_basic),
) -> None:
    config = request.app.state.share.config
    if not config.auth_enabled:
        return
    if not credentials_match(credentials, config.username, config.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized.",
            headers={"WWW-Authenticate": 'Basic realm="Restricted"'},
        )
