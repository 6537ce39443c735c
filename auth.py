import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Cookie, Depends, Response
from jose import JWTError, jwt
from pydantic import BaseModel
from pymongo.database import Database

import config
from database import USERS, get_db
from errors import Forbidden, Unauthenticated

logger = logging.getLogger(__name__)


class SessionUser(BaseModel):
    email: str
    claims: Dict[str, Any] = {}


def create_token(data: dict, expires_days: int = config.TOKEN_TTL_DAYS) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(days=expires_days)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.JWT_SECRET, algorithm=config.JWT_ALG)


def verify_token(token: str) -> Dict[str, Any]:
    """Decode a session token, raising Unauthenticated on a bad signature,
    an expired token or a token without an email claim."""
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALG])
    except JWTError as e:
        logger.info("Rejected session token: %s", e)
        raise Unauthenticated()
    if not payload.get("email"):
        raise Unauthenticated()
    return payload


def get_current_user(token: Optional[str] = Cookie(None, alias=config.TOKEN_COOKIE)) -> SessionUser:
    if not token:
        raise Unauthenticated()
    payload = verify_token(token)
    return SessionUser(email=payload["email"], claims=payload)


def require_admin(user: SessionUser = Depends(get_current_user), db: Database = Depends(get_db)) -> SessionUser:
    # One lookup per request; roles can change at any time.
    record = db[USERS].find_one({"email": user.email}, {"role": 1})
    if not record or record.get("role") != "admin":
        raise Forbidden()
    return user


def _cookie_flags() -> Dict[str, Any]:
    return {
        "httponly": True,
        "secure": config.IS_PRODUCTION,
        "samesite": "none" if config.IS_PRODUCTION else "strict",
    }


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        config.TOKEN_COOKIE,
        token,
        max_age=config.TOKEN_TTL_DAYS * 24 * 60 * 60,
        **_cookie_flags(),
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(config.TOKEN_COOKIE, **_cookie_flags())
