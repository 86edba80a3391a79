"""Request guards for protected routes.

``get_current_user`` authenticates the request. ``require_admin`` takes the
principal it produced as its only input, so a route cannot ask for the admin
check without the authentication check running first.
"""
import time
import logging
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from core.auth import TokenCodec
from core.config import ADMIN_ROLE
from core.db import get_db
from core.errors import Forbidden, Unauthenticated
from models.models_user import User
from services.users import UserStore

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "token"


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_user_store(db: Session = Depends(get_db)) -> UserStore:
    return UserStore(db)


def extract_token(request: Request) -> Optional[str]:
    token = request.cookies.get(TOKEN_COOKIE)
    if token:
        return token
    authorization = request.headers.get("Authorization")
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    return None


def get_current_user(
    request: Request,
    codec: TokenCodec = Depends(get_token_codec),
    users: UserStore = Depends(get_user_store),
) -> User:
    token = extract_token(request)
    if not token:
        raise Unauthenticated()
    claims = codec.verify(token, int(time.time()))
    if claims is None:
        raise Unauthenticated("Invalid token")
    try:
        uid = int(claims.sub)
    except ValueError:
        logger.warning("session token subject is not a user id")
        raise Unauthenticated("Invalid token")
    user = users.get_user(uid)
    if not user:
        logger.info("session token for missing user id=%s", uid)
        raise Unauthenticated("The user belonging to this token no longer exists")
    request.state.user = user
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != ADMIN_ROLE:
        logger.info("user id=%s with role %r denied admin route", user.id, user.role)
        raise Forbidden()
    return user
