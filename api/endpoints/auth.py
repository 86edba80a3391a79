import time
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Response

from core.auth import DUMMY_PASSWORD_HASH, TokenCodec, hash_password, verify_password
from core.config import jwt_maxage
from core.errors import Conflict, InvalidCredentials
from core.gates import TOKEN_COOKIE, get_current_user, get_token_codec, get_user_store, require_admin
from models.models_user import User
from services.users import UserStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register")
def register(
    name: str = Body(...),
    email: str = Body(...),
    password: str = Body(..., min_length=1),
    role: str = Body("user"),
    customer_name: Optional[str] = Body(None),
    admin: User = Depends(require_admin),
    users: UserStore = Depends(get_user_store),
):
    if users.user_exists(email):
        raise Conflict()
    u = users.insert_user(name, email, hash_password(password), role, customer_name)
    logger.info("user id=%s registered by admin id=%s", u.id, admin.id)
    return {"status": "success", "data": {"user": u.filtered()}}


@router.post("/login")
def login(
    response: Response,
    email: str = Body(...),
    password: str = Body(...),
    users: UserStore = Depends(get_user_store),
    codec: TokenCodec = Depends(get_token_codec),
):
    u: Optional[User] = users.find_user_by_email(email)
    if not u:
        verify_password(password, DUMMY_PASSWORD_HASH)
        raise InvalidCredentials()
    if not verify_password(password, u.password):
        raise InvalidCredentials()
    ttl = jwt_maxage()
    token = codec.issue(u.id, int(time.time()), ttl)
    response.set_cookie(TOKEN_COOKIE, token, max_age=ttl, path="/", httponly=True, samesite="lax")
    return {"status": "success", "token": token}


@router.get("/logout")
def logout(response: Response, user: User = Depends(get_current_user)):
    response.set_cookie(TOKEN_COOKIE, "", max_age=-1, path="/", httponly=True, samesite="lax")
    return {"status": "success"}
