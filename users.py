from fastapi import APIRouter, Depends, Body, Response
from sqlalchemy.exc import IntegrityError
from typing import Any, List
from auth import get_password_hash, create_access_token, verify_password, get_current_user
from deps import get_user_repository
from models import User
from repositories import UserRepository
from schemas import UserFields, UserRead, Token
from exceptions import (
    AuthenticationError,
    ClientInputError,
    ConflictError,
    NotFoundError,
    KEYS_NOT_ALLOWED_OR_MISSING,
    WRONG_CREDENTIALS,
)
from validation import check_body, parse_id
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["users"])

USER_KEYS = ["username", "email", "password", "password2"]
LOGIN_KEYS = ["email", "password"]

def _ensure_available(users: UserRepository, values: dict, exclude_id: int | None = None):
    taken = users.find_conflicting(values.get("username"), values.get("email"), exclude_id)
    if taken is None:
        return
    if "username" in values and taken.username == values["username"]:
        raise ConflictError("Username already taken.")
    raise ConflictError("Email already taken.")

def _save_user(users: UserRepository, user: User) -> User:
    # unique constraints are the last word when two requests race past the pre-check
    try:
        return users.save(user)
    except IntegrityError:
        users.rollback()
        logger.warning(f"Unique constraint rejected user {user.username!r}")
        raise ConflictError("Username or email already taken.")

def _credentials_to_hash(values: dict) -> dict:
    values = dict(values)
    values.pop("password2", None)
    if "password" in values:
        values["password_hash"] = get_password_hash(values.pop("password"))
    return values

def _require_self(current: User, user_id: int):
    if current.id != user_id:
        logger.debug(f"User {current.id} tried to act on user {user_id}")
        raise AuthenticationError()

@router.post("/login", response_model=Token)
def login(body: Any = Body(default=None), users: UserRepository = Depends(get_user_repository)):
    values = check_body(body, allowed=LOGIN_KEYS, required=LOGIN_KEYS, fields=UserFields)
    user = users.find_one_by(email=values["email"])
    if user is None:
        raise NotFoundError()
    if not verify_password(values["password"], user.password_hash):
        logger.info(f"Wrong password for user {user.id}")
        raise ClientInputError(WRONG_CREDENTIALS)
    logger.info(f"User {user.id} logged in")
    return {"token": create_access_token({"sub": str(user.id)})}

@router.get("", response_model=List[UserRead])
def list_users(users: UserRepository = Depends(get_user_repository)):
    return [UserRead.model_validate(u) for u in users.find_all()]

@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: str, users: UserRepository = Depends(get_user_repository)):
    uid = parse_id(user_id)
    u = users.find_by_id(uid)
    if u is None:
        raise NotFoundError()
    return UserRead.model_validate(u)

@router.post("", response_model=UserRead)
def register(body: Any = Body(default=None), users: UserRepository = Depends(get_user_repository)):
    values = check_body(body, allowed=USER_KEYS, required=USER_KEYS, fields=UserFields)
    _ensure_available(users, values)
    u = _save_user(users, users.create(_credentials_to_hash(values)))
    logger.info(f"User {u.id} registered")
    return UserRead.model_validate(u)

@router.put("/{user_id}", response_model=UserRead)
def update_user(user_id: str, body: Any = Body(default=None),
                users: UserRepository = Depends(get_user_repository),
                current: User = Depends(get_current_user)):
    uid = parse_id(user_id)
    _require_self(current, uid)
    required = []
    if isinstance(body, dict) and ("password" in body or "password2" in body):
        required = ["password", "password2"]
    values = check_body(body, allowed=USER_KEYS, required=required, fields=UserFields,
                        keys_message=KEYS_NOT_ALLOWED_OR_MISSING)
    u = users.find_by_id(uid)
    if u is None:
        raise NotFoundError()
    _ensure_available(users, values, exclude_id=uid)
    u = _save_user(users, users.merge(u, _credentials_to_hash(values)))
    return UserRead.model_validate(u)

@router.delete("/{user_id}")
def delete_user(user_id: str,
                users: UserRepository = Depends(get_user_repository),
                current: User = Depends(get_current_user)):
    uid = parse_id(user_id)
    _require_self(current, uid)
    u = users.find_by_id(uid)
    if u is None:
        raise NotFoundError()
    users.delete(u)
    logger.info(f"User {uid} deleted")
    return Response(status_code=200)
