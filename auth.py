from passlib.context import CryptContext
from jose import jwt, JWTError
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from models import User
from repositories import UserRepository
from deps import get_user_repository
from exceptions import AuthenticationError
import logging
import os
from datetime import datetime, timedelta, timezone

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_DAYS = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "30"))

pwd_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto",
                       bcrypt__rounds=int(os.getenv("BCRYPT_ROUNDS", "12")))
bearer_scheme = HTTPBearer(auto_error=False)

# ----------------- PASSWORDS -----------------

def verify_password(plain, hashed):
    # malformed or empty digests count as a mismatch
    try:
        return pwd_ctx.verify(plain, hashed)
    except (ValueError, TypeError):
        return False

def get_password_hash(password):
    return pwd_ctx.hash(password)

# ----------------- TOKENS -----------------

def require_secret_key() -> str:
    secret = os.getenv("SECRET_KEY")
    if not secret:
        raise RuntimeError("SECRET_KEY missing from environment")
    return secret

def create_access_token(data: dict, expires_delta: timedelta | None = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, require_secret_key(), algorithm=ALGORITHM)

def decode_access_token(token: str) -> dict | None:
    """Claims of a valid token; None for bad signature, malformed or expired tokens."""
    secret = require_secret_key()
    try:
        return jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError:
        return None

# ----------------- CURRENT USER -----------------

def get_current_user(credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
                     users: UserRepository = Depends(get_user_repository)) -> User:
    # no header, another scheme or an empty token all come back as None
    if credentials is None or not credentials.credentials:
        logger.debug("Rejected request without bearer token")
        raise AuthenticationError()
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        logger.debug("Rejected invalid or expired token")
        raise AuthenticationError()
    sub = payload.get("sub")
    if sub is None or not str(sub).isdigit():
        logger.debug("Rejected token without user id")
        raise AuthenticationError()
    user = users.find_by_id(int(sub))
    if user is None:
        logger.debug(f"Rejected token for unknown user {sub}")
        raise AuthenticationError()
    return user
