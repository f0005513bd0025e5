"""
Centralized auth service — all auth decisions flow through here.

No JWT decoding should happen outside this module.
"""

from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.config import settings
from app.models.user import User

# ── Password ──────────────────────────────────────────────────────────────────


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


# ── Token ─────────────────────────────────────────────────────────────────────


def create_access_token(user: User, expires_delta: timedelta | None = None) -> str:
    """Create a JWT whose 'sub' claim is the user id."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {
        "sub": str(user.id),
        "role": user.role,
        "exp": expire,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a JWT. Returns payload dict or None on failure."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


# ── User Lookup ───────────────────────────────────────────────────────────────


def get_user_from_token(token: str, db: Session) -> User | None:
    """Resolve a JWT to an active User, or None.

    The role is always read from the database, never from the token, so a
    demoted admin loses access immediately.
    """
    payload = decode_access_token(token)
    if payload is None:
        return None

    sub = payload.get("sub")
    if sub is None or not str(sub).isdigit():
        return None
    return db.query(User).filter(User.id == int(sub), User.is_active == True).first()  # noqa: E712


def authenticate(email: str, password: str, db: Session) -> User | None:
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user
