from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
import bcrypt
from fastapi import HTTPException, status
from fastapi.security import HTTPBearer

from sharexconnect.core.config import settings

# Bearer token security
security = HTTPBearer()

ACCESS = "access"
REFRESH = "refresh"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_password(plain_password: str, hashed_password: str) -> bool:
    # bcrypt ignores everything past 72 bytes; newer releases refuse it outright
    return bcrypt.checkpw(plain_password.encode('utf-8')[:72], hashed_password.encode('utf-8'))


def get_password_hash(password: str) -> str:
    """Hash password with configurable rounds (BCRYPT_ROUNDS in .env)"""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8')[:72], salt).decode('utf-8')


def _encode(claims: Dict[str, Any], lifetime: timedelta, token_type: str) -> str:
    payload = {**claims, "exp": datetime.utcnow() + lifetime, "type": token_type}
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(data, lifetime, ACCESS)


def create_refresh_token(data: Dict[str, Any]) -> str:
    return _encode(data, timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS), REFRESH)


def create_token_pair(user) -> Dict[str, str]:
    """Access token also carries email and role; refresh token only `sub`"""
    return {
        "access_token": create_access_token({"sub": user.id, "email": user.email, "role": user.role.value}),
        "refresh_token": create_refresh_token({"sub": user.id}),
    }


def decode_token(token: str, expected_type: Optional[str] = None) -> Dict[str, Any]:
    """Verify signature and expiry, and optionally the `type` claim"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise _unauthorized("Could not validate credentials")

    if expected_type and payload.get("type") != expected_type:
        raise _unauthorized("Invalid token type")
    return payload
