"""Password hashing and JWT access tokens"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from print_erp.core.config import settings
from print_erp.core.logging_config import get_logger

logger = get_logger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")
BCRYPT_HASH_LENGTH = 60

def is_valid_bcrypt_hash(value) -> bool:
    return isinstance(value, str) and len(value) == BCRYPT_HASH_LENGTH and value.startswith(BCRYPT_PREFIXES)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    # accounts created without a usable password never authenticate
    if not is_valid_bcrypt_hash(hashed_password):
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError as e:
        logger.warning(f"Stored password hash rejected by bcrypt: {e}")
        return False

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def create_access_token(
    subject: str,
    role: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Signed token whose ``sub`` claim is the user's email"""
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {"sub": subject, "exp": datetime.now(timezone.utc) + lifetime}
    if role:
        claims["role"] = role
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def decode_access_token(token: str) -> Optional[str]:
    """Subject of a valid, unexpired token; None otherwise"""
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    return claims.get("sub")
