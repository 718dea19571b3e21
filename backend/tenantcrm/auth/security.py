import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from hashlib import sha256

from jose import JWTError, jwt
from passlib.context import CryptContext

from tenantcrm.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__default_rounds=settings.BCRYPT_ROUNDS,
)


def _resolve_jwt_secret() -> str:
    if settings.JWT_SECRET:
        return settings.JWT_SECRET
    if settings.ENV != "dev":
        raise RuntimeError("JWT_SECRET must be set outside the dev environment")
    return "dev-change-me"


JWT_SECRET = _resolve_jwt_secret()
JWT_ALG = "HS256"


@dataclass(frozen=True)
class AccessTokenPayload:
    user_id: str
    email: str
    tenant_id: str | None


def _ensure_bcrypt_limit(password: str) -> None:
    # bcrypt limit is 72 BYTES, not characters
    if len(password.encode("utf-8")) > 72:
        raise ValueError("Password too long (max 72 bytes).")


def hash_password(password: str) -> str:
    _ensure_bcrypt_limit(password)
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    """Never raises; a missing hash still costs one bcrypt round so timing does not reveal unknown accounts."""
    if not password_hash:
        pwd_context.dummy_verify()
        return False
    try:
        _ensure_bcrypt_limit(password)
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        return False


def hash_token(token: str) -> str:
    return sha256(token.encode("utf-8")).hexdigest()


def generate_refresh_token() -> str:
    return secrets.token_hex(64)


def refresh_token_expiry(now: datetime | None = None) -> datetime:
    return (now or datetime.utcnow()) + timedelta(days=settings.JWT_REFRESH_EXP_DAYS)


def create_access_token(
    user_id: str,
    email: str,
    tenant_id: str | None,
    *,
    now: datetime | None = None,
) -> str:
    issued_at = now or datetime.utcnow()
    to_encode = {
        "sub": user_id,
        "email": email,
        "tenant_id": tenant_id,
        "typ": "access",
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.JWT_ACCESS_EXP_MINUTES),
    }
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALG)


def verify_access_token(token: str) -> AccessTokenPayload | None:
    try:
        claims = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])
    except JWTError:
        return None

    if claims.get("typ") != "access":
        return None
    user_id = claims.get("sub")
    email = claims.get("email")
    if not user_id or not email:
        return None
    return AccessTokenPayload(user_id=user_id, email=email, tenant_id=claims.get("tenant_id"))


__all__ = [
    "AccessTokenPayload",
    "create_access_token",
    "generate_refresh_token",
    "hash_password",
    "hash_token",
    "refresh_token_expiry",
    "verify_access_token",
    "verify_password",
]
