"""
Security helpers
JWT issue/verify for users and shop admins, plus the FastAPI dependencies
that guard user, admin, cron and setup endpoints
"""

import hmac
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from ..config.settings import settings
from .exceptions import AuthenticationError, PermissionDeniedError

ADMIN_ROLE = "admin"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


class SecurityManager:
    """Token creation and validation"""

    def create_jwt_token(self, subject: str, expire_hours: int = None,
                         additional_claims: Dict[str, Any] = None) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": subject,
            "iat": now,
            "exp": now + timedelta(hours=expire_hours or settings.jwt_expire_hours),
        }
        if additional_claims:
            payload.update(additional_claims)
        return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    def decode_jwt_token(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Invalid token: {e}")

    def create_user_token(self, user_id: str, email: Optional[str] = None) -> str:
        return self.create_jwt_token(user_id, additional_claims={"email": email})

    def create_admin_token(self, username: str, shop_name: str) -> str:
        return self.create_jwt_token(
            username,
            expire_hours=settings.admin_token_expire_hours,
            additional_claims={"role": ADMIN_ROLE, "shop_name": shop_name},
        )

    def hash_password(self, password: str) -> str:
        return pwd_context.hash(password)

    def verify_password(self, password: str, password_hash: str) -> bool:
        return pwd_context.verify(password, password_hash)


security_manager = SecurityManager()


async def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Dict[str, Any]:
    """Decode the bearer token of the request"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing bearer token")
    payload = security_manager.decode_jwt_token(credentials.credentials)
    if not payload.get("sub"):
        raise AuthenticationError("Token missing subject")
    return payload


async def get_current_user(payload: Dict[str, Any] = Depends(get_token_payload)) -> Dict[str, Any]:
    """Signed-in customer: {'user_id', 'email'}"""
    if payload.get("role") == ADMIN_ROLE:
        raise PermissionDeniedError("Admin tokens cannot be used as customer tokens")
    return {"user_id": str(payload["sub"]), "email": payload.get("email")}


async def require_admin(payload: Dict[str, Any] = Depends(get_token_payload)) -> Dict[str, Any]:
    """Shop staff: {'username', 'shop_name'}"""
    if payload.get("role") != ADMIN_ROLE:
        raise PermissionDeniedError("Admin access required")
    return {"username": str(payload["sub"]), "shop_name": payload.get("shop_name")}


async def verify_cron_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> bool:
    """Scheduled jobs must present the configured cron secret"""
    expected = settings.cron_secret_token
    if not expected or credentials is None:
        raise AuthenticationError("Invalid or missing authentication")
    if not hmac.compare_digest(credentials.credentials, expected):
        raise AuthenticationError("Invalid or missing authentication")
    return True


async def verify_setup_token(x_setup_token: Optional[str] = Header(default=None)) -> bool:
    """Credential setup is open until a setup token is configured"""
    expected = settings.admin_setup_token
    if expected:
        if not x_setup_token or not hmac.compare_digest(x_setup_token, expected):
            raise PermissionDeniedError("Invalid or missing setup token")
    return True
