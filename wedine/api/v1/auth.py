"""
Authentication routes
Identity comes from an external provider in production; the development
login issues user tokens directly when mock auth is enabled
"""

from fastapi import APIRouter

from ...config.settings import settings
from ...core.exceptions import PermissionDeniedError
from ...core.security import security_manager
from ...schemas.auth import DevLoginRequest, LoginResponse

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def dev_login(req: DevLoginRequest):
    """Development login"""
    if not settings.mock_auth_enabled:
        raise PermissionDeniedError("Development login is disabled")

    token = security_manager.create_user_token(req.user_id, req.email)
    return LoginResponse(token=token, expires_in=settings.jwt_expire_hours * 3600)
