"""
Admin API Key Authentication

Validates admin API keys for maintenance endpoints (session cleanup).
"""

from fastapi import Header, status

from authcore.api.error import ClientError
from authcore.libs.result import Error
from config import ApplicationConfig


async def verify_admin_api_key(x_admin_api_key: str = Header(None)):
    """
    Verify admin API key from X-Admin-API-Key header.

    Service-to-service auth for schedulers and operators, separate from
    principal bearer tokens.

    Raises:
        ClientError: 401 if key is missing or invalid
    """
    if not x_admin_api_key:
        raise ClientError(
            Error("UNAUTHORIZED", "Admin API key required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    if x_admin_api_key != ApplicationConfig.ADMIN_API_KEY:
        raise ClientError(
            Error("INVALID_API_KEY", "Invalid admin API key"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return True
