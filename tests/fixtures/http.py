from config import ApplicationConfig

ADMIN_HEADERS = {"X-Admin-API-Key": ApplicationConfig.ADMIN_API_KEY}


def bearer(access_token: str) -> dict:
    return {"Authorization": f"Bearer {access_token}"}


def refresh_cookie(response) -> str:
    """Refresh token set by an auth response"""
    return response.cookies[ApplicationConfig.REFRESH_COOKIE_NAME]


def auth_tokens(response) -> dict:
    """Response body plus the refresh token from its cookie"""
    return {**response.json(), "refresh_token": refresh_cookie(response)}
