"""Refresh-token cookie helpers."""

from fastapi import Response

from config import ApplicationConfig


def attach_refresh_cookie(response: Response, refresh_token: str, max_age: int) -> None:
    response.set_cookie(
        key=ApplicationConfig.REFRESH_COOKIE_NAME,
        value=refresh_token,
        path=ApplicationConfig.REFRESH_COOKIE_PATH,
        httponly=True,
        secure=ApplicationConfig.REFRESH_COOKIE_SECURE,
        samesite=ApplicationConfig.REFRESH_COOKIE_SAMESITE,
        max_age=max_age,
    )


def clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=ApplicationConfig.REFRESH_COOKIE_NAME,
        path=ApplicationConfig.REFRESH_COOKIE_PATH,
    )
