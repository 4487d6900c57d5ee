from fastapi import status

from authcore.libs.result import Error


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


STATUS_BY_CODE = {
    "VALIDATION_ERROR": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "INVALID_CREDENTIALS": status.HTTP_401_UNAUTHORIZED,
    "ACCOUNT_LOCKED": status.HTTP_423_LOCKED,
    "ACCOUNT_INACTIVE": status.HTTP_403_FORBIDDEN,
    "TOKEN_EXPIRED": status.HTTP_401_UNAUTHORIZED,
    "TOKEN_INVALID": status.HTTP_401_UNAUTHORIZED,
    "CONFLICT": status.HTTP_409_CONFLICT,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
}


def raise_for_error(error: Error) -> None:
    """Map a use-case error to its HTTP status; unknown codes are server errors"""
    status_code = STATUS_BY_CODE.get(error.code)
    if status_code is None:
        raise ServerError(error)
    raise ClientError(error, status_code=status_code)
