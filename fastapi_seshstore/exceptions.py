from typing import ClassVar

from fastapi import HTTPException, status
from itsdangerous import BadData, BadSignature


class SessionError(Exception):
    """
    Base class for every failure raised by the session layer, easy to catch
    at the middleware boundary.
    """

    _ERROR_DEFAULT: ClassVar[str] = "Session error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self._ERROR_DEFAULT)


class MalformedToken(SessionError, BadData):
    _ERROR_DEFAULT: ClassVar[str] = "Session token could not be parsed"


class TamperDetected(SessionError, BadSignature):
    _ERROR_DEFAULT: ClassVar[str] = "Session signature does not match"

    def __init__(self, message: str | None = None, payload: str | None = None) -> None:
        super().__init__(message)
        self.payload = payload


class PayloadTooLarge(SessionError):
    _ERROR_DEFAULT: ClassVar[str] = "Cookie data size exceeds 4kb; content dropped"

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            f"Cookie data size ({size} bytes) exceeds the {limit} byte limit; content dropped"
        )
        self.size = size
        self.limit = limit


class StoreError(SessionError):
    """
    Raised when a backing store fails to read or persist a session. Unlike
    tamper or size errors this points at infrastructure and is worth alerting on.
    """

    _ERROR_DEFAULT: ClassVar[str] = "Session store is unavailable"


class HttpSessionUnavailable(HTTPException):
    _ERROR_DEFAULT: ClassVar[str] = (
        "Sessions are not available, is SessionMiddleware installed?"
    )

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=(detail or self._ERROR_DEFAULT),
        )
