from typing import Annotated

from fastapi import Depends, Request

from fastapi_seshstore.exceptions import HttpSessionUnavailable
from fastapi_seshstore.models import Session


def get_session(request: Request) -> Session:
    """
    Returns the session attached by `SessionMiddleware`.

    Raises
    ------
    HttpSessionUnavailable
        The middleware is not installed for this route.
    """
    if "session" not in request.scope:
        raise HttpSessionUnavailable()
    return request.scope["session"]


SessionDep = Annotated[Session, Depends(get_session)]
