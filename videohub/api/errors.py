"""Mapping from session failure kinds to HTTP errors."""

from typing import NoReturn

from fastapi import HTTPException, status

from videohub.models.result import ErrorKind, Failure

STATUS_FOR_KIND = {
    ErrorKind.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def raise_for(failure: Failure) -> NoReturn:
    """Translate a session failure into an HTTP error."""
    if failure.kind is ErrorKind.UNAUTHORIZED:
        raise unauthorized(failure.message)
    raise HTTPException(
        status_code=STATUS_FOR_KIND[failure.kind],
        detail=failure.message,
    )
