"""
Translate domain exceptions into HTTPException for the routers.
"""
from fastapi import HTTPException, status

from menusight.exceptions import (
    BackofficeError,
    DuplicateUsageError,
    InvalidParentError,
    MenuSightError,
    NotFoundError,
    PropagationError,
)


def to_http_exception(e: MenuSightError) -> HTTPException:
    """HTTP error for a MenuSightError; the most specific subclass wins."""
    if isinstance(e, PropagationError):
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "message": e.message,
                "failures": [f.model_dump() for f in e.result.failures],
            },
        )
    if isinstance(e, DuplicateUsageError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": e.message, "existing": e.existing},
        )
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    if isinstance(e, InvalidParentError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    if isinstance(e, BackofficeError):
        if e.is_not_found:
            return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Back office error: {e.message}")
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
