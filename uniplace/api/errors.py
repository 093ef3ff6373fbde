"""
Translate service-layer errors into HTTP errors.
"""

from fastapi import HTTPException

from uniplace.exceptions import (
    MailRelayError,
    ParseError,
    ReportEmptyError,
    StoreError,
    UniPlaceError,
    ValidationError,
)


def to_http(error: UniPlaceError) -> HTTPException:
    """
    Map a UniPlaceError to the HTTPException the client should see.

    - ParseError / ValidationError -> 400 with the message
    - ReportEmptyError -> 404
    - MailRelayError -> 502 "Sending failed"
    - StoreError -> 500 with the database message verbatim
    """
    if isinstance(error, (ParseError, ValidationError)):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, ReportEmptyError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, MailRelayError):
        return HTTPException(
            status_code=502,
            detail="Sending failed. Ensure the email server is running.",
        )
    if isinstance(error, StoreError):
        return HTTPException(status_code=500, detail=error.message)
    return HTTPException(status_code=500, detail=str(error))
