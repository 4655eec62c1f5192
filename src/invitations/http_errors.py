from fastapi import HTTPException

from src.invitations.dtos import (
    AlreadyRespondedError,
    InvalidInputError,
    InvitationClosedError,
    InvitationError,
    InvitationNotFoundError,
    StoreUnavailableError,
)

ERROR_STATUS_CODES: dict[type[InvitationError], int] = {
    InvalidInputError: 400,
    InvitationNotFoundError: 404,
    InvitationClosedError: 409,
    AlreadyRespondedError: 409,
    StoreUnavailableError: 503,
}


def to_http_exception(error: InvitationError) -> HTTPException:
    status_code = ERROR_STATUS_CODES.get(type(error), 500)
    detail = {"error": error.code, "message": error.message}
    if isinstance(error, InvitationClosedError):
        detail["closure_cause"] = error.cause.value
    return HTTPException(status_code=status_code, detail=detail)
