from typing import NoReturn, Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from eventadmin.core.errors import DomainError, ErrorCode
from eventadmin.core.result import Err, Result
from eventadmin.database.db import get_db
from eventadmin.models.profiles import Profile
from eventadmin.services.users import get_current_user_profile

ERROR_STATUS = {
    ErrorCode.VALIDATION_FAILED: 422,
    ErrorCode.NOT_AUTHENTICATED: 401,
    ErrorCode.PERMISSION_DENIED: 403,
    ErrorCode.EVENT_NOT_FOUND: 404,
    ErrorCode.REGISTRATION_NOT_FOUND: 404,
    ErrorCode.USER_NOT_FOUND: 404,
    ErrorCode.CAPACITY_EXCEEDED: 409,
    ErrorCode.DUPLICATE_ATTENDEE: 409,
    ErrorCode.DUPLICATE_EMAIL: 409,
    ErrorCode.CAPACITY_BELOW_REGISTRATIONS: 409,
    ErrorCode.REPOSITORY_ERROR: 503,
}


def get_current_profile(
    x_user_id: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
) -> Optional[Profile]:
    """Resolve the caller from the identity forwarded by the auth provider."""
    return unwrap(get_current_user_profile(db, x_user_id))


def error_detail(error: DomainError) -> dict:
    detail = {"code": error.code.value, "message": error.message}
    if error.field_errors:
        detail["errors"] = {
            name: {"code": field_error.code.value, "message": field_error.message}
            for name, field_error in error.field_errors.items()
        }
    return detail


def raise_for_error(error: DomainError) -> NoReturn:
    raise HTTPException(status_code=ERROR_STATUS.get(error.code, 400), detail=error_detail(error))


def unwrap(result: Result):
    if isinstance(result, Err):
        raise_for_error(result.error)
    return result.value
