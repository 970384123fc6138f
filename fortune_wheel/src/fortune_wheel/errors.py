from typing import Optional

from .constants import (
    VALIDATION_ERROR,
    NOT_FOUND,
    EDIT_KEY_MISSING,
    INVALID_EDIT_KEY,
    STORE_UNAVAILABLE,
)


class WheelError(Exception):
    """Base error carrying a stable ``code`` for user-facing messaging."""

    code = "WHEEL_ERROR"

    def __init__(self, message: Optional[str] = None, wheel_id: Optional[str] = None):
        super().__init__(message or self.code)
        self.wheel_id = wheel_id


class SliceValidationError(WheelError):
    code = VALIDATION_ERROR

    def __init__(self, result, message: Optional[str] = None):
        super().__init__(message)
        self.result = result


class WheelNotFound(WheelError):
    code = NOT_FOUND


class EditKeyMissing(WheelError):
    code = EDIT_KEY_MISSING


class InvalidEditKey(WheelError):
    code = INVALID_EDIT_KEY


class StoreUnavailable(WheelError):
    code = STORE_UNAVAILABLE
