class HangoutPlannerError(Exception):
    """Base exception for business rule violations"""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(HangoutPlannerError):
    """Raised when a user, hangout or connection request does not exist"""

    status_code = 404


class ForbiddenError(HangoutPlannerError):
    """Raised when the caller is not the host, approver or participant the action needs"""

    status_code = 403


class ConflictError(HangoutPlannerError):
    """Raised when the target is already in the state the action would produce"""

    status_code = 409


class ValidationFailureError(HangoutPlannerError):
    """Raised when input breaks a domain constraint"""

    status_code = 422
