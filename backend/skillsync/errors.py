"""Service-layer failures.

Every operation in ``skillsync.services`` reports failure by raising one of
these. Each carries a machine-readable ``kind`` and the HTTP status the API
renders it with, so routers never translate errors by hand.
"""


class ServiceError(Exception):
    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    kind = "not_found"
    status_code = 404


class ForbiddenError(ServiceError):
    kind = "forbidden"
    status_code = 403


class StateConflictError(ServiceError):
    """The action is not valid for the entity's current status."""

    kind = "state_conflict"
    status_code = 409


class ValidationFailedError(ServiceError):
    kind = "validation_failed"
    status_code = 400


class ConflictError(ServiceError):
    """A uniqueness rule would be violated."""

    kind = "conflict"
    status_code = 409


class UnauthenticatedError(ServiceError):
    kind = "unauthenticated"
    status_code = 401
