class CourseHubError(Exception):
    """Base class for errors surfaced to the HTTP layer."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(CourseHubError):
    status_code = 404


class UnauthorizedError(CourseHubError):
    status_code = 401


class ConflictError(CourseHubError):
    status_code = 409


class StoreUnavailableError(CourseHubError):
    """The database call failed. Propagated as-is, never retried here."""

    status_code = 503
