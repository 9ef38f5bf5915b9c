"""Exception types raised by the service layer."""


class ApiError(Exception):
    """An error that maps directly onto an HTTP status code and message.

    Service functions raise it for invalid enum values, missing referenced
    entities and delete conflicts; the API's global handler serializes it.
    ``is_operational`` is False for programming errors that should be
    reported as such.
    """

    def __init__(self, status_code: int, message: str, is_operational: bool = True):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.is_operational = is_operational

    def __repr__(self) -> str:
        return f"ApiError({self.status_code}, {self.message!r})"


def bad_request(message: str) -> ApiError:
    return ApiError(400, message)


def not_found(message: str) -> ApiError:
    return ApiError(404, message)
