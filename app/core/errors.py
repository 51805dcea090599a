"""Domain error base class rendered by the API as {"error": code, "message": text}."""


class ServiceError(Exception):
    """Raised by services for expected, client-visible failures."""

    code = "service_error"
    status_code = 400

    def __init__(self, message: str, code: str | None = None, status_code: int | None = None) -> None:
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ConflictError(ServiceError):
    """Resource already exists (unique username/email, duplicate action)."""

    code = "conflict"
    status_code = 409


class NotFoundError(ServiceError):
    """Requested resource does not exist or is not visible to the caller."""

    code = "not_found"
    status_code = 404
