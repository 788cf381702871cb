"""Application errors and their HTTP mapping."""


class ConfigurationError(Exception):
    """Required deployment configuration is missing or invalid."""


class DashboardError(Exception):
    """Base error translated to a JSON response by the app's exception handlers."""

    status_code = 500

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict:
        """Client errors carry only ``error``; server errors add ``details``."""
        if self.status_code < 500:
            return {"error": self.message}
        return {"error": self.message, "details": self.details or ""}


class InvalidRequestError(DashboardError):
    """Request parameters are unusable."""

    status_code = 400


class MissingParameterError(InvalidRequestError):
    """One or more required query parameters are absent or blank."""

    def __init__(self, names: list[str]):
        if len(names) == 1:
            message = f"{names[0]} query parameter is required"
        elif len(names) == 2:
            message = f"{names[0]} and {names[1]} query parameters are required"
        else:
            message = f"{', '.join(names[:-1])}, and {names[-1]} query parameters are required"
        super().__init__(message)
        self.names = names


class NotFoundError(DashboardError):
    """No record matched the request."""

    status_code = 404


class UpstreamError(DashboardError):
    """The warehouse or the code host failed."""

    status_code = 500
