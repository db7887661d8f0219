"""Outage board error taxonomy.

Each error carries the HTTP status the API answers with. The message is sent
to the caller verbatim as ``{"error": message}``.
"""


class OutageBoardError(Exception):
    """Base error for outage operations."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(OutageBoardError):
    """Missing or invalid input."""

    status_code = 400


class NotFoundError(OutageBoardError):
    """No outage with the requested id."""

    status_code = 404


class InvalidStateError(OutageBoardError):
    """Transition not allowed from the outage's current status."""

    status_code = 400


class UnauthorizedError(OutageBoardError):
    """Admin credential missing or wrong."""

    status_code = 403


class InternalError(OutageBoardError):
    """Store or unexpected failure."""

    status_code = 500
