"""
Domain errors raised by the scheduling engine.

All of them are recoverable: they are reported to the caller and never end
the process. ``status_code`` is the HTTP status the API layer answers with.
"""

from fastapi import status


class SchedulingError(Exception):
    """Base class for every recoverable scheduling/authorization failure."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = ""):
        self.message = message or self.__class__.__name__
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return self.__class__.__name__


class NotFound(SchedulingError):
    status_code = status.HTTP_404_NOT_FOUND


class DoctorNotFound(NotFound):
    pass


class SlotUnavailable(SchedulingError):
    status_code = status.HTTP_409_CONFLICT


class NotPermitted(SchedulingError):
    status_code = status.HTTP_403_FORBIDDEN


class InvalidTransition(NotPermitted):
    """Raised when an appointment would leave a terminal status."""


class DuplicateID(SchedulingError):
    status_code = status.HTTP_409_CONFLICT


class NoDoctorAvailable(SchedulingError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class AuthFailure(SchedulingError):
    status_code = status.HTTP_401_UNAUTHORIZED
