"""Error taxonomy shared by the services and the request handlers.

Every error carries the message shown to the user and the HTTP status the
handlers answer with.
"""


class RentTrackerError(Exception):
    message = "Something went wrong."
    status_code = 400

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class AuthFailure(RentTrackerError):
    # Same text for unknown username and wrong password
    message = "Invalid credentials"
    status_code = 401


class RateLimited(RentTrackerError):
    message = "Too many attempts. Try again later."
    status_code = 429


class DuplicateUsername(RentTrackerError):
    message = "Username already exists"
    status_code = 400


class ValidationError(RentTrackerError):
    message = "All fields required"
    status_code = 400


class UnparseableMessage(RentTrackerError):
    message = "Could not read that M-PESA message."
    status_code = 400


class NotFoundOrForbidden(RentTrackerError):
    message = "Record not found"
    status_code = 404


class ForeignKeyViolation(NotFoundOrForbidden):
    """Raised when a rent record references a tenant the user does not own."""

    message = "Tenant not found"
