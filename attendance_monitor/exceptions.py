from typing import Optional


class AttendanceError(Exception):
    """Base class for errors surfaced to API callers as {"error": message}"""
    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    def client_message(self) -> str:
        return self.public_message


class ValidationError(AttendanceError):
    """Missing or malformed input. The message is shown to the caller."""
    status_code = 400
    public_message = "Invalid request"

    def client_message(self) -> str:
        return self.message


class PersistenceError(AttendanceError):
    """A read or write against the store failed. The store message stays in the logs."""
    status_code = 500
    public_message = "Database operation failed"

    def __init__(self, message: Optional[str] = None, public_message: Optional[str] = None):
        super().__init__(message)
        if public_message:
            self.public_message = public_message


class DataUnavailableError(AttendanceError):
    """A collaborator table could not be read, so a derived view cannot be built"""
    status_code = 500
    public_message = "Failed to fetch data"

    def __init__(self, message: Optional[str] = None, public_message: Optional[str] = None):
        super().__init__(message)
        if public_message:
            self.public_message = public_message
