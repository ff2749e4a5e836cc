"""Custom exception classes for the uploader."""

from typing import Optional


class UploaderException(Exception):
    """
    Base exception class for all uploader errors.
    """
    pass


class ValidationError(UploaderException):
    """
    Raised when input is invalid or missing (non-buffer file, empty chunk id list).
    """
    pass


class ConfigurationError(UploaderException):
    """
    Raised when a storage actor cannot be constructed (missing canister id or identity).
    """
    pass


class TransientUploadError(UploaderException):
    """
    Raised when a single call to the remote store fails in a way that may succeed on retry.
    """
    pass


class StorageRequestError(UploaderException):
    """
    Raised when the remote store refuses a call outright (4xx response).
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FatalUploadError(UploaderException):
    """
    Raised when a chunk could not be uploaded within its retry budget.
    """

    def __init__(self, order: int, attempts: int, last_error: BaseException):
        super().__init__(
            f"Failed to upload chunk {order} after {attempts} attempt(s): {last_error}"
        )
        self.order = order
        self.attempts = attempts
        self.last_error = last_error


class CommitRejected(UploaderException):
    """
    Raised by Result.unwrap() when the remote store declined a committed batch.
    """
    pass
