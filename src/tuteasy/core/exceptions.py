"""Core exceptions for request handling."""

from tuteasy.utils.exceptions import TutEasyError


class ContextNotSetError(TutEasyError):
    """Raised when attempting to access request context that is not set.

    This error indicates a programming error - operations requiring context
    are being called outside of a request_context() context manager.
    """

    def __init__(self, message: str = "Request context is not set"):
        super().__init__(message)
