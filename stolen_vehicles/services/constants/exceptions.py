from typing import Optional


class StolenVehiclesException(Exception):
    """Base class for errors raised while refreshing or looking up plates."""


class FetchError(StolenVehiclesException):
    """The stolen vehicle feed could not be downloaded."""


class ParseError(StolenVehiclesException):
    """A single feed row could not be mapped onto a record."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        super().__init__(message)
        self.line_number = line_number


class StorageError(StolenVehiclesException):
    """A snapshot or temporary image file could not be written, read or removed."""


class RecognitionError(StolenVehiclesException):
    """The plate recognition provider rejected or failed a request."""

    retryable: bool = False

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class Forbidden(RecognitionError):
    """Invalid api key or insufficient credits."""


class PayloadTooLarge(RecognitionError):
    """Image exceeds the provider's size limits."""


class RateLimited(RecognitionError):
    retryable = True


class TransportError(RecognitionError):
    retryable = True


class UnexpectedStatus(RecognitionError):
    pass
