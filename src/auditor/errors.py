from typing import Optional


class AuditError(Exception):
    """
    Base class for every classified failure of an audit call.
    An audit either returns a complete report or raises one of these.
    """
    kind = "AuditError"

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class InvalidUrlError(AuditError):
    """The target string cannot be parsed as an absolute URL."""
    kind = "InvalidUrl"


class UnsupportedSchemeError(AuditError):
    """The target parses as a URL but is neither http nor https."""
    kind = "UnsupportedScheme"

    def __init__(self, message: str, url: Optional[str] = None, scheme: str = ""):
        super().__init__(message, url)
        self.scheme = scheme


class FetchFailedError(AuditError):
    """Transport-level failure: DNS, connection refused, timeout, too many redirects."""
    kind = "FetchFailed"

    def __init__(self, message: str, url: Optional[str] = None, cause: Optional[str] = None):
        super().__init__(message, url)
        self.cause = cause


class HttpStatusError(AuditError):
    """The server answered, but not with a 2xx status."""
    kind = "HttpError"

    def __init__(self, message: str, url: Optional[str] = None, status: int = 0, reason: str = ""):
        super().__init__(message, url)
        self.status = status
        self.reason = reason


class WeightTableError(ValueError):
    """
    Raised when the rule weight table is misconfigured.
    This is a programming error and surfaces when the engine is built.
    """
