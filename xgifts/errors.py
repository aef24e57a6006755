"""Error taxonomy shared by services, stores and routes.

Every error carries the HTTP status and stable code used to build the
`{success: false, error, code}` envelope.
"""


class GiftsError(RuntimeError):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    public_message: str = "Failed to generate gift suggestions"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)


class UpstreamTimeout(GiftsError):
    """Gift provider did not answer within the client timeout."""

    code = "UPSTREAM_TIMEOUT"

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        minutes = timeout_seconds / 60
        message = (
            f"Request timeout after {minutes:g} minutes. "
            "The profile may have too much content to analyze."
        )
        self.public_message = message
        super().__init__(message)


class UpstreamError(GiftsError):
    """Gift provider returned a non-2xx status or reported failure."""

    code = "UPSTREAM_ERROR"

    def __init__(self, message: str, status_code: int | None = None, reason: str | None = None):
        self.upstream_status = status_code
        self.upstream_reason = reason
        super().__init__(message)


class StoreError(GiftsError):
    """Search cache read or write failed."""

    code = "STORE_ERROR"


class UnexpectedError(GiftsError):
    """Anything not covered by a more specific error."""

    code = "INTERNAL_ERROR"


class TrendingUnavailable(GiftsError):
    """Trending could not be computed; keeps the cause's status and code."""

    public_message = "Failed to fetch trending gifts"

    def __init__(self, cause: GiftsError | None = None):
        if cause is not None:
            self.status_code = cause.status_code
            self.code = cause.code
        super().__init__(str(cause) if cause is not None else None)
