class AuthenticationError(Exception):
    """Raised when OAuth credentials are missing or invalid."""


class IntegrationError(Exception):
    """Raised when an external API call fails."""


class RateLimitError(Exception):
    """Raised when an external API rate limit is hit."""


class NotFoundError(Exception):
    """Raised when the provider reports a form or response does not exist."""

    def __init__(self, form_id: str, response_id: str | None = None, message: str | None = None):
        self.form_id = form_id
        self.response_id = response_id
        if message is None:
            if response_id:
                message = f"Response {response_id} not found in form {form_id}"
            else:
                message = f"Form {form_id} not found"
        super().__init__(message)


class FetchError(Exception):
    """Raised when talking to the form provider fails mid-operation.

    Carries the form id and the phase that failed; the provider's original
    exception is available as ``cause`` (and as ``__cause__``).
    """

    def __init__(self, form_id: str, phase: str, cause: Exception):
        self.form_id = form_id
        self.phase = phase
        self.cause = cause
        super().__init__(f"Failed {phase} for form {form_id}: {cause}")


class FormatError(ValueError):
    """Raised when an export format other than json or csv is requested."""

    def __init__(self, format: str):
        self.format = format
        super().__init__(f"Unsupported export format: {format}. Use 'json' or 'csv'.")
