"""Error taxonomy for the screening pipeline.

Propagation policy:
  - ConfigurationError stops the session before any remote call.
  - AdmissionError subclasses reject a single file; the rest are admitted.
  - ExtractionError / RemoteError are caught at the document boundary and
    turned into a sentinel AnalysisResult.
  - MalformedResponse is only raised by priority extraction; the analysis
    parser never raises.
"""


class ScreenerError(Exception):
    """Base class for every error raised by the screener."""

    notice = "Something went wrong. Please try again."


class ConfigurationError(ScreenerError, ValueError):
    """Missing or malformed configuration (e.g. an API credential)."""

    notice = "The API credential is missing or invalid. Check your configuration."


# ---------------------------------------------------------------------------
# Per-file admission errors
# ---------------------------------------------------------------------------


class AdmissionError(ScreenerError):
    """A candidate file was refused before joining the session."""

    def __init__(self, file_name: str, message: str) -> None:
        super().__init__(message)
        self.file_name = file_name


class UnsupportedFormat(AdmissionError):
    notice = "Unsupported file type. Please upload PDF, DOC, or DOCX files."


class FileTooLarge(AdmissionError):
    notice = "File is too large. The maximum size is 10 MB."


class DuplicateFile(AdmissionError):
    notice = "This file has already been added."


class TooManyFiles(AdmissionError):
    notice = "Maximum number of files reached. Please remove some files first."


class ExtractionError(ScreenerError):
    """Text could not be extracted from a document."""

    notice = "Could not read text from this document."


# ---------------------------------------------------------------------------
# Remote capability errors
# ---------------------------------------------------------------------------


class RemoteError(ScreenerError):
    """A call to the remote scoring capability failed."""

    category = "remote"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class Unauthorized(RemoteError):
    category = "unauthorized"
    notice = "The API rejected the credential. Please check your API key."


class RateLimited(RemoteError):
    category = "rate_limited"
    notice = "Rate limit reached. Please wait a moment and try again."


class QuotaExceeded(RemoteError):
    category = "quota_exceeded"
    notice = "API quota exceeded. Please check your plan and billing details."


class ServerError(RemoteError):
    category = "server_error"
    notice = "The analysis service returned an error. Please try again later."


class NetworkError(RemoteError):
    category = "network"
    notice = "Could not reach the analysis service. Check your connection."


class RemoteTimeout(RemoteError):
    category = "timeout"
    notice = "The analysis service took too long to respond."


class MalformedResponse(ScreenerError):
    """The remote reply did not contain a usable JSON object."""

    notice = "The analysis service returned an unreadable response."


class AnalysisAborted(ScreenerError):
    """A run was stopped before any batch started."""

    notice = "Analysis could not start."


def describe_error(exc: BaseException) -> str:
    """Return the user-facing notice for an error."""
    if isinstance(exc, ScreenerError):
        cause = exc.__cause__
        if isinstance(exc, AnalysisAborted) and isinstance(cause, ScreenerError):
            return cause.notice
        return exc.notice
    return ScreenerError.notice


def classify_status(
    status_code: int,
    message: str,
    code: str | None = None,
) -> RemoteError:
    """Map an HTTP-equivalent failure status onto the remote error taxonomy."""
    lowered = message.lower()
    is_quota = code == "insufficient_quota" or "quota" in lowered or "credit balance" in lowered

    if status_code == 401:
        return Unauthorized(message, status_code)
    if is_quota:
        return QuotaExceeded(message, status_code)
    if status_code == 429:
        return RateLimited(message, status_code)
    return ServerError(message, status_code)
