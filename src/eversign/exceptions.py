"""eversign exception hierarchy.

All exceptions inherit from EversignError for easy catching. REST
operations do not raise these for transport failures; they return an
``Err`` carrying the error instead (see ``eversign.result``).
"""

from __future__ import annotations


class EversignError(Exception):
    """Base exception for all eversign client errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code.
    """

    code: str = "eversign_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, object]:
        """Convert exception to a log-friendly dictionary."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
            }
        }


class RequestBuildError(EversignError):
    """A request descriptor could not be built.

    Raised for programming errors such as an unknown parameter location.

    Attributes:
        location: The offending parameter location.
        key: Name of the parameter being added.
    """

    code: str = "request_build_error"

    def __init__(
        self,
        message: str,
        location: object | None = None,
        key: str | None = None,
    ) -> None:
        self.location = location
        self.key = key
        super().__init__(message)

    def to_dict(self) -> dict[str, object]:
        """Convert exception to a log-friendly dictionary."""
        return {
            "error": {
                "code": self.code,
                "location": None if self.location is None else str(self.location),
                "key": self.key,
                "message": self.message,
            }
        }


class EversignAPIError(EversignError):
    """The eversign API answered with ``success: false``.

    eversign reports most failures with HTTP 200 and a body such as
    ``{"success": false, "error": {"code": 101, "type": "...", "info": "..."}}``.

    Attributes:
        error_code: Numeric code reported by eversign.
        error_type: Short error type identifier.
        info: Human-readable explanation from eversign.
    """

    code: str = "api_error"

    def __init__(
        self,
        error_code: int | None = None,
        error_type: str | None = None,
        info: str | None = None,
    ) -> None:
        self.error_code = error_code
        self.error_type = error_type
        self.info = info
        super().__init__(info or error_type or "eversign request failed")

    @classmethod
    def from_body(cls, body: dict[str, object]) -> EversignAPIError:
        """Build the error from an eversign response body."""
        error = body.get("error")
        if not isinstance(error, dict):
            return cls()
        return cls(
            error_code=error.get("code"),
            error_type=error.get("type"),
            info=error.get("info"),
        )

    def to_dict(self) -> dict[str, object]:
        """Convert exception to a log-friendly dictionary."""
        return {
            "error": {
                "code": self.code,
                "error_code": self.error_code,
                "error_type": self.error_type,
                "message": self.message,
            }
        }


class DownloadError(EversignError):
    """A final document could not be downloaded within the retry bound.

    Attributes:
        document_hash: Hash of the document being downloaded.
        attempts: Number of download attempts made.
        last_error: Error returned by the last attempt.
    """

    code: str = "download_error"

    def __init__(self, document_hash: str, attempts: int, last_error: Exception | None) -> None:
        self.document_hash = document_hash
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Download of document {document_hash} failed after {attempts} attempts: {last_error}"
        )

    def to_dict(self) -> dict[str, object]:
        """Convert exception to a log-friendly dictionary."""
        return {
            "error": {
                "code": self.code,
                "document_hash": self.document_hash,
                "attempts": self.attempts,
                "message": self.message,
            }
        }


class ConfigurationError(EversignError):
    """Configuration error.

    Raised when required configuration is missing or invalid.
    """

    code: str = "configuration_error"
