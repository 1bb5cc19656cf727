"""
Typed failures raised by the photo sources.

Remote-source errors are absorbed by the ratio mixer and the recommendation
fetcher; only a ratio=100 listing lets them reach the API layer, which turns
them into an HTTP response using ``http_status``.
"""

from typing import Any, Dict, Optional


class PhotoSourceError(RuntimeError):
    """Base class for photo source failures."""

    error_type = "photo_source_error"

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def http_status(self) -> int:
        return 500

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error_type,
            "message": str(self),
            "upstream_status": self.status_code,
        }


class MissingCredentialError(PhotoSourceError):
    """No access key is configured for a provider."""

    error_type = "missing_credential"


class UpstreamError(PhotoSourceError):
    """An external call returned a non-success status, timed out or failed to connect."""

    error_type = "upstream_error"

    @property
    def http_status(self) -> int:
        # Mirror the provider status when it is an HTTP error status
        if self.status_code is not None and 400 <= self.status_code <= 599:
            return self.status_code
        return 500


class MalformedResponseError(PhotoSourceError):
    """Success status but the payload is unusable."""

    error_type = "malformed_response"


class LocalSourceUnavailableError(PhotoSourceError):
    """The catalog directory or its metadata cannot be read."""

    error_type = "local_source_unavailable"
