"""Error taxonomy shared by the pipeline and the HTTP layer.

Every error carries the HTTP status it maps to and the machine-checkable
``error`` string rendered in the JSON body.
"""

from typing import Any


class PlaygroundError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(
        self,
        error: str,
        details: Any = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(error)
        self.error = error
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> dict[str, Any]:
        """Render the error as a JSON-serialisable response body."""
        body: dict[str, Any] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(PlaygroundError):
    """Client-fixable request problem (size, type, missing fields, config)."""

    status_code = 400


class NoChunksError(PlaygroundError):
    """Extracted text produced no usable chunks."""

    status_code = 400


class UpstreamServiceError(PlaygroundError):
    """The remote inference service failed or could not be reached."""

    status_code = 502


class StorageError(PlaygroundError):
    """In-memory store mutation failed."""

    status_code = 500


class CleanupError(PlaygroundError):
    """A single uploaded file could not be deleted.

    Raised per file and caught by the lifecycle manager, which records it and
    moves on to the next file.
    """

    status_code = 500
