"""
Exception types for the fire station map.

Every per-source failure is one of these (or a plain ValueError from config
validation). Each is fatal to a single source only: the loader catches them at
the source boundary and omits that layer.
"""

from typing import Optional


class StationMapError(Exception):
    """Base class for all fire station map errors."""


class FormatError(StationMapError):
    """Raised when a source document matches none of the recognized shapes."""


class FetchError(StationMapError):
    """Raised on a non-2xx response or a transport failure.

    Attributes:
        url: Location that was requested
        status: HTTP status code, or None for transport failures
        body: Response body, already truncated
    """

    def __init__(
        self,
        message: str,
        url: str = "",
        status: Optional[int] = None,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status = status
        self.body = body
