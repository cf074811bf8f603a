"""Error taxonomy for the ops health subsystem.

Every failure surfaced by the package is an ``OpsError``. The subclasses tag
where the failure came from:
- Transport errors from the HTTP layer
- Serialization errors turning a structured payload into JSON
- Encoding errors decoding rendered metrics bytes into text
- Metrics errors when registering or rendering collectors
- Address errors when parsing a bind address at startup
- Configuration errors when loading or validating config files

The original exception is kept as ``__cause__`` (raise ... from ...), so
callers can catch one type and still inspect the root cause. Nothing is
retried: the current request fails and the process keeps running.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Origin tag carried by every OpsError."""

    TRANSPORT = "transport"
    SERIALIZATION = "serialization"
    ENCODING = "encoding"
    METRICS = "metrics"
    ADDRESS = "address"
    CONFIG = "config"


class OpsError(Exception):
    """Base exception for all ops health errors

    Use this to catch any failure raised while serving health endpoints:
    ```python
    try:
        payload = render_json(status.about())
    except OpsError as e:
        logger.error("about_failed", kind=e.kind.value, error=str(e))
    ```
    """

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    @property
    def cause(self) -> Optional[BaseException]:
        """The originating exception, if any."""
        return self.__cause__

    @classmethod
    def wrap(cls, error: BaseException) -> "OpsError":
        """Wrap an arbitrary exception, keeping its message."""
        if isinstance(error, OpsError):
            return error
        return cls(str(error), cause=error)


class TransportError(OpsError):
    """HTTP transport failed

    Raised when:
    - The server cannot bind or serve
    - The ASGI server exits with an error
    """

    kind = ErrorKind.TRANSPORT


class SerializationError(OpsError):
    """Structured payload could not be encoded as JSON"""

    kind = ErrorKind.SERIALIZATION


class EncodingError(OpsError):
    """Rendered metrics are not valid UTF-8"""

    kind = ErrorKind.ENCODING


class MetricsError(OpsError):
    """Metrics registry failure

    Raised when:
    - A collector with the same name is already registered
    - The exposition encoder fails
    """

    kind = ErrorKind.METRICS


class AddressParseError(OpsError):
    """Bind address is not a valid ``host:port`` pair"""

    kind = ErrorKind.ADDRESS


class ConfigValidationError(OpsError):
    """Configuration validation failed"""

    kind = ErrorKind.CONFIG
