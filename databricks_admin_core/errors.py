"""
Errors - Exception hierarchy

Every failure surfaced by the library is a ``DatabricksAdminError`` carrying
``kind``, ``message``, ``endpoint`` and (for API failures) ``http_status``.

Parameter errors are raised before any request is sent; API and transport
errors come from the dispatcher and are propagated unmodified.
"""

from typing import Any, Dict, List, Optional


class DatabricksAdminError(Exception):
    """Base class for all errors raised by databricks-admin-core."""

    kind = "DatabricksAdminError"

    def __init__(self, message: str, endpoint: Optional[str] = None, http_status: Optional[int] = None):
        self.message = message
        self.endpoint = endpoint
        self.http_status = http_status
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind,
            "http_status": self.http_status,
            "message": self.message,
            "endpoint": self.endpoint,
        }


class ConfigurationError(DatabricksAdminError):
    """Host or credentials could not be resolved."""

    kind = "ConfigurationError"


class ParameterError(DatabricksAdminError):
    """Caller input cannot be mapped to a request. Raised before any network call."""

    kind = "ParameterError"


class MissingRequiredField(ParameterError):
    """A field required by the selected parameter set was not supplied."""

    kind = "MissingRequiredField"

    def __init__(self, field: str, endpoint: Optional[str] = None, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"Missing required field: '{field}'", endpoint=endpoint)


class AmbiguousParameterSet(ParameterError):
    """Fields from more than one mutually exclusive parameter set were supplied."""

    kind = "AmbiguousParameterSet"

    def __init__(self, variants: List[str], endpoint: Optional[str] = None):
        self.variants = variants
        super().__init__(
            f"Parameters from mutually exclusive sets were supplied together: {', '.join(variants)}",
            endpoint=endpoint,
        )


class UnsupportedOperation(ParameterError):
    """The resolved object type is known to reject the requested operation."""

    kind = "UnsupportedOperation"

    def __init__(self, object_type: str, operation: str, endpoint: Optional[str] = None):
        self.object_type = object_type
        self.operation = operation
        super().__init__(f"Object type '{object_type}' does not support '{operation}'", endpoint=endpoint)


class UnknownOperation(ParameterError):
    """The named operation is not in the endpoint catalog."""

    kind = "UnknownOperation"


class ApiError(DatabricksAdminError):
    """The remote host answered with a non-2xx status."""

    kind = "ApiError"

    def __init__(
        self,
        http_status: int,
        message: str,
        endpoint: Optional[str] = None,
        error_code: Optional[str] = None,
        body: Any = None,
    ):
        self.error_code = error_code
        self.body = body
        super().__init__(message, endpoint=endpoint, http_status=http_status)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["error_code"] = self.error_code
        return result


class TransportError(DatabricksAdminError):
    """No response was obtained (DNS failure, timeout, refused connection)."""

    kind = "TransportError"
