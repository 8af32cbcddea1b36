"""Error taxonomy shared by the service layer and the HTTP layer.

Every caller-facing error carries the HTTP status it maps to and a message
that is safe to return. Downstream detail stays in the logs.
"""

from typing import Any, Dict, List, Optional


class StockLocatorError(Exception):
    status_code: int = 500
    message: str = "Internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(StockLocatorError):
    status_code = 400
    message = "Invalid request"


class NotFoundError(StockLocatorError):
    status_code = 404
    message = "No variant matches"


class UpdateRejectedError(StockLocatorError):
    status_code = 400
    message = "Update rejected"

    def __init__(self, user_errors: List[Dict[str, Any]], message: Optional[str] = None):
        self.user_errors = user_errors
        super().__init__(message)

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        body["userErrors"] = self.user_errors
        return body


class TransportFailure(StockLocatorError):
    status_code = 500
    message = "Request failed"


# -------------------------
# Downstream (GraphQL) errors
# -------------------------
class DownstreamError(Exception):
    """Raised by a GraphQL executor when the platform call fails."""


class DownstreamTransportError(DownstreamError):
    """Network, HTTP status or response parsing failure."""


class GraphQLResponseError(DownstreamError):
    """The platform answered with a top-level ``errors`` array."""

    def __init__(self, errors: List[Dict[str, Any]]):
        self.errors = errors
        messages = "; ".join(str(e.get("message", e)) for e in errors) or "unknown error"
        super().__init__(f"GraphQL errors: {messages}")
