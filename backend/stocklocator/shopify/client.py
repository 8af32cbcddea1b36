import logging
from typing import Any, Dict, Mapping, Optional

import requests

from stocklocator.core.config import Settings
from stocklocator.core.errors import DownstreamTransportError, GraphQLResponseError

logger = logging.getLogger("stocklocator.shopify")


class GraphQLExecutor:
    """Port for the single external call both endpoints make.

    execute: send a query with variables, return the ``data`` object, or
    raise a ``DownstreamError`` subclass.
    """

    def execute(
        self,
        query: str,
        variables: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:  # pragma: no cover - interface only
        raise NotImplementedError


class ShopifyGraphQLClient(GraphQLExecutor):
    """Shopify Admin GraphQL over plain HTTPS POST."""

    def __init__(self, settings: Settings) -> None:
        self.endpoint = settings.graphql_endpoint
        self.timeout = settings.shopify_timeout_seconds
        self.headers = {
            "X-Shopify-Access-Token": settings.shopify_access_token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def execute(
        self,
        query: str,
        variables: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        payload = {"query": query, "variables": dict(variables or {})}

        try:
            r = requests.post(
                self.endpoint,
                json=payload,
                headers=self.headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise DownstreamTransportError(f"POST {self.endpoint} failed: {exc}") from exc

        try:
            body = r.json()
        except ValueError as exc:
            raise DownstreamTransportError(
                f"Non-JSON response (HTTP {r.status_code}) from {self.endpoint}"
            ) from exc

        if not isinstance(body, dict):
            raise DownstreamTransportError(f"Unexpected response shape: {type(body).__name__}")

        errors = body.get("errors")
        if errors:
            if isinstance(errors, str):
                errors = [{"message": errors}]
            raise GraphQLResponseError(errors)

        if not r.ok:
            raise DownstreamTransportError(f"HTTP {r.status_code} from {self.endpoint}")

        data = body.get("data")
        if data is None:
            raise DownstreamTransportError("Response carried neither data nor errors")

        logger.debug("GraphQL call ok (HTTP %s)", r.status_code)
        return data
