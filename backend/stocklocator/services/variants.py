"""Variant location service.

Holds the two operations the HTTP layer exposes:

- ``lookup``: find variants by barcode and reshape the search result into a
  resolved or ambiguous payload.
- ``update_location``: upsert the ``stock.location`` metafield on a variant.

Each call makes at most one downstream GraphQL request, and input is
validated before that request is built.
"""

import logging
import time
from typing import Any, Dict, List, Mapping, Union

from stocklocator.core.errors import (
    DownstreamError,
    NotFoundError,
    TransportFailure,
    UpdateRejectedError,
    ValidationError,
)
from stocklocator.schemas.variants import (
    AmbiguousVariants,
    ResolvedVariant,
    SavedMetafield,
    UpdateLocationResponse,
    UserError,
    VariantCandidate,
    VariantRef,
)
from stocklocator.shopify.client import GraphQLExecutor
from stocklocator.shopify.queries import (
    LOCATION_KEY,
    LOCATION_NAMESPACE,
    SET_LOCATION_MUTATION,
    VARIANTS_BY_BARCODE_QUERY,
    barcode_filter,
    location_metafield_input,
)
from stocklocator.telemetry.metrics import (
    downstream_calls_total,
    downstream_duration_seconds,
    lookup_outcomes_total,
)
from stocklocator.telemetry.otel import tracer

logger = logging.getLogger("stocklocator.services.variants")

LABEL_SEPARATOR = " – "

LookupResult = Union[ResolvedVariant, AmbiguousVariants]


def current_location(node: Mapping[str, Any]) -> str:
    metafield = node.get("metafield") or {}
    return metafield.get("value") or ""


def candidate_label(node: Mapping[str, Any]) -> str:
    product_title = (node.get("product") or {}).get("title") or ""
    return f"{product_title}{LABEL_SEPARATOR}{node.get('title') or ''}"


class VariantLocationService:
    def __init__(self, executor: GraphQLExecutor, page_size: int = 20) -> None:
        self.executor = executor
        self.page_size = page_size

    # -------------------------
    # Downstream call (instrumented)
    # -------------------------
    def _call(self, operation: str, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        start_time = time.time()
        outcome = "error"

        with tracer.start_as_current_span(f"shopify.{operation}") as span:
            span.set_attribute("graphql.operation.name", operation)
            try:
                data = self.executor.execute(query, variables)
                outcome = "success"
                return data
            finally:
                downstream_calls_total.labels(operation=operation, outcome=outcome).inc()
                downstream_duration_seconds.labels(operation=operation).observe(
                    time.time() - start_time
                )

    # -------------------------
    # Lookup
    # -------------------------
    def lookup(self, barcode: Any) -> LookupResult:
        if not isinstance(barcode, str) or not barcode.strip():
            raise ValidationError("Barcode required")
        barcode = barcode.strip()

        try:
            data = self._call(
                "lookup",
                VARIANTS_BY_BARCODE_QUERY,
                {"q": barcode_filter(barcode), "first": self.page_size},
            )
            hits: List[Dict[str, Any]] = [
                edge["node"] for edge in data["productVariants"]["edges"]
            ]
        except DownstreamError:
            logger.exception("Variant lookup failed for barcode %r", barcode)
            raise TransportFailure("Lookup failed")
        except (KeyError, TypeError):
            logger.exception("Malformed productVariants payload for barcode %r", barcode)
            raise TransportFailure("Lookup failed")

        if not hits:
            lookup_outcomes_total.labels(outcome="not_found").inc()
            logger.info("No variant matches barcode %r", barcode)
            raise NotFoundError("No variant matches")

        if len(hits) == 1:
            v = hits[0]
            lookup_outcomes_total.labels(outcome="resolved").inc()
            return ResolvedVariant(
                variant=VariantRef(id=v["id"]),
                product_title=(v.get("product") or {}).get("title") or "",
                current_location=current_location(v),
            )

        lookup_outcomes_total.labels(outcome="ambiguous").inc()
        logger.info("Barcode %r matched %d variants", barcode, len(hits))
        return AmbiguousVariants(
            variants=[
                VariantCandidate(
                    id=v["id"],
                    title=candidate_label(v),
                    current_location=current_location(v),
                )
                for v in hits
            ]
        )

    # -------------------------
    # Update
    # -------------------------
    def update_location(self, variant_id: Any, location_value: Any) -> UpdateLocationResponse:
        if not isinstance(variant_id, str) or not variant_id.strip():
            raise ValidationError("variantId & locationValue required")
        if not isinstance(location_value, str):
            raise ValidationError("variantId & locationValue required")

        try:
            data = self._call(
                "update_location",
                SET_LOCATION_MUTATION,
                {"metafields": [location_metafield_input(variant_id.strip(), location_value)]},
            )
            result = data["metafieldsSet"]
            user_errors = result.get("userErrors") or []
        except DownstreamError:
            logger.exception("Location update failed for variant %s", variant_id)
            raise TransportFailure("Save failed")
        except (KeyError, TypeError, AttributeError):
            logger.exception("Malformed metafieldsSet payload for variant %s", variant_id)
            raise TransportFailure("Save failed")

        if user_errors:
            errors = [UserError.from_graphql(e) for e in user_errors]
            logger.warning(
                "Shopify rejected location update for %s: %s",
                variant_id,
                "; ".join(e.message for e in errors),
            )
            raise UpdateRejectedError(
                [e.model_dump() for e in errors],
                message=errors[0].message or "Update rejected",
            )

        saved = None
        for m in result.get("metafields") or []:
            if m.get("namespace", LOCATION_NAMESPACE) == LOCATION_NAMESPACE and m.get(
                "key", LOCATION_KEY
            ) == LOCATION_KEY:
                saved = SavedMetafield(id=m.get("id"), value=m.get("value"))
                break

        logger.info("Location of %s set to %r", variant_id, location_value)
        return UpdateLocationResponse(success=True, metafield=saved)
