from prometheus_client import Counter, Histogram

# --------------------------------------------------
# Downstream (Shopify GraphQL) Call Metrics
# --------------------------------------------------

downstream_calls_total = Counter(
    name="stocklocator_downstream_calls_total",
    documentation="Total number of outbound GraphQL calls",
    labelnames=["operation", "outcome"],
)

downstream_duration_seconds = Histogram(
    name="stocklocator_downstream_duration_seconds",
    documentation="Latency of outbound GraphQL calls",
    labelnames=["operation"],
)

# --------------------------------------------------
# Lookup Outcomes
# --------------------------------------------------

lookup_outcomes_total = Counter(
    name="stocklocator_lookup_outcomes_total",
    documentation="Variant lookups by outcome (not_found, resolved, ambiguous)",
    labelnames=["outcome"],
)
