"""Prometheus metrics for goal settlements, payments and gateway health"""

from prometheus_client import Counter, Histogram

# Goal metrics
goal_settlement_counter = Counter(
    "finquest_goal_settlement_total",
    "Weekly goals finalized",
    ["outcome"],  # achieved | failed
)

coins_awarded_counter = Counter(
    "finquest_coins_awarded_total",
    "Coins credited to users",
    ["source"],  # goal_reward | goal_created | debt_destroyer
)

# Payment metrics
payment_verification_counter = Counter(
    "finquest_payment_verification_total",
    "Gateway callback signature checks",
    ["result"],  # valid | invalid
)

gateway_failures_counter = Counter(
    "finquest_gateway_failures_total",
    "Failed payment gateway calls",
    ["operation"],  # create_order | fetch_payment | refund
)

gateway_latency_histogram = Histogram(
    "finquest_gateway_latency_seconds",
    "Payment gateway response time",
    ["operation"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_settlement(outcome: str, coins: int) -> None:
    """Record a goal settlement; rewards also count toward coins awarded"""
    goal_settlement_counter.labels(outcome=outcome).inc()
    if outcome == "achieved" and coins > 0:
        coins_awarded_counter.labels(source="goal_reward").inc(coins)


def record_coins(source: str, coins: int) -> None:
    if coins > 0:
        coins_awarded_counter.labels(source=source).inc(coins)
