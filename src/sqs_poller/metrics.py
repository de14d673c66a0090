from prometheus_client import Counter, Histogram

messages_received_total = Counter(
    "sqs_poller_messages_received_total",
    "Messages returned by receive_message",
)

messages_deleted_total = Counter(
    "sqs_poller_messages_deleted_total",
    "Messages deleted after the handler returned",
)

errors_total = Counter(
    "sqs_poller_errors_total",
    "Failed queue service calls",
    ["stage"],  # session|receive|delete
)

receive_latency_seconds = Histogram(
    "sqs_poller_receive_latency_seconds",
    "Wall time of one receive_message call, long-poll wait included",
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 20, 30),
)
