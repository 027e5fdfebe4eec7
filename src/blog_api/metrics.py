"""Shared OTel metrics instruments for the service."""

from opentelemetry import metrics

METER_NAME = "blog_api"

meter = metrics.get_meter(METER_NAME)

post_requests_total = meter.create_counter(
    name="post_requests_total",
    description="Total /posts requests handled, by operation and outcome",
    unit="1",
)

posts_created_total = meter.create_counter(
    name="posts_created_total",
    description="Total blog posts created through the API",
    unit="1",
)

posts_updated_total = meter.create_counter(
    name="posts_updated_total",
    description="Total blog posts updated through the API",
    unit="1",
)

posts_deleted_total = meter.create_counter(
    name="posts_deleted_total",
    description="Total blog posts deleted through the API",
    unit="1",
)
