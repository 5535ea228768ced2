"""Flask integration: one "Request finished" record per request.

Inside App Engine or Cloud Functions the record also carries an ``httpRequest``
summary and the trace keys Logs Explorer uses to group entries by request.
"""

from __future__ import annotations

import random
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from flask import Flask, Response, g, request
from opentelemetry import trace as otel_trace

from .logger import StructuredLogger
from .sinks.cloud import LOGGING_SAMPLED_KEY, LOGGING_SPAN_KEY, LOGGING_TRACE_KEY

CLOUD_TRACE_HEADER = "X-Cloud-Trace-Context"
TRACEPARENT_HEADER = "traceparent"

EmitRequestLog = Callable[[Dict[str, Any], str, Optional[str], bool], None]


@dataclass(frozen=True)
class TraceContext:
    trace_id: str
    span_id: Optional[str]
    sampled: bool


def _parse_traceparent(header: str | None) -> Optional[TraceContext]:
    if not header:
        return None
    parts = header.strip().split("-")
    if len(parts) < 4:
        return None
    trace_id, span_id, flags = parts[1], parts[2], parts[3]
    if len(trace_id) != 32 or len(span_id) != 16:
        return None
    try:
        sampled = bool(int(flags[:2], 16) & 0x01)
    except ValueError:
        return None
    return TraceContext(trace_id, span_id, sampled)


def _parse_cloud_trace(header: str | None) -> Optional[TraceContext]:
    """Parse ``TRACE_ID/SPAN_ID;o=OPTIONS``; span and options are optional."""

    if not header:
        return None
    value, _, options = header.strip().partition(";")
    trace_id, _, span_id = value.partition("/")
    if not trace_id:
        return None
    return TraceContext(trace_id, span_id or None, options.strip() == "o=1")


def _active_span_context() -> Optional[TraceContext]:
    span_context = otel_trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return TraceContext(
        f"{span_context.trace_id:032x}",
        f"{span_context.span_id:016x}",
        bool(span_context.trace_flags.sampled),
    )


def get_or_inject_context() -> TraceContext:
    """Resolve the request's trace context, injecting a new one when absent."""

    context = (
        _active_span_context()
        or _parse_traceparent(request.headers.get(TRACEPARENT_HEADER))
        or _parse_cloud_trace(request.headers.get(CLOUD_TRACE_HEADER))
    )
    if context is not None:
        return context

    context = TraceContext(uuid.uuid4().hex, str(random.getrandbits(63)), False)
    # EnvironHeaders reads the WSGI environ, so the header becomes visible downstream.
    request.environ["HTTP_X_CLOUD_TRACE_CONTEXT"] = f"{context.trace_id}/{context.span_id};o=0"
    return context


def _request_url() -> str:
    query = request.query_string.decode("latin-1")
    url = f"{request.script_root}{request.path}"
    return f"{url}?{query}" if query else url


def _elapsed(start: float | None) -> str | None:
    if start is None:
        return None
    return f"{time.perf_counter() - start:.9f}s"


def make_http_request_data(response: Response, start: float | None) -> Dict[str, Any]:
    """The Cloud Logging ``HttpRequest`` summary for the current request."""

    data = {
        "requestMethod": request.method,
        "requestUrl": _request_url(),
        "status": response.status_code,
        "responseSize": response.calculate_content_length(),
        "userAgent": request.headers.get("User-Agent"),
        "referer": request.headers.get("Referer"),
        "remoteIp": request.remote_addr,
        "protocol": request.environ.get("SERVER_PROTOCOL"),
        "latency": _elapsed(start),
    }
    return {key: value for key, value in data.items() if value is not None}


def create_logging_middleware(
    *,
    project_id: str,
    logger: StructuredLogger,
    exclude_http_request_field: bool = False,
) -> Callable[[Flask], Flask]:
    """Build a hook installer logging every finished request through ``logger``.

    ``exclude_http_request_field`` drops the ``httpRequest`` summary (and the
    trace keys that go with it) in managed environments; ``req`` and ``res``
    are always logged.
    """

    environment = logger.environment

    def emit_request_log(
        http_request: Dict[str, Any],
        trace: str,
        span: Optional[str] = None,
        sampled: bool = False,
    ) -> None:
        fields: Dict[str, Any] = {"req": request, "res": g.get("_logging_response")}

        if environment.is_managed and not exclude_http_request_field:
            request_url = http_request.get("requestUrl")
            function_name = environment.cloud_function_name()
            # Keep the function name in the Logs Explorer summary line
            if (
                function_name
                and isinstance(request_url, str)
                and request_url.startswith("/")
                and not request_url.startswith(f"/{function_name}")
            ):
                request_url = f"/{function_name}{request_url}"

            fields["httpRequest"] = {**http_request, "requestUrl": request_url}
            fields[LOGGING_TRACE_KEY] = trace
            fields[LOGGING_SPAN_KEY] = span
            fields[LOGGING_SAMPLED_KEY] = sampled

        logger.info("Request finished", **fields)

    def resolve_trace() -> tuple[str, Optional[str], bool]:
        context = get_or_inject_context()
        trace = f"projects/{project_id}/traces/{context.trace_id}"
        g._logging_trace = (trace, context.span_id, context.sampled)
        return g._logging_trace

    def install(app: Flask) -> Flask:
        @app.before_request
        def _logging_before_request() -> None:
            g._logging_start = time.perf_counter()

            trace, span, _sampled = resolve_trace()
            g.request_logger = logger.child(
                **{LOGGING_TRACE_KEY: trace, LOGGING_SPAN_KEY: span}
            )

        @app.after_request
        def _logging_after_request(response: Response) -> Response:
            trace_info = g.get("_logging_trace")
            if trace_info is None:
                # An earlier before_request hook answered, so ours never ran
                trace_info = resolve_trace()
            trace, span, sampled = trace_info

            g._logging_response = response
            http_request = make_http_request_data(response, g.pop("_logging_start", None))
            emit_request_log(http_request, trace, span, sampled)
            return response

        return app

    return install
