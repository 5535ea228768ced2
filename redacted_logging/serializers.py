"""Display views for request, response and error fields.

Serializers never mutate what they are given and never raise on unexpected
shapes: anything they do not recognize is returned unchanged. The views they
build still go through redaction like any other field.
"""

from __future__ import annotations

import json
import logging
import traceback
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Tuple


LOGGER = logging.getLogger(__name__)

Serializer = Callable[[Any], Any]


def _read(source: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a mapping key or an attribute."""

    if isinstance(source, Mapping):
        return source.get(name, default)
    try:
        return getattr(source, name, default)
    except Exception:  # properties of client objects may raise when unset
        return default


def _compact(view: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in view.items() if value is not None}


def _header_dict(headers: Any) -> Any:
    """Lower-case header names; repeated headers are joined with ``, ``."""

    if headers is None:
        return None

    items = headers.items() if hasattr(headers, "items") else headers
    result: Dict[str, str] = {}
    try:
        for key, value in items:
            name = str(key).lower()
            result[name] = f"{result[name]}, {value}" if name in result else value
    except (TypeError, ValueError):
        return headers
    return result


def _decode_body(body: Any) -> Any:
    """Parse JSON bodies; keep anything else as text."""

    if isinstance(body, (bytes, bytearray)):
        body = bytes(body).decode("utf-8", errors="replace")

    if isinstance(body, str):
        try:
            return json.loads(body)
        except ValueError:
            return body

    return body


# --------------------------------------------------------------------------
# requests


def _is_wsgi_request(req: Any) -> bool:
    return isinstance(getattr(req, "environ", None), Mapping) and hasattr(req, "path")


def _wsgi_url(req: Any) -> str:
    query = req.query_string
    if isinstance(query, bytes):
        query = query.decode("latin-1")
    url = f"{req.script_root or ''}{req.path}"
    return f"{url}?{query}" if query else url


def _wsgi_query(req: Any) -> Dict[str, Any]:
    return {
        key: values[0] if len(values) == 1 else values
        for key, values in req.args.lists()
    }


def _wsgi_body(req: Any) -> Any:
    if req.is_json:
        return req.get_json(silent=True)
    if req.form:
        return {
            key: values[0] if len(values) == 1 else values
            for key, values in req.form.lists()
        }
    return None


def _remote_port(environ: Mapping[str, Any]) -> Any:
    port = environ.get("REMOTE_PORT")
    if isinstance(port, str) and port.isdigit():
        return int(port)
    return port


def serialize_request(req: Any) -> Any:
    """Plain view of an inbound (WSGI) or outbound request."""

    if not req or not _read(req, "method"):
        return req

    if _is_wsgi_request(req):
        return _compact(
            {
                "method": req.method,
                "url": _wsgi_url(req),
                "query": _wsgi_query(req),
                "body": _wsgi_body(req),
                "headers": _header_dict(req.headers),
                "remoteAddress": req.remote_addr,
                "remotePort": _remote_port(req.environ),
            }
        )

    url = _read(req, "original_url") or _read(req, "url")
    if url is not None and not isinstance(url, str):
        url = str(url)

    return _compact(
        {
            "method": _read(req, "method"),
            "url": url,
            "query": _read(req, "query"),
            "body": _read(req, "body"),
            "headers": _header_dict(_read(req, "headers")),
            "remoteAddress": _read(req, "remote_address"),
            "remotePort": _read(req, "remote_port"),
        }
    )


# --------------------------------------------------------------------------
# responses


def _raw_header(res: Any) -> Optional[str]:
    """Status line plus header block, as it went over the wire."""

    status = _read(res, "status")
    headers = _read(res, "headers")
    if not isinstance(status, str) or headers is None or not hasattr(headers, "items"):
        return None

    lines = [f"HTTP/1.1 {status}"]
    lines.extend(f"{key}: {value}" for key, value in headers.items())
    return "\r\n".join(lines) + "\r\n\r\n"


def serialize_response(res: Any, include_body: bool = False) -> Any:
    """Plain view of a response; the body only when ``include_body`` is set."""

    if not res:
        return res

    status_code = _read(res, "status_code") or _read(res, "statusCode")
    if not status_code:
        return res

    view: Dict[str, Any] = {
        "statusCode": status_code,
        "header": _raw_header(res),
        "headers": _header_dict(_read(res, "headers")),
    }
    if include_body:
        body = _read(res, "body")
        get_data = getattr(res, "get_data", None)
        if body is None and callable(get_data) and not getattr(res, "is_streamed", False):
            body = get_data()
        view["body"] = _decode_body(body)

    return _compact(view)


# --------------------------------------------------------------------------
# errors


class ErrorAdapter(Protocol):
    """Recognizes errors raised by an HTTP client and rebuilds their exchange."""

    def can_handle(self, err: BaseException) -> bool:  # pragma: no cover - protocol
        ...

    def extract(
        self, err: BaseException
    ) -> Tuple[Mapping[str, Any], Optional[Mapping[str, Any]]]:  # pragma: no cover - protocol
        ...


def _client_response_view(response: Any) -> Optional[Dict[str, Any]]:
    if response is None:
        return None
    return _compact(
        {
            "statusCode": _read(response, "status_code"),
            "headers": _header_dict(_read(response, "headers")),
            "body": _decode_body(_read(response, "text")),
        }
    )


class RequestsErrorAdapter:
    """Errors from ``requests``: ``err.request`` is a ``PreparedRequest``."""

    def can_handle(self, err: BaseException) -> bool:
        request = _read(err, "request")
        return (
            request is not None
            and hasattr(request, "method")
            and hasattr(request, "url")
            and hasattr(request, "body")
        )

    def extract(self, err: BaseException):
        request = err.request  # type: ignore[attr-defined]
        fake_request = {
            "method": request.method,
            "url": request.url,
            "headers": request.headers,
            "body": _decode_body(request.body),
        }
        return fake_request, _client_response_view(_read(err, "response"))


class HttpxErrorAdapter:
    """Errors from ``httpx``: ``err.request`` is an ``httpx.Request``."""

    def can_handle(self, err: BaseException) -> bool:
        request = _read(err, "request")
        return (
            request is not None
            and hasattr(request, "method")
            and hasattr(request, "url")
            and hasattr(request, "extensions")
        )

    def extract(self, err: BaseException):
        request = _read(err, "request")
        fake_request = {
            "method": request.method,
            "url": str(request.url),
            "headers": request.headers,
            "body": _decode_body(_read(request, "content")),
        }
        return fake_request, _client_response_view(_read(err, "response"))


_ERROR_ADAPTERS: List[ErrorAdapter] = [RequestsErrorAdapter(), HttpxErrorAdapter()]


def register_error_adapter(adapter: ErrorAdapter) -> None:
    """Register an adapter, tried after the builtin ones."""

    _ERROR_ADAPTERS.append(adapter)


def error_adapters() -> List[ErrorAdapter]:
    return list(_ERROR_ADAPTERS)


def _error_code(err: BaseException) -> Any:
    code = getattr(err, "code", None)
    if code is None:
        code = getattr(err, "errno", None)
    if code is None or isinstance(code, (str, int)):
        return code
    return str(code)


def serialize_error(err: Any) -> Any:
    """Name, message and full traceback, plus the HTTP exchange when known."""

    if not isinstance(err, BaseException):
        return err

    view = _compact(
        {
            "message": str(err),
            "name": type(err).__name__,
            "stack": "".join(traceback.format_exception(type(err), err, err.__traceback__)).rstrip(),
            "code": _error_code(err),
        }
    )

    for adapter in _ERROR_ADAPTERS:
        if not adapter.can_handle(err):
            continue
        request, response = adapter.extract(err)
        view["request"] = serialize_request(request)
        if response is not None:
            view["response"] = response
        LOGGER.debug("Error %s enriched by %s", type(err).__name__, type(adapter).__name__)
        break

    return view


def create_detailed_request_serializers() -> Dict[str, Serializer]:
    """Serializers for the ``req``, ``res`` and ``err`` fields."""

    return {
        "req": serialize_request,
        "res": serialize_response,
        "err": serialize_error,
    }
