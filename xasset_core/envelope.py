"""
Response trust envelope.

Every remote reply is classified in three sequential steps:

  1. transport   – unreachable or HTTP status != 200  -> TransportError
  2. decode      – body is not a UTF-8 JSON object with an integer ``errno``
                                                      -> MalformedResponse
  3. application – ``errno`` != SUCCESS                -> RemoteRejected

Only a reply that passes all three becomes a ``ResponseEnvelope``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from xasset_core.errors import MalformedResponse, RemoteRejected, TransportError

logger = logging.getLogger("xasset_envelope")

SUCCESS = 0
TRACE_ID_HEADER = "X-Trace-Id"


@dataclass(frozen=True)
class ResponseEnvelope:
    http_status: int
    errno: int
    request_id: str
    trace_id: str
    raw_body: str = field(repr=False)
    payload: dict = field(default_factory=dict, repr=False)

    @property
    def ok(self) -> bool:
        return self.http_status == 200 and self.errno == SUCCESS

    def get(self, key: str, default: Any = None) -> Any:
        return self.payload.get(key, default)


def get_trace_id(headers: Optional[Mapping[str, str]]) -> str:
    """Case-insensitive lookup of the remote trace id header."""
    if not headers:
        return ""
    wanted = TRACE_ID_HEADER.lower()
    for name, value in headers.items():
        if name.lower() == wanted:
            return value
    return ""


def _log_extra(operation: str, request_id: str = "", trace_id: str = "") -> dict:
    return {"operation": operation, "request_id": request_id, "trace_id": trace_id}


def classify_response(
    operation: str,
    http_status: Optional[int],
    body: Union[str, bytes, None],
    headers: Optional[Mapping[str, str]] = None,
    url: str = "",
) -> ResponseEnvelope:
    """
    Classify a raw reply for ``operation``.

    ``http_status`` is None when the remote could not be reached.
    """
    trace_id = get_trace_id(headers)
    if isinstance(body, (bytes, bytearray)):
        shown = bytes(body).decode("utf-8", errors="replace")
    else:
        shown = body or ""

    # 1. transport
    if http_status != 200:
        logger.warning(
            "post request response is not 200. [http_code: %s] [url: %s] [body: %s] [trace_id: %s]",
            http_status, url, shown, trace_id,
            extra=_log_extra(operation, trace_id=trace_id),
        )
        reason = "remote unreachable" if http_status is None else f"http status {http_status}"
        raise TransportError(
            reason, http_status=http_status, operation=operation, trace_id=trace_id or None,
        )

    # 2. decode
    try:
        raw = bytes(body).decode("utf-8") if isinstance(body, (bytes, bytearray)) else shown
        payload = json.loads(raw)
    except ValueError as exc:
        logger.warning(
            "unmarshal body failed. [http_code: %s] [url: %s] [body: %s] [trace_id: %s]",
            http_status, url, shown, trace_id,
            extra=_log_extra(operation, trace_id=trace_id),
        )
        reason = (
            "response body is not valid UTF-8" if isinstance(exc, UnicodeDecodeError)
            else "response body is not valid JSON"
        )
        raise MalformedResponse(
            reason, operation=operation, trace_id=trace_id or None,
        ) from exc
    if not isinstance(payload, dict):
        raise MalformedResponse(
            "response body is not a JSON object", operation=operation, trace_id=trace_id or None,
        )
    errno = payload.get("errno")
    if isinstance(errno, bool) or not isinstance(errno, int):
        raise MalformedResponse(
            f"response errno missing or not an integer: {errno!r}",
            operation=operation, trace_id=trace_id or None,
        )
    request_id = payload.get("request_id") or ""
    if not isinstance(request_id, str):
        request_id = str(request_id)

    # 3. application
    if errno != SUCCESS:
        logger.warning(
            "get resp failed. [url: %s] [request_id: %s] [err_no: %d] [trace_id: %s]",
            url, request_id, errno, trace_id,
            extra=_log_extra(operation, request_id, trace_id),
        )
        raise RemoteRejected(
            errno,
            str(payload.get("msg") or ""),
            operation=operation,
            request_id=request_id or None,
            trace_id=trace_id or None,
        )

    logger.debug(
        "operate succ. [url: %s] [request_id: %s] [trace_id: %s]",
        url, request_id, trace_id,
        extra=_log_extra(operation, request_id, trace_id),
    )
    return ResponseEnvelope(
        http_status=http_status,
        errno=errno,
        request_id=request_id,
        trace_id=trace_id,
        raw_body=raw,
        payload=payload,
    )
