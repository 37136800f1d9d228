"""HTTP response values and helpers for building them."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass
class Response:
    """A status code, headers and a body ready to send."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


def _encode_default(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def json_response(code: int, payload: Any) -> Response:
    """Serialise ``payload`` as JSON; a payload that cannot be encoded gives 500."""
    headers = {"Content-Type": "application/json"}
    try:
        body = json.dumps(payload, default=_encode_default).encode("utf-8")
    except (TypeError, ValueError) as err:
        logger.error("Error marshalling JSON: %s", err)
        return Response(500, headers)
    return Response(code, headers, body)


def error_response(code: int, message: str, error: Optional[BaseException]) -> Response:
    """A JSON error body, logging the cause and any server-side failure."""
    if error is not None:
        logger.error("%s", error)
    if code > 499:
        logger.error("Responding with 5XX error: %s", message)
    return json_response(code, {"error": message})


def text_response(code: int, text: str) -> Response:
    return Response(code, {"Content-Type": "text/plain; charset=utf-8"}, text.encode("utf-8"))


def no_store(response: Response) -> Response:
    """Forbid caching of the response."""
    response.headers["Cache-Control"] = "no-store"
    return response