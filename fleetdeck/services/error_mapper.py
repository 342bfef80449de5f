"""Centralized exception mapping for consistent user-facing errors."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ErrorMapping:
    """Normalized user-facing error payload shown in the status bar."""

    code: str
    message: str
    http_status: int
    hint: str = ""
    retryable: bool = False


def _extract_message(error: Any) -> str:
    if error is None:
        return ""

    detail = getattr(error, "detail", None)
    if detail is not None:
        if isinstance(detail, dict):
            if "error" in detail:
                return str(detail["error"])
            if "detail" in detail:
                return str(detail["detail"])
        return str(detail)

    if isinstance(error, dict):
        if "error" in error:
            return str(error["error"])
        if "detail" in error:
            return str(error["detail"])

    return str(error)


def map_exception(error: Any, *, default_status: int = 500) -> ErrorMapping:
    """Map raw exceptions/messages into stable user-facing error semantics."""
    raw_message = _extract_message(error).strip()
    lowered = raw_message.lower()
    status = getattr(error, "status_code", None) or default_status

    if status in (401, 403) or any(
        token in lowered for token in ("unauthorized", "forbidden", "authentication")
    ):
        return ErrorMapping(
            code="auth_error",
            message="Dashboard rejected the request. Sign in again and retry.",
            http_status=401 if status not in (401, 403) else status,
            hint="Check the API credentials configured for this workstation.",
        )

    if status == 404 or "not found" in lowered:
        return ErrorMapping(
            code="not_found",
            message=raw_message or "Requested record was not found.",
            http_status=404,
            hint="The record may have been removed; refresh the view.",
        )

    if status == 429 or any(token in lowered for token in ("rate limit", "too many requests")):
        return ErrorMapping(
            code="rate_limited",
            message="Dashboard rate limit reached. Wait briefly, then retry.",
            http_status=429,
            retryable=True,
        )

    if any(token in lowered for token in ("timeout", "timed out")):
        return ErrorMapping(
            code="timeout",
            message="Dashboard request timed out.",
            http_status=504,
            hint="Retry shortly; the server may be under load.",
            retryable=True,
        )

    if any(
        token in lowered
        for token in (
            "connection",
            "refused",
            "unreachable",
            "all connection attempts failed",
            "network",
        )
    ):
        return ErrorMapping(
            code="connection_error",
            message="Could not reach the dispatch server.",
            http_status=503,
            hint="Check API_BASE_URL and LIVE_URL and that the server is running.",
            retryable=True,
        )

    if status >= 500:
        return ErrorMapping(
            code="internal_error",
            message="Internal server error",
            http_status=status,
        )

    return ErrorMapping(
        code="request_error",
        message=raw_message or "Request failed",
        http_status=status,
    )
