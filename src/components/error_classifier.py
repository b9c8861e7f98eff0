"""Categorized error classification for language model failures.

``classify_llm_error`` inspects an exception raised while generating SQL and
returns a short machine-readable category plus a one-line description. The
category goes into the logs; the UI only ever shows a generic message.
"""

from typing import Tuple

from src.components.errors import GenerationError, MissingCredentialError


def classify_llm_error(exc: BaseException) -> Tuple[str, str]:
    """Classify an LLM-related exception into a category and message.

    Returns
    -------
    (category, detail) where *category* is one of:
        "missing_api_key", "empty_response", "quota_exceeded",
        "rate_limited", "invalid_api_key", "model_not_found", "timeout",
        "network_error", "unknown"
    """
    if isinstance(exc, MissingCredentialError):
        return "missing_api_key", "OPENAI_API_KEY is not configured."
    if isinstance(exc, GenerationError):
        return "empty_response", "The model returned no usable SQL."

    error_str = str(exc).lower()
    error_type = type(exc).__name__.lower()

    # HTTP status if present (openai / httpx style)
    http_status = getattr(exc, "status_code", None) or getattr(exc, "http_status", None)
    error_code = getattr(exc, "code", None)
    error_code = str(error_code).lower() if error_code else ""

    # 429: quota and rate limiting share a status code
    if http_status == 429 or "429" in error_str:
        if "insufficient_quota" in error_code or "insufficient_quota" in error_str:
            return "quota_exceeded", "Quota or billing limit exceeded."
        return "rate_limited", "Too many requests; wait a moment and try again."

    if (
        http_status == 401
        or "401" in error_str
        or "authentication" in error_str
        or "invalid api key" in error_str
        or "invalid_api_key" in error_str
    ):
        return "invalid_api_key", "API key is invalid or revoked."

    if http_status == 404 or "model_not_found" in error_str or ("404" in error_str and "model" in error_str):
        return "model_not_found", "Model not found. Check OPENAI_MODEL."

    if "timeout" in error_type or "timeout" in error_str or "timed out" in error_str:
        return "timeout", "Request timed out."

    if any(kw in error_type for kw in ("connection", "network", "dns", "ssl")) or any(
        kw in error_str for kw in ("connection", "network", "dns", "ssl", "unreachable")
    ):
        return "network_error", "Cannot reach the model API."

    return "unknown", "Unexpected error. Check logs for details."
