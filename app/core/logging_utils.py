import re
from typing import Any, Dict, Optional
from fastapi import Request

MASK = "***MASKED***"

# Dictionary keys whose values are always masked
SECRET_KEY_TERMS = ("key_value", "secret", "password", "private_key")
TOKEN_KEY_TERMS = ("token", "jwt", "authorization", "bearer", "x-api-key", "api-key")

# Known provider secret prefixes (OpenAI, Stripe, GitHub, Slack, AWS access keys)
SECRET_PREFIX_PATTERN = re.compile(r'^(sk-|sk_|pk_|rk_|ghp_|gho_|xox[abp]-|AKIA)[A-Za-z0-9_\-]{8,}$')


def mask_sensitive_data(data: Any, mask_string: str = MASK) -> Any:
    """
    Recursively mask sensitive data in dictionaries, lists, and strings.

    Args:
        data: Data structure to mask (dict, list, str, or other)
        mask_string: String to use for masking

    Returns:
        Masked data structure
    """
    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            key_lower = str(key).lower()

            # request_id is needed for traceability
            if key_lower in ("requestid", "request_id"):
                masked[key] = value
            elif any(term in key_lower for term in SECRET_KEY_TERMS):
                masked[key] = mask_string
            elif any(term in key_lower for term in TOKEN_KEY_TERMS):
                masked[key] = mask_string
            # Partial mask for email (first 3 chars + domain)
            elif key_lower == "email" and isinstance(value, str):
                local, _, domain = value.partition("@")
                if domain and len(local) > 3:
                    masked[key] = local[:3] + "***@" + domain
                else:
                    masked[key] = mask_string
            else:
                masked[key] = mask_sensitive_data(value, mask_string)

        return masked

    if isinstance(data, (list, tuple)):
        return [mask_sensitive_data(item, mask_string) for item in data]

    if isinstance(data, str):
        # JWT tokens start with eyJ
        if data.startswith("eyJ") and len(data) > 50:
            return mask_string
        if SECRET_PREFIX_PATTERN.match(data):
            return mask_string
        # Long opaque strings without hyphens look like keys; UUIDs keep their hyphens
        if len(data) > 32 and re.match(r'^[A-Za-z0-9_]+$', data):
            return mask_string
        return data

    return data


def mask_headers(headers: Dict[str, str]) -> Dict[str, str]:
    """Mask authentication-bearing HTTP headers."""
    sensitive_headers = (
        "authorization",
        "x-api-key",
        "api-key",
        "x-auth-token",
        "cookie",
        "set-cookie",
    )
    return {
        key: MASK if any(s in key.lower() for s in sensitive_headers) else value
        for key, value in headers.items()
    }


def get_request_id(request: Optional[Request]) -> Optional[str]:
    """Request ID stored on the request state by LoggingMiddleware, if any."""
    if request is not None and hasattr(request.state, "request_id"):
        return request.state.request_id
    return None


def sanitize_log_message(message: str, **kwargs: Any) -> str:
    """
    Build a log line from a message and masked context values.

    The RequestID keyword is appended last so RequestIDFormatter can lift it
    into its own column.

    Example:
        sanitize_log_message("Key created", KeyID=3, RequestID=rid)
        -> "Key created | KeyID: 3 | RequestID: <uuid>"
    """
    request_id = kwargs.pop('RequestID', None) or kwargs.pop('request_id', None)

    parts = []
    for key, value in mask_sensitive_data(kwargs).items():
        if isinstance(value, (dict, list)):
            value = str(value)[:200]
        parts.append(f"{key}: {value}")

    formatted = f"{message} | {' | '.join(parts)}" if parts else message
    if request_id:
        formatted = f"{formatted} | RequestID: {request_id}"
    return formatted
