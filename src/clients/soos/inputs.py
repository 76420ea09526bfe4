from __future__ import annotations

from typing import Any, Mapping

from core.errors import ExternalServiceError, ValidationError


def normalize_base_url(api_url: str) -> str:
    # httpx joins relative paths onto the base URL, which needs a trailing "/"
    url = (api_url or "").strip()
    if not url:
        raise ValidationError("api_url must be non-empty")
    if not url.startswith(("http://", "https://")):
        raise ValidationError(f"Invalid API URL: {url}")
    return url if url.endswith("/") else url + "/"


def require_field(data: Mapping[str, Any], *names: str) -> str:
    """Return the first non-empty field among `names` as a string."""
    for name in names:
        value = data.get(name)
        if value is not None and str(value).strip():
            return str(value).strip()
    raise ExternalServiceError(f"SOOS API response is missing '{names[0]}'")
