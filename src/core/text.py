from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Tuple

from core.errors import ValidationError


def pluralize(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def split_patterns(raw: Optional[str]) -> Tuple[str, ...]:
    # "a, b,,c" -> ("a", "b", "c")
    if not raw:
        return tuple()
    return tuple(p.strip() for p in raw.split(",") if p.strip())


def ensure_value(value: Optional[str], name: str) -> str:
    clean = (value or "").strip()
    if not clean:
        raise ValidationError(f"Missing required value: {name}")
    return clean


def mask_properties(values: Mapping[str, Any], secret_keys: Iterable[str]) -> dict[str, Any]:
    """Copy `values`, replacing non-empty secrets with asterisks."""
    secrets = set(secret_keys)
    out: dict[str, Any] = {}
    for key, value in values.items():
        if key in secrets and value:
            out[key] = "*" * 8
        else:
            out[key] = value
    return out
