"""Utility helpers shared by the site configuration loader."""

from __future__ import annotations

import datetime as dt
import typing as typ

from .._constants import CHANGE_FREQUENCIES
from .models import RobotsRule, SiteConfigError


def _normalize_strings(value: str | list[object] | None) -> tuple[str, ...]:
    """Normalize a scalar or list into a tuple of non-empty strings."""
    if isinstance(value, str):
        text = value.strip()
        return (text,) if text else ()
    if isinstance(value, list):
        normalized: list[str] = []
        for segment in value:
            text = str(segment).strip()
            if text:
                normalized.append(text)
        return tuple(normalized)
    return ()


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _require_unit_interval(value: object, *, field: str) -> float:
    """Return ``value`` as a float in [0, 1] or raise SiteConfigError."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        msg = f"'{field}' must be a number, got {value!r}."
        raise SiteConfigError(msg)
    number = float(value)
    if not 0.0 <= number <= 1.0:
        msg = f"'{field}' must be between 0 and 1, got {number}."
        raise SiteConfigError(msg)
    return number


def _require_change_frequency(value: object, *, field: str) -> str:
    """Return ``value`` when it names a sitemap change frequency."""
    text = str(value).strip().lower()
    if text not in CHANGE_FREQUENCIES:
        allowed = ", ".join(sorted(CHANGE_FREQUENCIES))
        msg = f"'{field}' must be one of {allowed}, got {value!r}."
        raise SiteConfigError(msg)
    return text


def _build_robots_rules(
    payload: list[typ.Any] | None, fallback: tuple[RobotsRule, ...]
) -> tuple[RobotsRule, ...]:
    """Build robots user-agent groups from YAML, falling back to defaults."""
    if not payload:
        return fallback
    rules: list[RobotsRule] = []
    for item in payload:
        match item:
            case dict():
                agent = _optional_str(item.get("user_agent")) or "*"
                delay = item.get("crawl_delay")
                rules.append(
                    RobotsRule(
                        user_agent=agent,
                        allow=_normalize_strings(item.get("allow", ["/"])),
                        disallow=_normalize_strings(item.get("disallow")),
                        crawl_delay=int(delay) if delay else None,
                    )
                )
            case _:
                continue
    return tuple(rules) or fallback


def _parse_timestamp(value: dt.datetime | dt.date | str | None) -> dt.datetime | None:
    """Return a timezone-aware UTC datetime parsed from ``value``, or None."""
    match value:
        case dt.datetime():
            parsed = value
        case dt.date():
            parsed = dt.datetime(value.year, value.month, value.day)
        case str() as text:
            sanitized = text.strip()
            if not sanitized:
                return None
            if sanitized.endswith("Z"):
                sanitized = sanitized[:-1] + "+00:00"
            try:
                parsed = dt.datetime.fromisoformat(sanitized)
            except ValueError:
                return None
        case _:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)


__all__ = [
    "_build_robots_rules",
    "_normalize_strings",
    "_optional_str",
    "_parse_timestamp",
    "_require_change_frequency",
    "_require_unit_interval",
]
