"""Option schemas for validation, error display and scale calculation.

Callers pass plain dicts; each schema fills in defaults and rejects unknown
keys or wrong types. Invalid options are a programming error and raise
ValueError.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import voluptuous as vol
import homeassistant.helpers.config_validation as cv

from .const import (
    DEFAULT_LOCALE,
    DEFAULT_MARGIN_RATIO,
    DEFAULT_MAX_MESSAGE_LENGTH,
    DEFAULT_MAX_TICKS,
    DEFAULT_MIN_TICKS,
    DEFAULT_PREFERRED_INTERVALS,
    DEFAULT_TARGET_TICK_COUNT,
    DEFAULT_TIMEOUT_CHECK_EVERY,
    DISPLAY_MARGIN_MULTIPLIER,
)

_LOGGER = logging.getLogger(__name__)

# ----- Option keys -----
OPT_ENABLE_WARNINGS = "enable_warnings"
OPT_STRICT_MODE = "strict_mode"
OPT_PERFORMANCE_MODE = "performance_mode"
OPT_TIMEOUT_MS = "timeout_ms"
OPT_MAX_RECORDS = "max_records"
OPT_STARTED_AT = "started_at"
OPT_TIMEOUT_CHECK_EVERY = "timeout_check_every"

OPT_LOCALE = "locale"
OPT_INCLUDE_DEBUG_INFO = "include_debug_info"
OPT_MAX_MESSAGE_LENGTH = "max_message_length"

OPT_MARGIN_RATIO = "margin_ratio"
OPT_PREFERRED_INTERVALS = "preferred_intervals"
OPT_MAX_TICKS = "max_ticks"
OPT_MIN_TICKS = "min_ticks"
OPT_FORCE_ZERO = "force_zero"
OPT_TARGET_TICK_COUNT = "target_tick_count"
OPT_MARGIN_MULTIPLIER = "margin_multiplier"

_POSITIVE_NUMBER = vol.All(vol.Coerce(float), vol.Range(min=0, min_included=False))

VALIDATION_OPTIONS_SCHEMA = vol.Schema(
    {
        vol.Optional(OPT_ENABLE_WARNINGS, default=True): cv.boolean,
        vol.Optional(OPT_STRICT_MODE, default=False): cv.boolean,
        vol.Optional(OPT_PERFORMANCE_MODE, default=False): cv.boolean,
        vol.Optional(OPT_TIMEOUT_MS, default=None): vol.Any(None, cv.positive_float),
        vol.Optional(OPT_MAX_RECORDS, default=None): vol.Any(None, vol.All(vol.Coerce(int), vol.Range(min=1))),
        vol.Optional(OPT_STARTED_AT, default=None): vol.Any(None, vol.Coerce(float)),
        vol.Optional(OPT_TIMEOUT_CHECK_EVERY, default=DEFAULT_TIMEOUT_CHECK_EVERY): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
    }
)

ERROR_PROCESSING_OPTIONS_SCHEMA = vol.Schema(
    {
        # unsupported locales are accepted here and resolved to the default later
        vol.Optional(OPT_LOCALE, default=DEFAULT_LOCALE): vol.Any(None, cv.string),
        vol.Optional(OPT_INCLUDE_DEBUG_INFO, default=False): cv.boolean,
        vol.Optional(OPT_MAX_MESSAGE_LENGTH, default=DEFAULT_MAX_MESSAGE_LENGTH): vol.All(
            vol.Coerce(int), vol.Range(min=4)
        ),
    }
)

SCALE_OPTIONS_SCHEMA = vol.Schema(
    {
        vol.Optional(OPT_MARGIN_RATIO, default=DEFAULT_MARGIN_RATIO): vol.All(vol.Coerce(float), vol.Range(min=0)),
        vol.Optional(OPT_PREFERRED_INTERVALS, default=list(DEFAULT_PREFERRED_INTERVALS)): vol.All(
            [_POSITIVE_NUMBER], vol.Length(min=1)
        ),
        vol.Optional(OPT_MAX_TICKS, default=DEFAULT_MAX_TICKS): vol.All(vol.Coerce(int), vol.Range(min=2)),
        vol.Optional(OPT_MIN_TICKS, default=DEFAULT_MIN_TICKS): vol.All(vol.Coerce(int), vol.Range(min=2)),
        vol.Optional(OPT_FORCE_ZERO, default=False): cv.boolean,
        vol.Optional(OPT_TARGET_TICK_COUNT, default=DEFAULT_TARGET_TICK_COUNT): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
        vol.Optional(OPT_MARGIN_MULTIPLIER, default=DISPLAY_MARGIN_MULTIPLIER): _POSITIVE_NUMBER,
    }
)


def _apply(schema: vol.Schema, options: Optional[Dict[str, Any]], what: str) -> Dict[str, Any]:
    if options is None:
        options = {}
    if not isinstance(options, dict):
        raise ValueError(f"{what} must be a dict, got {type(options).__name__}")
    try:
        return schema(dict(options))
    except vol.Invalid as exc:
        _LOGGER.debug("Rejected %s %r: %s", what, options, exc)
        raise ValueError(f"Invalid {what}: {exc}") from exc


def validation_options(options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return validation options with defaults applied."""
    return _apply(VALIDATION_OPTIONS_SCHEMA, options, "validation options")


def error_processing_options(options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return error display options with defaults applied."""
    return _apply(ERROR_PROCESSING_OPTIONS_SCHEMA, options, "error processing options")


def scale_options(options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return scale options with defaults applied; min_ticks must not exceed max_ticks."""
    opts = _apply(SCALE_OPTIONS_SCHEMA, options, "scale options")
    if opts[OPT_MIN_TICKS] > opts[OPT_MAX_TICKS]:
        raise ValueError(
            f"Invalid scale options: min_ticks={opts[OPT_MIN_TICKS]} exceeds max_ticks={opts[OPT_MAX_TICKS]}"
        )
    return opts
