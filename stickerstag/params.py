"""
Parameter parsing and clamping.

Callers hand numbers (or numeric strings from the command line) to the
effects; every public entry point re-validates them here. Out-of-range values
are clamped, never rejected, and each clamp is logged and emitted as a
:class:`~stickerstag.errors.ParameterOutOfRange` warning.
"""

from __future__ import annotations

import logging
import math
import warnings
from typing import Any

from .errors import ParameterOutOfRange

logger = logging.getLogger(__name__)


def to_number(name: str, value: Any, default: float) -> float:
    """Parse ``value`` as a float, falling back to ``default``.

    Strings are stripped first. Empty, unparsable and non-finite values use the
    default (and are reported like a clamp).
    """
    if isinstance(value, bool):
        return float(value)
    if value is None:
        return float(default)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return float(default)
    try:
        number = float(value)
    except (TypeError, ValueError):
        _report(name, value, default, "is not a number")
        return float(default)
    if not math.isfinite(number):
        _report(name, value, default, "is not finite")
        return float(default)
    return number


def to_bool(value: Any) -> bool:
    """Parse a flag. Strings are true only for 1, true or yes, in any case."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def clamp(
    name: str,
    value: Any,
    minimum: float | None = None,
    maximum: float | None = None,
    default: float = 0.0,
) -> float:
    """Parse and clamp a numeric parameter to ``[minimum, maximum]``.

    :param name: Parameter name used in the log message
    :param value: Raw value, number or string
    :param minimum: Lower bound or None for unbounded
    :param maximum: Upper bound or None for unbounded
    :param default: Used when the value can not be parsed
    :return: The clamped float
    """
    number = to_number(name, value, default)
    clamped = number
    if minimum is not None and clamped < minimum:
        clamped = float(minimum)
    if maximum is not None and clamped > maximum:
        clamped = float(maximum)
    if clamped != number:
        _report(name, number, clamped, f"outside [{minimum}, {maximum}]")
    return clamped


def clamp_int(
    name: str,
    value: Any,
    minimum: int | None = None,
    maximum: int | None = None,
    default: int = 0,
) -> int:
    """Like :func:`clamp` but rounds to the nearest integer first."""
    number = to_number(name, value, default)
    return int(clamp(name, round(number), minimum, maximum, default))


def _report(name: str, value: Any, used: float, reason: str) -> None:
    message = f"Parameter {name}={value!r} {reason}, using {used}"
    logger.warning(message)
    warnings.warn(ParameterOutOfRange(message), stacklevel=4)
