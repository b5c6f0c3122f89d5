"""
Lenient numeric option parsing.

Bad values never abort a run: they are reported and the default is kept.
"""

import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


def parse_option(name: str,
                 raw: Optional[str],
                 default: Any,
                 convert: Callable[[str], Any] = float,
                 is_valid: Optional[Callable[[Any], bool]] = None,
                 expected: str = "float") -> Any:
    """
    Convert a command line value, falling back to the default on failure.

    Args:
        name: Option name as typed on the command line
        raw: Raw string value, None when the option was not given
        default: Value used when the option is missing or invalid
        convert: Conversion function (e.g. float, int)
        is_valid: Optional range check applied after conversion
        expected: Human readable description of the expected value

    Returns:
        Converted value or the default
    """
    if raw is None:
        return default

    try:
        value = convert(raw)
    except (TypeError, ValueError):
        valid = False
    else:
        valid = is_valid is None or is_valid(value)

    if valid:
        return value

    logger.warning(f"Value for parameter {name} is not valid. "
                   f"Received value: {raw!r}, expected: {expected}, defaulting to: {default}")
    return default
