"""
Value transforms applied between database columns and UI properties.

Property mappings reference these by name (e.g. ``integerToBoolean``), so
the names are part of the model-map configuration and must stay stable.
"""
import logging
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


def integer_to_boolean(value: Any) -> Optional[bool]:
    """
    Convert a stored integer flag (0/1) to a boolean.

    Args:
        value: Raw database value (int, str, bool or None)

    Returns:
        True/False, or None when the value is None
    """
    if value is None:
        return None

    # bool is a subclass of int, so check it first
    if isinstance(value, bool):
        return value

    if isinstance(value, str):
        if value in ("", "0"):
            return False
        if value in ("1", "true"):
            return True
        try:
            return int(value) == 1
        except ValueError:
            return False

    if isinstance(value, (int, float)):
        return value == 1

    return False


def boolean_to_integer(value: Any) -> Optional[int]:
    """
    Convert a boolean from the UI to the stored integer flag.

    Args:
        value: UI value (bool, int, str or None)

    Returns:
        1/0, or None when the value is None
    """
    if value is None:
        return None

    if isinstance(value, bool):
        return 1 if value else 0

    if isinstance(value, str):
        if value in ("", "0", "false"):
            return 0
        if value in ("1", "true"):
            return 1
        try:
            return int(value)
        except ValueError:
            return 0

    if isinstance(value, (int, float)):
        return 1 if value == 1 else 0

    return 0


TRANSFORM_FUNCTIONS: Dict[str, Callable[[Any], Any]] = {
    "integerToBoolean": integer_to_boolean,
    "booleanToInteger": boolean_to_integer,
}


def apply_transform(transform_name: str, value: Any) -> Any:
    """
    Apply a named transform to a value.

    Unknown transform names are logged and the value is returned unchanged.
    """
    transform = TRANSFORM_FUNCTIONS.get(transform_name)
    if transform is None:
        logger.warning(f"Transform function '{transform_name}' not found")
        return value
    return transform(value)
