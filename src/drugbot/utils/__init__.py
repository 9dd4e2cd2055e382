"""Shared utilities: settings, logging setup and value transforms."""
from drugbot.utils.config import Settings, get_settings, reload_settings
from drugbot.utils.logging import setup_logging
from drugbot.utils.transforms import (
    integer_to_boolean,
    boolean_to_integer,
    apply_transform,
    TRANSFORM_FUNCTIONS,
)

__all__ = [
    "Settings",
    "get_settings",
    "reload_settings",
    "setup_logging",
    "integer_to_boolean",
    "boolean_to_integer",
    "apply_transform",
    "TRANSFORM_FUNCTIONS",
]
