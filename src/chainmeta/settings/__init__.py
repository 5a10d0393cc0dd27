"""Public interface for chainmeta configuration settings."""

from .config import (
    ENV_VAR_NAME,
    PROJECT_ROOT,
    VALID_CHAIN_NAMES,
    ChainName,
    Settings,
    get_settings,
    reload_settings,
)

__all__ = [
    "ChainName",
    "Settings",
    "get_settings",
    "reload_settings",
    "PROJECT_ROOT",
    "ENV_VAR_NAME",
    "VALID_CHAIN_NAMES",
]
