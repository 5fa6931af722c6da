"""
PURPOSE: Export configuration settings and constants for Signal Ledger.

This module centralizes access to the settings singleton and the constants
shared by the validator, storage and API layers.
"""

from .constants import (
    ACK_MESSAGE,
    EVENT_FIELDS,
    INTERVALS,
    SchemaVariant,
    StorageBackend,
    TIMESTAMP_FIELDS,
)
from .settings import Settings, settings

__all__ = [
    "settings",
    "Settings",
    "SchemaVariant",
    "StorageBackend",
    "INTERVALS",
    "TIMESTAMP_FIELDS",
    "EVENT_FIELDS",
    "ACK_MESSAGE",
]
