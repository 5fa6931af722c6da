"""
PURPOSE: Constants and enumerations for the Signal Ledger webhook service.

Defines the two configuration axes (storage backend and schema variant), the
per-variant field sets, the accepted interval values, and the fixed response
and rejection messages shared by the validator, service and API layers.
"""

from enum import Enum
from typing import Dict, Tuple


class StorageBackend(str, Enum):
    """Where webhook events are persisted."""

    FILE = "file"
    DATABASE = "database"


class SchemaVariant(str, Enum):
    """
    PURPOSE: Field set a deployment stores for each event.

    MINIMAL carries OHLC prices next to ticker/timestamp. EXTENDED adds
    price, volume and interval, and names the signal time `timenow`.
    """

    MINIMAL = "minimal"
    EXTENDED = "extended"


# Bar/candle durations accepted in the `interval` field
INTERVALS: Tuple[str, ...] = ("1m", "5m", "15m", "30m", "1h", "4h", "1d")

# Name of the signal-time field per variant
TIMESTAMP_FIELDS: Dict[SchemaVariant, str] = {
    SchemaVariant.MINIMAL: "timestamp",
    SchemaVariant.EXTENDED: "timenow",
}

PRICE_FIELDS: Tuple[str, ...] = ("open", "high", "low", "close")

# Optional numeric fields validated per variant, in validation order
NUMERIC_FIELDS: Dict[SchemaVariant, Tuple[str, ...]] = {
    SchemaVariant.MINIMAL: PRICE_FIELDS,
    SchemaVariant.EXTENDED: PRICE_FIELDS + ("price", "volume"),
}

INTEGER_FIELDS: Tuple[str, ...] = ("volume",)

# Columns of a stored record (minus id/created_at), in display order
EVENT_FIELDS: Dict[SchemaVariant, Tuple[str, ...]] = {
    SchemaVariant.MINIMAL: ("ticker", "timestamp", "message") + PRICE_FIELDS,
    SchemaVariant.EXTENDED: ("ticker", "timenow", "message")
    + PRICE_FIELDS
    + ("price", "volume", "interval"),
}

ACK_MESSAGE = "Webhook data received successfully"
INTERNAL_ERROR_MESSAGE = "Internal server error"
INVALID_BODY_MESSAGE = "Invalid JSON body"

MISSING_FIELDS_MESSAGE = "Missing required fields"
INVALID_TIMESTAMP_MESSAGE = "Invalid timestamp format"
INVALID_INTERVAL_MESSAGE = "Invalid interval value"
