"""
PURPOSE: Input validation for inbound webhook payloads.
Ensures required fields and enumerated values are sound before an event is
handed to storage. Rules run in a fixed order and the first failure wins.
"""

import math
from typing import Any, Mapping, Optional, Union

from signal_ledger.config.constants import (
    INTEGER_FIELDS,
    INTERVALS,
    INVALID_INTERVAL_MESSAGE,
    INVALID_TIMESTAMP_MESSAGE,
    MISSING_FIELDS_MESSAGE,
    NUMERIC_FIELDS,
    TIMESTAMP_FIELDS,
    SchemaVariant,
)
from signal_ledger.core.exceptions import EventValidationError
from signal_ledger.schemas.event import EventCreate
from signal_ledger.utils.time_utils import parse_timestamp

# Range of a signed 64-bit column, the widest integer the stores persist
INTEGER_MIN = -(2 ** 63)
INTEGER_MAX = 2 ** 63 - 1


def validate_interval(interval: str) -> bool:
    """
    PURPOSE: Validate that the bar interval is one of the supported durations.

    Args:
        interval: Interval string to validate.

    Returns:
        bool: True if interval is in INTERVALS, False otherwise.
    """
    return interval in INTERVALS


def parse_number(value: Any, integer: bool = False) -> Optional[float]:
    """
    PURPOSE: Parse a numeric payload value sent as a JSON number or a string.

    Booleans, non-finite values, integers too large for a float and (for
    integer fields) fractional or out-of-64-bit-range values are rejected.

    Args:
        value: Raw value from the payload.
        integer: Require an integral value and return it as int.

    Returns:
        Optional[float]: The parsed number, or None if it does not parse.
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = int(text)
        except ValueError:
            try:
                number = float(text)
            except (ValueError, OverflowError):
                return None
    else:
        return None

    if isinstance(number, float) and not math.isfinite(number):
        return None

    if integer:
        if isinstance(number, float):
            if not number.is_integer():
                return None
            number = int(number)
        if not INTEGER_MIN <= number <= INTEGER_MAX:
            return None
        return number

    try:
        return float(number)
    except OverflowError:
        return None


def _present(value: Any) -> bool:
    """A payload field counts as present unless it is null or an empty string."""
    if value is None:
        return False
    if isinstance(value, str) and value == "":
        return False
    return True


def _text(value: Any) -> Optional[str]:
    """Scalar payload value as text, or None for booleans, objects and arrays."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _raw_timestamp(value: Any) -> Optional[Union[str, int, float]]:
    """Timestamp as sent: a string or a JSON number (epoch milliseconds)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (str, int, float)):
        return value
    return None


def validate_webhook_payload(
    payload: Mapping[str, Any],
    variant: SchemaVariant = SchemaVariant.MINIMAL,
) -> EventCreate:
    """
    PURPOSE: Turn a raw webhook body into an EventCreate or reject it.

    Rules, in order:
        1. ticker missing or empty            -> "Missing required fields"
        2. timestamp missing                  -> "Missing required fields"
           timestamp unparseable (extended)   -> "Invalid timestamp format"
        3. interval outside INTERVALS         -> "Invalid interval value"
        4. optional numeric field unparseable -> "Invalid <field> value"

    The extended variant reads `timenow`, falling back to `timestamp`.
    Keys outside the variant's field set are ignored.

    CALLED BY: EventService.ingest

    Args:
        payload: Decoded JSON object from the request body.
        variant: Field set of this deployment.

    Returns:
        EventCreate: Typed event ready for persistence.

    Raises:
        EventValidationError: With the reason of the first failed rule.
    """
    ticker = _text(payload.get("ticker"))
    if not ticker:
        raise EventValidationError(MISSING_FIELDS_MESSAGE)

    timestamp_field = TIMESTAMP_FIELDS[variant]
    raw_timestamp = payload.get(timestamp_field)
    if not _present(raw_timestamp) and variant is SchemaVariant.EXTENDED:
        raw_timestamp = payload.get("timestamp")
    if not _present(raw_timestamp):
        raise EventValidationError(MISSING_FIELDS_MESSAGE)

    if variant is SchemaVariant.EXTENDED:
        timestamp = parse_timestamp(raw_timestamp)
        if timestamp is None:
            raise EventValidationError(INVALID_TIMESTAMP_MESSAGE)
    else:
        timestamp = _raw_timestamp(raw_timestamp)
        if timestamp is None:
            raise EventValidationError(MISSING_FIELDS_MESSAGE)

    fields = {"ticker": ticker, "timestamp": timestamp}

    if variant is SchemaVariant.EXTENDED:
        interval = payload.get("interval")
        if _present(interval):
            if not isinstance(interval, str) or not validate_interval(interval):
                raise EventValidationError(INVALID_INTERVAL_MESSAGE)
            fields["interval"] = interval

    for name in NUMERIC_FIELDS[variant]:
        raw = payload.get(name)
        if not _present(raw):
            continue
        number = parse_number(raw, integer=name in INTEGER_FIELDS)
        if number is None:
            raise EventValidationError(f"Invalid {name} value")
        fields[name] = number

    message = payload.get("message")
    if message is not None:
        fields["message"] = message if isinstance(message, str) else str(message)

    return EventCreate(**fields)
