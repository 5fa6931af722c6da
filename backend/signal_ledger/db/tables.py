"""
PURPOSE: Table definition for stored webhook events.

One table holds every event. Its column set follows the schema variant:
the minimal variant stores OHLC prices under a `timestamp` column, the
extended variant adds price/volume/interval and names the column `timenow`.
"""

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
)

from signal_ledger.config.constants import PRICE_FIELDS, TIMESTAMP_FIELDS, SchemaVariant


def _price_column(name: str) -> Column:
    return Column(name, Numeric(asdecimal=False), nullable=True)


def build_events_table(
    metadata: MetaData,
    variant: SchemaVariant,
    name: str = "webhook_events",
) -> Table:
    """
    PURPOSE: Declare the events table for a schema variant on the given metadata.

    CALLED BY: SqlEventStore.__init__

    Args:
        metadata: MetaData the table is registered on.
        variant: Field set of this deployment.
        name: Table name.

    Returns:
        Table: Events table with an index on ticker.
    """
    timestamp_field = TIMESTAMP_FIELDS[variant]

    columns = [
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("ticker", Text, nullable=False),
        Column(timestamp_field, DateTime(timezone=True), nullable=False),
        Column("message", Text, nullable=True),
    ]
    columns.extend(_price_column(field) for field in PRICE_FIELDS)

    if variant is SchemaVariant.EXTENDED:
        columns.extend(
            [
                _price_column("price"),
                Column("volume", BigInteger, nullable=True),
                Column("interval", String(8), nullable=True),
            ]
        )

    columns.append(Column("created_at", DateTime(timezone=True), nullable=False))

    return Table(
        name,
        metadata,
        *columns,
        Index(f"ix_{name}_ticker", "ticker"),
    )
