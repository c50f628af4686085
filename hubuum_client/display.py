"""
Tabular rendering of records with rich.

Column titles come from the display names declared on the resource
description; the JSON field names used on the wire are unaffected.
"""

import datetime
import json
from typing import Any, Iterable, Optional, Sequence

from rich.console import Console
from rich.table import Table

from hubuum_client.core.resource import ResourceRecord

NULL = "<null>"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_value(value: Any) -> str:
    """
    Render one cell.

    None shows as ``<null>``, datetimes without fractions or zone, and JSON
    objects or arrays only by their serialized size.
    """
    if value is None:
        return NULL
    if isinstance(value, datetime.datetime):
        return value.strftime(DATETIME_FORMAT)
    if isinstance(value, (dict, list)):
        compact = json.dumps(value, separators=(",", ":"))
        return f"{len(compact)} bytes"
    return str(value)


def render_table(
    records: Iterable[ResourceRecord],
    fields: Optional[Sequence[str]] = None,
    title: Optional[str] = None,
) -> Table:
    """Build a rich Table with one row per record. All records must be of one kind."""
    records = list(records)
    table = Table(title=title)
    if not records:
        return table

    resource = type(records[0])
    fields = list(fields or resource.display_names)
    for name in fields:
        table.add_column(resource.display_names.get(name, name))
    for record in records:
        table.add_row(*(format_value(getattr(record, name, None)) for name in fields))
    return table


def print_table(
    records: Iterable[ResourceRecord],
    fields: Optional[Sequence[str]] = None,
    console: Optional[Console] = None,
) -> None:
    (console or Console()).print(render_table(records, fields))
