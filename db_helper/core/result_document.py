"""Serialize a result cursor into an XML element tree.

Document shape::

    <recordset>
      <record>
        <column name="id" type="INTEGER">1</column>
        ...
      </record>
    </recordset>
"""

from __future__ import annotations

import datetime as dt
import xml.etree.ElementTree as ET
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

from ..utils.logger import get_logger
from .errors import DbHelperError

if TYPE_CHECKING:
    from ..ports.db_api.cursor import ResultCursor

logger = get_logger(__name__)

ROOT_TAG = "recordset"
RECORD_TAG = "record"
COLUMN_TAG = "column"

_EPOCH = dt.date(1970, 1, 1)


def result_to_document(cursor: ResultCursor) -> ET.ElementTree:
    """Build a `recordset` document from every remaining row of `cursor`.

    The cursor is rewound first when the driver allows it; otherwise rows are
    read from the current position. The cursor is left open.
    """

    columns = cursor.columns
    try:
        cursor.before_first()
    except DbHelperError as exc:
        logger.debug("Cursor cannot be rewound, serializing from current position: %s", exc)

    root = ET.Element(ROOT_TAG)
    while cursor.next():
        record = ET.SubElement(root, RECORD_TAG)
        for index, info in enumerate(columns, start=1):
            value = cursor.get(index)
            node = ET.SubElement(record, COLUMN_TAG)
            node.set("name", info.name)
            node.set("type", info.type_name or infer_type_name(value))
            text = format_value(value, info.name)
            if text is not None:
                node.text = text
    return ET.ElementTree(root)


XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


def document_to_string(document: ET.ElementTree) -> str:
    """Render the document as XML text headed by a UTF-8 declaration."""

    return XML_DECLARATION + "\n" + ET.tostring(document.getroot(), encoding="unicode")


def document_to_bytes(document: ET.ElementTree) -> bytes:
    """The `document_to_string()` text, UTF-8 encoded for files and sockets."""

    return document_to_string(document).encode("utf-8")


def format_value(value: Any, column_name: str = "") -> Optional[str]:
    """Render one column value as text; None when it has no text form."""

    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return format_temporal(value)
    logger.warning(
        "Unknown type of column %s: %s. Leaving the value empty in the document.",
        column_name,
        type(value).__name__,
    )
    return None


def format_temporal(value: dt.datetime | dt.date | dt.time) -> str:
    """Format as `yyyy-MM-dd'T'HH:mm:ss.SSSZ`; naive values are taken as UTC."""

    if isinstance(value, dt.datetime):
        moment = value
    elif isinstance(value, dt.date):
        moment = dt.datetime.combine(value, dt.time())
    else:
        moment = dt.datetime.combine(_EPOCH, value)

    if moment.tzinfo is None or moment.utcoffset() is None:
        moment = moment.replace(tzinfo=dt.timezone.utc)

    millis = moment.microsecond // 1000
    return f"{moment:%Y-%m-%dT%H:%M:%S}.{millis:03d}{moment:%z}"


def infer_type_name(value: Any) -> str:
    """Type name for drivers that report none (sqlite3)."""

    if value is None:
        return "NULL"
    if isinstance(value, str):
        return "VARCHAR"
    if isinstance(value, bool):
        return "BOOLEAN"
    if isinstance(value, int):
        return "BIGINT"
    if isinstance(value, Decimal):
        return "DECIMAL"
    if isinstance(value, float):
        return "DOUBLE"
    if isinstance(value, dt.datetime):
        return "TIMESTAMP"
    if isinstance(value, dt.date):
        return "DATE"
    if isinstance(value, dt.time):
        return "TIME"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "BLOB"
    return type(value).__name__.upper()
