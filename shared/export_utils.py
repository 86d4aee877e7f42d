"""
CSV export helpers.

Every field is quoted and embedded quotes are doubled (``csv.QUOTE_ALL``), so
free text with commas, quotes or newlines survives a round trip through any
standard CSV reader.
"""

from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Any, Iterable, Sequence

VISIT_EXPORT_HEADERS = ["Page", "Path", "Device", "Browser", "Country", "City", "Timestamp"]
LEAD_EXPORT_HEADERS = ["Name", "Email", "Message", "Page", "Country", "Status", "Created At"]


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def rows_to_csv(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_cell(value) for value in row])
    return output.getvalue()


def visits_to_csv(visits: Iterable[dict[str, Any]]) -> str:
    return rows_to_csv(
        VISIT_EXPORT_HEADERS,
        (
            [
                v.get("page"),
                v.get("path"),
                v.get("device"),
                v.get("browser"),
                v.get("country"),
                v.get("city"),
                v.get("timestamp"),
            ]
            for v in visits
        ),
    )


def leads_to_csv(leads: Iterable[dict[str, Any]]) -> str:
    return rows_to_csv(
        LEAD_EXPORT_HEADERS,
        (
            [
                lead.get("name"),
                lead.get("email"),
                lead.get("message"),
                lead.get("page"),
                lead.get("country"),
                lead.get("status"),
                lead.get("createdAt"),
            ]
            for lead in leads
        ),
    )
