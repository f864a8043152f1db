"""
Import/Export Codec

Converts tracker state to and from the portable export document and the
flattened CSV sheet.

Export document shape (version 1.0):
    {
        "expenses": [ {id, date, category, amount, description}, ... ],
        "budget": 1000.0,
        "timestamp": "2024-03-20T10:15:00.000Z",
        "version": "1.0"
    }

The same document, base64-encoded, is the internal snapshot.

KNOWN LIMITATION: CSV fields are joined with commas and never quoted.
A description containing a comma or newline shifts the columns.
"""

import base64
import binascii
import json
import math
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from expense_tracker.models.expense import ExpenseRecord, LoadedState, TrackerState


EXPORT_VERSION = "1.0"

CSV_HEADERS = {
    "gu": ("તારીખ", "શ્રેણી", "રકમ", "વર્ણન"),
    "en": ("date", "category", "amount", "description"),
}

JSON_MEDIA_TYPE = "application/json"
CSV_MEDIA_TYPE = "text/csv;charset=utf-8"


class FormatError(ValueError):
    """Raised when an import document or snapshot is malformed."""


DocumentInput = Union[str, bytes, Mapping[str, Any]]


# =============================================================================
# JSON DOCUMENT
# =============================================================================

def isoformat_utc(moment: datetime) -> str:
    """ISO 8601 UTC instant with millisecond precision and a trailing Z."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_json(state: TrackerState, now: Optional[datetime] = None) -> dict:
    """
    Build the export document for a state.

    Args:
        state: Records and budget to export
        now: Export instant; defaults to the current UTC time
    """
    moment = now or datetime.now(timezone.utc)
    return {
        "expenses": [record.to_storage_dict() for record in state.records],
        "budget": state.budget,
        "timestamp": isoformat_utc(moment),
        "version": EXPORT_VERSION,
    }


def dumps_document(document: Mapping[str, Any]) -> str:
    """Render an export document the way it is written to disk."""
    return json.dumps(document, indent=2, ensure_ascii=False)


def _load_document(doc: DocumentInput) -> Mapping[str, Any]:
    if isinstance(doc, bytes):
        try:
            doc = doc.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FormatError(f"Document is not valid UTF-8: {e}") from e
    if isinstance(doc, str):
        try:
            doc = json.loads(doc)
        except json.JSONDecodeError as e:
            raise FormatError(f"Document is not valid JSON: {e}") from e
    if not isinstance(doc, Mapping):
        raise FormatError("Document must be a JSON object")
    return doc


def _parse_budget(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        budget = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(budget) or budget < 0:
        return None
    return budget


def read_document(doc: DocumentInput) -> LoadedState:
    """
    Parse an export document without deciding on a budget fallback.

    Returns:
        LoadedState whose budget is None when the document has no usable one

    Raises:
        FormatError: If the document is not a JSON object, the expense
                     collection is missing or not a list, a record cannot
                     be interpreted, or two records share an id
    """
    document = _load_document(doc)

    raw_records = document.get("expenses", document.get("records"))
    if not isinstance(raw_records, (list, tuple)):
        raise FormatError("Document must contain an 'expenses' list")

    records = []
    for index, raw in enumerate(raw_records):
        if not isinstance(raw, Mapping):
            raise FormatError(f"Expense #{index} is not an object")
        try:
            records.append(ExpenseRecord.model_validate(dict(raw)))
        except PydanticValidationError as e:
            raise FormatError(f"Expense #{index} is invalid: {e.errors()[0]['msg']}") from e

    ids = [record.id for record in records]
    if len(ids) != len(set(ids)):
        raise FormatError("Document contains duplicate expense ids")

    return LoadedState(records=records, budget=_parse_budget(document.get("budget")))


def from_json(doc: DocumentInput, current_budget: float = 0.0) -> TrackerState:
    """
    Parse an export document into a state.

    Args:
        doc: JSON text, bytes, or an already-decoded mapping
        current_budget: Budget kept when the document has no usable budget

    Raises:
        FormatError: See read_document
    """
    loaded = read_document(doc)
    return TrackerState(
        records=loaded.records or [],
        budget=current_budget if loaded.budget is None else loaded.budget,
    )


# =============================================================================
# SNAPSHOT ENCODING
# =============================================================================

def encode_snapshot(document: Mapping[str, Any]) -> str:
    """Base64 of the UTF-8 export document."""
    return base64.b64encode(dumps_document(document).encode("utf-8")).decode("ascii")


def decode_snapshot(encoded: str) -> Mapping[str, Any]:
    """
    Inverse of encode_snapshot.

    Raises:
        FormatError: If the payload is not base64-encoded JSON
    """
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FormatError(f"Snapshot is not valid base64: {e}") from e
    return _load_document(raw)


# =============================================================================
# CSV
# =============================================================================

def _format_amount(amount: float) -> str:
    if amount.is_integer():
        return str(int(amount))
    return repr(amount)


def to_csv(
    records: Iterable[ExpenseRecord],
    headers: Iterable[str] = CSV_HEADERS["gu"],
) -> str:
    """
    Flatten records into CSV text, one row per record in the given order.

    Fields are comma-joined without quoting (see module docstring).
    """
    lines = [",".join(headers)]
    for record in records:
        lines.append(",".join([
            record.date.isoformat(),
            record.category,
            _format_amount(record.amount),
            record.description,
        ]))
    return "\n".join(lines)


# =============================================================================
# FILE NAMES
# =============================================================================

def csv_filename(today: date) -> str:
    return f"expenses_{today.isoformat()}.csv"


def backup_filename(today: date) -> str:
    return f"expense_tracker_backup_{today.isoformat()}.json"
