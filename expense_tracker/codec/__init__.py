"""Import/export codec package."""

from expense_tracker.codec.documents import (
    CSV_HEADERS,
    CSV_MEDIA_TYPE,
    EXPORT_VERSION,
    JSON_MEDIA_TYPE,
    FormatError,
    backup_filename,
    csv_filename,
    decode_snapshot,
    dumps_document,
    encode_snapshot,
    from_json,
    isoformat_utc,
    read_document,
    to_csv,
    to_json,
)

__all__ = [
    "CSV_HEADERS",
    "CSV_MEDIA_TYPE",
    "EXPORT_VERSION",
    "JSON_MEDIA_TYPE",
    "FormatError",
    "backup_filename",
    "csv_filename",
    "decode_snapshot",
    "dumps_document",
    "encode_snapshot",
    "from_json",
    "isoformat_utc",
    "read_document",
    "to_csv",
    "to_json",
]
