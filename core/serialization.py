"""
Report and comparison codecs: JSON, XML and CSV.

All three encodings carry the same camelCase interchange schema:

- JSON and XML keep the full report, including unsupported files and the
  optional checksum, and read back to an equal Report.
  XML drops control characters that XML 1.0 cannot represent.
- CSV is an export-oriented projection: a per-file table followed by an
  unsupported-files trailer. Importing a CSV keeps only the file rows and
  rebuilds languages and summary from them, so the checksum and the
  unsupported-files list do not survive a CSV round trip.

Imports also accept the snake_case per-file keys (`total_lines`, ...) written
by earlier versions of the report format.
"""

import csv
from datetime import datetime, timezone
import io
import json
from pathlib import Path
import re
from typing import Any, Mapping
import xml.etree.ElementTree as ET

import structlog

from constants import (
    CSV_COMPARISON_HEADER,
    CSV_FILE_HEADER,
    CSV_UNSUPPORTED_MARKER,
)
from core.comparison import ComparisonResult
from core.exceptions import DeserializationError, SerializationError
from core.file_io import FileReader, FileWriter, FilesystemFileReader, FilesystemFileWriter
from core.models import FileStats, GlobalSummary, LanguageStats
from core.report import Report
from models import OutputFormat

log = structlog.get_logger("slocount.serialization")

_XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

# Tag used for the items of each list when a mapping is written as XML.
_XML_ITEM_TAGS = {
    "files": "file",
    "languages": "language",
    "unsupportedFiles": "unsupportedFile",
    "languageDeltas": "languageDelta",
    "newFiles": "file",
    "removedFiles": "file",
    "modifiedFiles": "file",
}

_FRACTION = re.compile(r"(\.\d{6})\d+")

# Characters XML 1.0 cannot carry, even escaped.
_XML_INVALID = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def detect_format(path: Path) -> OutputFormat:
    """
    Derive the encoding of a report from its file suffix.

    Returns:
        The matching OutputFormat; JSON when the suffix is not recognised.
    """
    try:
        return OutputFormat(path.suffix.lstrip(".").lower())
    except ValueError:
        return OutputFormat.JSON


# ============================================================================
# Report <-> interchange mapping
# ============================================================================


def report_to_dict(report: Report) -> dict[str, Any]:
    """Map a Report onto the camelCase interchange schema."""
    data: dict[str, Any] = {
        "reportFormatVersion": report.format_version,
        "generatedAt": format_timestamp(report.generated_at),
        "files": [
            {
                "path": f.path,
                "language": f.language,
                "totalLines": f.total_lines,
                "logicalLines": f.logical_lines,
                "commentLines": f.comment_lines,
                "emptyLines": f.empty_lines,
            }
            for f in report.files
        ],
        "languages": [
            {
                "language": s.language,
                "fileCount": s.file_count,
                "totalLines": s.total_lines,
                "logicalLines": s.logical_lines,
                "commentLines": s.comment_lines,
                "emptyLines": s.empty_lines,
            }
            for s in report.languages
        ],
        "summary": {
            "totalFiles": report.summary.total_files,
            "totalLines": report.summary.total_lines,
            "logicalLines": report.summary.logical_lines,
            "commentLines": report.summary.comment_lines,
            "emptyLines": report.summary.empty_lines,
            "languagesCount": report.summary.languages_count,
            "unsupportedFiles": report.summary.unsupported_files,
        },
        "unsupportedFiles": list(report.unsupported_files),
    }
    if report.checksum is not None:
        data["checksum"] = report.checksum
    return data


def report_from_dict(data: Any) -> Report:
    """
    Rebuild a Report from the interchange schema.

    Stored languages and summary are taken as they are, not recomputed.

    Raises:
        DeserializationError: If a required field is missing or has the wrong type.
    """
    if not isinstance(data, Mapping):
        raise DeserializationError(message="Report must be an object")

    files = [_file_stats(item) for item in _list(data, "files")]
    languages = [
        LanguageStats(
            language=_str(item, "language"),
            file_count=_int(item, "fileCount"),
            total_lines=_int(item, "totalLines"),
            logical_lines=_int(item, "logicalLines"),
            comment_lines=_int(item, "commentLines", default=0),
            empty_lines=_int(item, "emptyLines"),
        )
        for item in _list(data, "languages")
    ]
    unsupported = [str(p) for p in data.get("unsupportedFiles") or []]

    summary_data = data.get("summary")
    if not isinstance(summary_data, Mapping):
        raise DeserializationError(message="Missing or invalid field: summary")
    summary = GlobalSummary(
        total_files=_int(summary_data, "totalFiles"),
        total_lines=_int(summary_data, "totalLines"),
        logical_lines=_int(summary_data, "logicalLines"),
        comment_lines=_int(summary_data, "commentLines", default=0),
        empty_lines=_int(summary_data, "emptyLines"),
        languages_count=_int(summary_data, "languagesCount"),
        unsupported_files=_int(
            summary_data, "unsupportedFiles", default=len(unsupported)
        ),
    )

    checksum = data.get("checksum")
    if checksum is not None and not isinstance(checksum, str):
        raise DeserializationError(message="Invalid field: checksum")

    return Report(
        format_version=_str(data, "reportFormatVersion"),
        generated_at=parse_timestamp(_str(data, "generatedAt")),
        files=files,
        languages=languages,
        summary=summary,
        unsupported_files=unsupported,
        checksum=checksum,
    )


def comparison_to_dict(comparison: ComparisonResult) -> dict[str, Any]:
    """Map a ComparisonResult onto the camelCase comparison schema."""
    g = comparison.global_delta
    return {
        "report1Generated": format_timestamp(comparison.report1_generated),
        "report2Generated": format_timestamp(comparison.report2_generated),
        "globalDelta": {
            "filesDelta": g.files_delta,
            "totalLinesDelta": g.total_lines_delta,
            "logicalLinesDelta": g.logical_lines_delta,
            "emptyLinesDelta": g.empty_lines_delta,
            "languagesDelta": g.languages_delta,
        },
        "languageDeltas": [
            {
                "language": d.language,
                "filesDelta": d.files_delta,
                "totalLinesDelta": d.total_lines_delta,
                "logicalLinesDelta": d.logical_lines_delta,
                "emptyLinesDelta": d.empty_lines_delta,
            }
            for d in comparison.language_deltas
        ],
        "newFiles": list(comparison.new_files),
        "removedFiles": list(comparison.removed_files),
        "modifiedFiles": [
            {
                "path": d.path,
                "totalLinesDelta": d.total_lines_delta,
                "logicalLinesDelta": d.logical_lines_delta,
                "emptyLinesDelta": d.empty_lines_delta,
            }
            for d in comparison.modified_files
        ],
    }


def format_timestamp(value: datetime) -> str:
    """Format a timestamp as RFC 3339 in UTC, with a "Z" suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """
    Parse an RFC 3339 timestamp.

    A trailing "Z" and fractional seconds beyond microsecond precision are
    accepted; naive values are taken as UTC.

    Raises:
        DeserializationError: If the value is not a valid timestamp.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(r"\1", text)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise DeserializationError(
            message=f"Invalid timestamp: {value}", original_exception=e
        ) from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ============================================================================
# Encodings
# ============================================================================


def serialize_report(report: Report, fmt: OutputFormat) -> str:
    """
    Encode a report.

    Raises:
        SerializationError: If the report cannot be encoded.
    """
    try:
        if fmt is OutputFormat.JSON:
            return json.dumps(report_to_dict(report), indent=2, ensure_ascii=False)
        if fmt is OutputFormat.XML:
            data = report_to_dict(report)
            # The XML layout names each language entry's key <name>
            data["languages"] = [
                {"name": item.pop("language"), **item} for item in data["languages"]
            ]
            return _to_xml("report", data)
        return _report_to_csv(report)
    except (TypeError, ValueError, csv.Error) as e:
        raise SerializationError(
            message=f"Failed to serialize report as {fmt}: {e}", original_exception=e
        ) from e


def deserialize_report(text: str, fmt: OutputFormat) -> Report:
    """
    Decode a report.

    Raises:
        DeserializationError: If the text does not carry a valid report.
    """
    if fmt is OutputFormat.JSON:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DeserializationError(
                message=f"Invalid JSON report: {e}", original_exception=e
            ) from e
        return report_from_dict(data)
    if fmt is OutputFormat.XML:
        return report_from_dict(_report_dict_from_xml(text))
    return _report_from_csv(text)


def serialize_comparison(comparison: ComparisonResult, fmt: OutputFormat) -> str:
    """
    Encode a comparison.

    The CSV projection holds the global delta and the language deltas only.

    Raises:
        SerializationError: If the comparison cannot be encoded.
    """
    try:
        if fmt is OutputFormat.JSON:
            return json.dumps(
                comparison_to_dict(comparison), indent=2, ensure_ascii=False
            )
        if fmt is OutputFormat.XML:
            return _to_xml("comparison", comparison_to_dict(comparison))
        return _comparison_to_csv(comparison)
    except (TypeError, ValueError, csv.Error) as e:
        raise SerializationError(
            message=f"Failed to serialize comparison as {fmt}: {e}",
            original_exception=e,
        ) from e


def save_report(
    report: Report,
    path: Path,
    fmt: OutputFormat | None = None,
    file_writer: FileWriter | None = None,
) -> None:
    """
    Write a report to `path`.

    Args:
        report: The report to write.
        path: Destination file.
        fmt: Encoding; derived from the suffix of `path` when None.
        file_writer: Optional writer; defaults to a FilesystemFileWriter for `path`.

    Raises:
        SerializationError: If encoding fails.
        InvalidFilePathError: If the destination directory is unusable.
        FileWriteError: If writing fails.
    """
    fmt = fmt or detect_format(path)
    data = serialize_report(report, fmt)
    writer = file_writer if file_writer is not None else FilesystemFileWriter.from_path(path)
    writer.write_file(data)
    log.debug("serialization.report_saved", path=str(path), format=str(fmt))


def load_report(
    path: Path,
    fmt: OutputFormat | None = None,
    file_reader: FileReader | None = None,
) -> Report:
    """
    Read a report from `path`.

    Args:
        path: Report file.
        fmt: Encoding; derived from the suffix of `path` when None.
        file_reader: Optional reader; defaults to FilesystemFileReader.

    Raises:
        FileReadError: If the file cannot be read.
        DeserializationError: If the content is not a valid report.
    """
    fmt = fmt or detect_format(path)
    reader = file_reader if file_reader is not None else FilesystemFileReader()
    report = deserialize_report(reader.read_file(path), fmt)
    log.debug("serialization.report_loaded", path=str(path), format=str(fmt))
    return report


def save_comparison(
    comparison: ComparisonResult,
    path: Path,
    fmt: OutputFormat | None = None,
    file_writer: FileWriter | None = None,
) -> None:
    """Write a comparison to `path`; see `save_report` for arguments and errors."""
    fmt = fmt or detect_format(path)
    data = serialize_comparison(comparison, fmt)
    writer = file_writer if file_writer is not None else FilesystemFileWriter.from_path(path)
    writer.write_file(data)


# ============================================================================
# XML
# ============================================================================


def _to_xml(root_tag: str, data: Mapping[str, Any]) -> str:
    root = _to_element(root_tag, data)
    ET.indent(root)
    return _XML_DECLARATION + ET.tostring(root, encoding="unicode") + "\n"


def _to_element(tag: str, value: Any) -> ET.Element:
    element = ET.Element(tag)
    if isinstance(value, Mapping):
        for key, child in value.items():
            element.append(_to_element(key, child))
    elif isinstance(value, list):
        item_tag = _XML_ITEM_TAGS.get(tag, "item")
        for child in value:
            element.append(_to_element(item_tag, child))
    else:
        element.text = _XML_INVALID.sub("", str(value))
    return element


def _report_dict_from_xml(text: str) -> dict[str, Any]:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise DeserializationError(
            message=f"Invalid XML report: {e}", original_exception=e
        ) from e
    if root.tag != "report":
        raise DeserializationError(
            message=f"Unexpected XML root element: <{root.tag}>"
        )

    data: dict[str, Any] = {}
    for child in root:
        if child.tag in ("reportFormatVersion", "generatedAt", "checksum"):
            data[child.tag] = child.text or ""
        elif child.tag == "summary":
            data["summary"] = _xml_counters(child)
        elif child.tag == "files":
            data["files"] = [
                {**_xml_counters(item), "path": _xml_text(item, "path"),
                 "language": _xml_text(item, "language")}
                for item in child
            ]
        elif child.tag == "languages":
            data["languages"] = [
                {**_xml_counters(item), "language": _xml_text(item, "name")}
                for item in child
            ]
        elif child.tag == "unsupportedFiles":
            data["unsupportedFiles"] = [item.text or "" for item in child]
    return data


def _xml_text(element: ET.Element, tag: str) -> str | None:
    child = element.find(tag)
    if child is None:
        return None
    return child.text or ""


def _xml_counters(element: ET.Element) -> dict[str, Any]:
    counters: dict[str, Any] = {}
    for child in element:
        if child.tag in ("path", "language", "name"):
            continue
        text = (child.text or "").strip()
        try:
            counters[child.tag] = int(text)
        except ValueError:
            counters[child.tag] = text
    return counters


# ============================================================================
# CSV
# ============================================================================


def _report_to_csv(report: Report) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_FILE_HEADER)
    for f in report.files:
        writer.writerow(
            [
                f.path,
                f.language,
                f.total_lines,
                f.logical_lines,
                f.comment_lines,
                f.empty_lines,
            ]
        )
    if report.unsupported_files:
        writer.writerow([CSV_UNSUPPORTED_MARKER])
        for path in report.unsupported_files:
            writer.writerow([path])
    return buffer.getvalue()


def _report_from_csv(text: str) -> Report:
    rows = [row for row in csv.reader(io.StringIO(text)) if row]
    if not rows:
        raise DeserializationError(message="Empty CSV report")

    columns = [_column_key(name) for name in rows[0]]
    wanted = [_column_key(name) for name in CSV_FILE_HEADER]
    missing = [name for name in wanted if name not in columns]
    if missing:
        raise DeserializationError(
            message=f"CSV report is missing columns: {', '.join(missing)}"
        )
    index = {name: columns.index(name) for name in wanted}

    files: list[FileStats] = []
    for line_number, row in enumerate(rows[1:], start=2):
        if row[0] == CSV_UNSUPPORTED_MARKER:
            break
        if len(row) < len(columns):
            raise DeserializationError(
                message=f"CSV row {line_number} has {len(row)} columns, "
                f"expected {len(columns)}"
            )
        item = {name: row[i] for name, i in index.items()}
        try:
            files.append(
                FileStats(
                    path=item["path"],
                    language=item["language"],
                    total_lines=_csv_count(item["totallines"]),
                    logical_lines=_csv_count(item["logicallines"]),
                    comment_lines=_csv_count(item["commentlines"]),
                    empty_lines=_csv_count(item["emptylines"]),
                )
            )
        except ValueError as e:
            raise DeserializationError(
                message=f"CSV row {line_number}: {e}", original_exception=e
            ) from e

    return Report.from_files(files, [])


def _column_key(name: str) -> str:
    return re.sub(r"[\s_]", "", name).lower()


def _csv_count(value: str) -> int:
    count = int(value.strip())
    if count < 0:
        raise ValueError(f"negative count: {count}")
    return count


def _comparison_to_csv(comparison: ComparisonResult) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_COMPARISON_HEADER)
    g = comparison.global_delta
    writer.writerow(
        [
            "Global",
            "Summary",
            g.files_delta,
            g.total_lines_delta,
            g.logical_lines_delta,
            g.empty_lines_delta,
        ]
    )
    for d in comparison.language_deltas:
        writer.writerow(
            [
                "Language",
                d.language,
                d.files_delta,
                d.total_lines_delta,
                d.logical_lines_delta,
                d.empty_lines_delta,
            ]
        )
    return buffer.getvalue()


# ============================================================================
# Field helpers
# ============================================================================


def _file_stats(item: Any) -> FileStats:
    if not isinstance(item, Mapping):
        raise DeserializationError(message="File entries must be objects")
    return FileStats(
        path=_str(item, "path"),
        language=_str(item, "language"),
        total_lines=_int(item, "totalLines"),
        logical_lines=_int(item, "logicalLines"),
        comment_lines=_int(item, "commentLines", default=0),
        empty_lines=_int(item, "emptyLines"),
    )


def _lookup(data: Mapping[str, Any], key: str) -> Any:
    if key in data:
        return data[key]
    return data.get(re.sub(r"([A-Z])", r"_\1", key).lower())


def _list(data: Mapping[str, Any], key: str) -> list[Any]:
    value = _lookup(data, key)
    if not isinstance(value, list):
        raise DeserializationError(message=f"Missing or invalid field: {key}")
    return value


def _str(data: Mapping[str, Any], key: str) -> str:
    value = _lookup(data, key)
    if not isinstance(value, str):
        raise DeserializationError(message=f"Missing or invalid field: {key}")
    return value


def _int(data: Mapping[str, Any], key: str, default: int | None = None) -> int:
    value = _lookup(data, key)
    if value is None and default is not None:
        return default
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise DeserializationError(message=f"Missing or invalid field: {key}")
    return value
