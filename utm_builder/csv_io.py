"""
CSV input and output around the UTM builder.

Responsibilities:
- encoding detection + decoding
- newline and delimiter detection
- header normalization (rows are keyed by normalized column name)
- row width enforcement
- export CSV with the built UTM columns appended
"""

from __future__ import annotations

import base64
import csv
import hashlib
import io
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from charset_normalizer import from_bytes

from .builder import build_with_config
from .config import ToolConfig
from .errors import CsvFormatError
from .rules import (
    CENTRAL_EUROPEAN_ENCODINGS,
    NORMALIZED_DELIMITER,
    SNIFF_DELIMITERS,
    TARGET_ENCODING,
    URL_GA_COLUMN,
    WESTERN_ENCODINGS,
)
from .strings import normalize

logger = logging.getLogger(__name__)


def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _decodes(raw: bytes, encoding: str) -> bool:
    try:
        raw.decode(encoding)
    except (UnicodeDecodeError, LookupError):
        return False
    return True


def _detect_legacy_encoding(raw: bytes) -> Tuple[Optional[str], str]:
    """Return (charset-normalizer's best guess, encoding to decode with)."""
    best = from_bytes(raw).best()
    detected = best.encoding if best is not None else None
    if detected in CENTRAL_EUROPEAN_ENCODINGS:
        for encoding in WESTERN_ENCODINGS:
            if _decodes(raw, encoding):
                return detected, encoding

    return detected, detected or "utf-8"


def decode_csv_bytes(raw: bytes) -> Tuple[str, str, Dict[str, Any]]:
    """
    Decode uploaded bytes to text and detect the delimiter.

    Rules:
    - Strict UTF-8 first; a BOM is consumed so it never leaks into the first header.
    - Otherwise pick among charset-normalizer candidates, preferring Western
      code pages when a central-European guess and cp1252 both decode cleanly.
    - If decode fails, fall back to UTF-8 with replacement characters and report it.
    - CRLF/CR newlines become LF.
    """
    try:
        raw.decode("utf-8-sig")
        detected = "utf_8"
        decode_used = "utf-8-sig"
    except UnicodeDecodeError:
        detected, decode_used = _detect_legacy_encoding(raw)

    decode_fallback = False
    try:
        text = raw.decode(decode_used)
    except (UnicodeDecodeError, LookupError):
        decode_fallback = True
        try:
            text = raw.decode("utf-8-sig")
            decode_used = "utf-8-sig"
        except UnicodeDecodeError:
            # Last resort: keep going deterministically with replacement characters
            text = raw.decode("utf-8", errors="replace")
            decode_used = "utf-8"

    crlf = text.count("\r\n")
    cr = text.count("\r") - crlf
    text = text.replace("\r\n", "\n").replace("\r", "\n")

    delimiter = NORMALIZED_DELIMITER
    sniffed = False
    try:
        dialect = csv.Sniffer().sniff(text[:4096], delimiters=SNIFF_DELIMITERS)
        delimiter = dialect.delimiter
        sniffed = True
    except csv.Error:
        pass

    report = {
        "encoding": {
            "detected": detected,
            "decode_used": decode_used,
            "decode_fallback": decode_fallback,
        },
        "newlines": {"crlf": crlf, "cr": cr, "changed": crlf > 0 or cr > 0},
        "delimiter": {"detected": delimiter, "sniffed": sniffed},
    }
    return text, delimiter, report


@dataclass
class CsvTable:
    """Rows of an uploaded CSV keyed by normalized header, plus read diagnostics."""

    headers: List[str]
    rows: List[Tuple[int, Dict[str, str], List[str]]]
    warnings: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)
    report: Dict[str, Any] = field(default_factory=dict)


def read_csv_rows(raw: bytes) -> CsvTable:
    """
    Parse uploaded bytes into a CsvTable.

    Each row entry is (line number, row keyed by normalized header, raw cells).
    Blank lines are skipped. Short rows are padded and reported as warnings;
    long rows are reported as errors and left out.
    """
    if not raw or not raw.strip():
        raise CsvFormatError("CSV file is empty")

    text, delimiter, report = decode_csv_bytes(raw)
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)

    headers: Optional[List[str]] = None
    rows: List[Tuple[int, Dict[str, str], List[str]]] = []
    warnings: List[Dict[str, Any]] = []
    errors: List[Dict[str, Any]] = []

    for i, cells in enumerate(reader):
        if not any(cell.strip() for cell in cells):
            continue

        if headers is None:
            headers = [cell.strip() for cell in cells]
            keys = [normalize(h) for h in headers]
            named = [k for k in keys if k]
            if not named:
                raise CsvFormatError("CSV header row has no column names")
            duplicates = sorted({k for k in named if named.count(k) > 1})
            if duplicates:
                raise CsvFormatError(f"duplicate columns in header: {', '.join(duplicates)}")
            continue

        width = len(headers)
        if len(cells) < width:
            warnings.append({
                "row": i + 1,
                "column": None,
                "issue": "row_too_short",
                "value": str(len(cells)),
                "action": f"padded_to_{width}",
            })
            cells = cells + [""] * (width - len(cells))
        elif len(cells) > width:
            errors.append({
                "row": i + 1,
                "column": None,
                "issue": "row_too_long",
                "value": str(len(cells)),
                "action": f"expected_{width}",
            })
            continue

        row = {k: v for k, v in zip(keys, cells) if k}
        rows.append((i + 1, row, cells))

    if headers is None:
        raise CsvFormatError("CSV file has no header row")

    return CsvTable(headers, rows, warnings, errors, report)


def build_csv_bytes(raw: bytes, tool: ToolConfig, log: Optional[logging.Logger] = None) -> Dict[str, Any]:
    """
    Build UTM links for every row of an uploaded CSV.

    Returns a dict matching the API's response envelope: the export CSV
    (original columns, one column per UTM parameter, then "url ga") and a
    per-row report.
    """
    log = log or logger
    table = read_csv_rows(raw)
    parameters = list(tool.utms)

    # columns from a previous export are rebuilt, not repeated
    output_keys = {normalize(p) for p in parameters} | {URL_GA_COLUMN}
    kept = [i for i, h in enumerate(table.headers) if normalize(h) not in output_keys]

    outp = io.StringIO(newline="")
    writer = csv.writer(outp, delimiter=NORMALIZED_DELIMITER, lineterminator="\n")
    writer.writerow([table.headers[i] for i in kept] + parameters + [URL_GA_COLUMN])

    results = []
    rows_with_errors = 0
    for line, row, cells in table.rows:
        built = build_with_config(row, tool, log=log)
        fields = built.builded_fields
        writer.writerow(
            [cells[i] for i in kept]
            + [fields["utms"][p] for p in parameters]
            + [fields[URL_GA_COLUMN]]
        )
        if built.has_error:
            rows_with_errors += 1
        results.append({
            "row": line,
            "utms": fields["utms"],
            URL_GA_COLUMN: fields[URL_GA_COLUMN],
            "has_error": built.has_error,
        })

    log.info(
        "built %d rows (%d with errors, %d skipped)",
        len(results), rows_with_errors, len(table.errors),
    )

    built_bytes = outp.getvalue().encode(TARGET_ENCODING)
    return {
        "built_csv": {
            "sha256": _sha256_hex(built_bytes),
            "encoding": TARGET_ENCODING,
            "content_b64": base64.b64encode(built_bytes).decode("ascii"),
        },
        "report": {
            "summary": {
                "rows": len(results),
                "rows_with_errors": rows_with_errors,
                "parameters": parameters,
                "warnings": len(table.warnings),
                "errors": len(table.errors),
            },
            "normalizations": table.report,
            "rows": results,
            "warnings": table.warnings,
            "errors": table.errors,
        },
    }
