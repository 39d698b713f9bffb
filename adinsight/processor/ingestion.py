"""Data ingestion module for Ad Insight.

Turns campaign exports into normalized :class:`Record` objects:

- Numeric parsing of locale-formatted strings ("1.234,56" -> 1234.56)
- Header resolution: canonical fields -> column positions via alias lists
- Row normalization: delimiter detection, quote-aware splitting,
  malformed-row filtering and per-field defaults

Supported inputs:
- CSV / plain text (UTF-8, UTF-8 with BOM, UTF-16 LE with BOM), ``;`` or ``,``
- Excel exports (.xlsx / .xlsm), first sheet
"""

import csv
import datetime
import math
import re
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from adinsight.schema.columns import (
    CANONICAL_FIELDS,
    NUMERIC_FIELDS,
    RECORD_ATTRIBUTES,
    AnalysisConfig,
    build_default_config,
)
from adinsight.schema.models import Record


class NoDataError(ValueError):
    """Raised when a source holds no header plus data row."""


# ---------------------------------------------------------------------------
# Value parsers
# ---------------------------------------------------------------------------

_NUMBER_PREFIX = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_locale_number(value) -> float:
    """Parse a number written with European/Turkish separators.

    When both ``.`` and ``,`` appear, ``.`` is a thousands separator and
    ``,`` the decimal separator.  A lone ``,`` is a decimal separator.
    Only the leading numeric part is read, so units after the number are
    ignored.  Anything unparseable yields 0; this never raises.

    Examples:
        "1.234,56" -> 1234.56
        "1234,5"   -> 1234.5
        "1000 TL"  -> 1000.0
        ""         -> 0.0
        "abc"      -> 0.0
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        f = float(value)
        return 0.0 if math.isnan(f) or math.isinf(f) else f
    s = str(value).strip()
    if not s:
        return 0.0
    if "," in s and "." in s:
        s = s.replace(".", "").replace(",", ".", 1)
    elif "," in s:
        s = s.replace(",", ".", 1)
    match = _NUMBER_PREFIX.match(s)
    if not match:
        return 0.0
    f = float(match.group(0))
    return 0.0 if math.isinf(f) else f


# ---------------------------------------------------------------------------
# Tokenizing
# ---------------------------------------------------------------------------

def detect_delimiter(header_line: str) -> str:
    """``;`` when the header line contains one, otherwise ``,``."""
    return ";" if ";" in header_line else ","


def clean_cell(value: str) -> str:
    """Strip whitespace and surrounding double quotes from a cell."""
    return str(value).strip().strip('"').strip()


def split_line(line: str, delimiter: str = ",") -> list[str]:
    """Split one line with a quote-aware CSV tokenizer.

    A delimiter inside a quoted value does not split it.
    """
    reader = csv.reader([line], delimiter=delimiter, skipinitialspace=True)
    cells = next(reader, [])
    return [c.strip() for c in cells]


def normalize_header(header_row) -> list[str]:
    """Lowercase, trim and quote-strip every header cell."""
    return [clean_cell(h).lower() for h in header_row]


# ---------------------------------------------------------------------------
# Column resolution
# ---------------------------------------------------------------------------

def resolve_columns(header_row, config: AnalysisConfig | None = None) -> dict:
    """Map every canonical field to a column index, or ``None`` when absent.

    For each field the leftmost header cell matching any of its aliases
    wins.
    """
    config = config or build_default_config()
    headers = normalize_header(header_row)
    mapping = {}
    for name in CANONICAL_FIELDS:
        try:
            spec = config.get_field(name)
        except KeyError:
            mapping[name] = None
            continue
        mapping[name] = next(
            (i for i, h in enumerate(headers) if spec.matches(h)), None
        )
    return mapping


# ---------------------------------------------------------------------------
# Row normalization
# ---------------------------------------------------------------------------

@dataclass
class IngestResult:
    """Output of an ingest call."""
    records: list[Record]
    columns: dict                # canonical field -> column index or None
    dropped_rows: int = 0        # rows with too few fields
    delimiter: str = ","
    source: str = ""

    @property
    def missing_fields(self) -> list[str]:
        return [name for name, idx in self.columns.items() if idx is None]

    @property
    def warnings(self) -> list[str]:
        msgs = []
        if self.dropped_rows:
            msgs.append(f"{self.dropped_rows} malformed row(s) skipped")
        if self.missing_fields:
            msgs.append("No column found for: " + ", ".join(self.missing_fields)
                        + " (defaults used)")
        return msgs


def _build_record(row: list[str], columns: dict, config: AnalysisConfig) -> Record:
    values = {}
    for name in CANONICAL_FIELDS:
        idx = columns.get(name)
        cell = row[idx] if idx is not None and idx < len(row) else ""
        if name in NUMERIC_FIELDS:
            values[RECORD_ATTRIBUTES[name]] = (
                parse_locale_number(cell) if cell
                else parse_locale_number(config.default_for(name))
            )
        else:
            values[RECORD_ATTRIBUTES[name]] = cell or str(config.default_for(name))
    return Record(**values)


def ingest_table(header_row, rows, config: AnalysisConfig | None = None,
                 delimiter: str = ",", source: str = "") -> IngestResult:
    """Normalize already-split *rows* against *header_row*."""
    config = config or build_default_config()
    columns = resolve_columns(header_row, config)
    records = []
    dropped = 0
    for row in rows:
        if len(row) < config.min_row_fields:
            dropped += 1
            continue
        records.append(_build_record(row, columns, config))
    return IngestResult(records=records, columns=columns, dropped_rows=dropped,
                        delimiter=delimiter, source=source)


def normalize_rows(header_row, data_lines, delimiter: str = ",",
                   config: AnalysisConfig | None = None) -> list[Record]:
    """Convert raw *data_lines* into Records using *header_row*.

    Blank lines are ignored and rows with fewer than five fields are
    dropped without error.
    """
    if isinstance(header_row, str):
        header_row = split_line(header_row, delimiter)
    rows = [split_line(line, delimiter) for line in data_lines if line.strip()]
    return ingest_table(header_row, rows, config, delimiter).records


def ingest_text(text: str, config: AnalysisConfig | None = None,
                source: str = "") -> IngestResult:
    """Parse a whole delimited text export.

    Raises:
        NoDataError: If the text has fewer than two non-blank lines.
    """
    text = text.lstrip("\ufeff")
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < 2:
        raise NoDataError(
            "No data available: expected a header row and at least one data row"
            + (f" in {source}" if source else "")
        )
    delimiter = detect_delimiter(lines[0])
    header_row = split_line(lines[0], delimiter)
    rows = [split_line(line, delimiter) for line in lines[1:]]
    return ingest_table(header_row, rows, config, delimiter, source)


# ---------------------------------------------------------------------------
# Encoding detection and file reading
# ---------------------------------------------------------------------------

def detect_encoding(path) -> str:
    """Detect whether a file is UTF-16 LE (with BOM) or UTF-8."""
    with open(path, "rb") as f:
        raw = f.read(4)
    if raw[:2] == b"\xff\xfe":
        return "utf-16"
    return "utf-8-sig"


def read_campaign_csv(path, config: AnalysisConfig | None = None) -> IngestResult:
    """Read a delimited text export with automatic encoding detection."""
    path = Path(path)
    encoding = detect_encoding(path)
    text = path.read_text(encoding=encoding, errors="replace")
    return ingest_text(text, config, source=str(path))


def _cell_text(value) -> str:
    """Render an Excel cell as the string a text export would hold."""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value == int(value):
            return str(int(value))
        return repr(value)
    if isinstance(value, (pd.Timestamp, datetime.datetime)):
        if pd.isna(value):
            return ""
        return value.strftime("%Y-%m-%d")
    if isinstance(value, datetime.date):
        return value.isoformat()
    return str(value).strip()


def read_campaign_excel(path, config: AnalysisConfig | None = None,
                        sheet_name=0) -> IngestResult:
    """Read an Excel export (.xlsx / .xlsm).  The first row is the header."""
    path = Path(path)
    df = pd.read_excel(path, sheet_name=sheet_name, header=None,
                       dtype=object, engine="openpyxl")
    rows = [[_cell_text(v) for v in row] for row in df.itertuples(index=False)]
    rows = [row for row in rows if any(row)]
    if len(rows) < 2:
        raise NoDataError(
            f"No data available: expected a header row and at least one data row in {path}"
        )
    return ingest_table(rows[0], rows[1:], config, source=str(path))


# ---------------------------------------------------------------------------
# Reader registry
# ---------------------------------------------------------------------------

READERS = {
    ".csv": read_campaign_csv,
    ".txt": read_campaign_csv,
    ".xlsx": read_campaign_excel,
    ".xlsm": read_campaign_excel,
}


def read_campaign_file(path, config: AnalysisConfig | None = None) -> IngestResult:
    """Read a campaign export, choosing the reader by file extension.

    Raises:
        ValueError: If the extension is not recognized.
        NoDataError: If the file holds no data rows.
    """
    suffix = Path(path).suffix.lower()
    if suffix not in READERS:
        raise ValueError(
            f"Unsupported file type '{suffix}'. "
            f"Valid types: {', '.join(sorted(READERS))}"
        )
    return READERS[suffix](path, config)
