# ABOUTME: Parses uploaded, pasted or fetched tables into campaign targets and validates every row.
# ABOUTME: Import and manual-edit flows share one set of validation rules.

from __future__ import annotations

import csv
import io
import itertools
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from ..constants import (
    REQUIRED_TARGET_FIELDS,
    TARGET_FIELD_LABELS,
    TARGET_FIELDS,
    TARGET_HEADER_ALIASES,
)

logger = logging.getLogger('advocacy.services')

EMAIL_PATTERN = re.compile(r'.+@.+\..+')
ISSUE_SUMMARY_LIMIT = 8
PREVIEW_ROW_COUNT = 20


class TargetImportError(Exception):
    """A table could not be read; the message is shown to the organizer as-is."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def normalize_header(header: str) -> str:
    value = (header or '').lstrip('\ufeff').lower()
    return re.sub(r'[^a-z0-9_]', '', value)


def map_header_to_field(header: str) -> Optional[str]:
    return TARGET_HEADER_ALIASES.get(normalize_header(header))


def auto_map_headers(headers: Iterable[str]) -> List[Optional[str]]:
    return [map_header_to_field(header) for header in headers]


def detect_delimiter(text: str) -> str:
    """Tab when the first non-empty line has more tabs than commas, else comma."""
    for line in (text or '').splitlines():
        if line.strip():
            return '\t' if line.count('\t') > line.count(',') else ','
    return ','


def parse_delimited(text: str, delimiter: Optional[str] = None) -> List[List[str]]:
    """
    Split CSV/TSV text into rows of cells.

    Lines without any cell are dropped. Rows whose cells are all blank are
    kept so validation can report them as skipped.
    """
    if delimiter is None:
        delimiter = detect_delimiter(text)
    reader = csv.reader(io.StringIO(text or '', newline=''), delimiter=delimiter)
    try:
        return [row for row in reader if row]
    except csv.Error as exc:
        logger.debug("CSV parse failed: %s", exc)
        raise TargetImportError("Failed to parse file.") from exc


def _cell_text(value) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def rows_from_json(text: str) -> List[List[str]]:
    """
    Turn a JSON array of flat objects into a table.

    The header row is the union of all object keys in first-seen order;
    entries that are not objects are ignored.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise TargetImportError("Invalid JSON format.") from exc

    if not isinstance(data, list):
        raise TargetImportError("JSON must be an array of objects.")

    records = [entry for entry in data if isinstance(entry, dict)]
    headers: List[str] = []
    for record in records:
        for key in record:
            if key not in headers:
                headers.append(key)

    if not headers:
        return []

    rows = [list(headers)]
    for record in records:
        rows.append([_cell_text(record.get(key)) for key in headers])
    return rows


def build_headers(rows: Sequence[Sequence[str]], has_header: bool) -> List[str]:
    column_count = len(rows[0]) if rows else 0
    if has_header and rows:
        return [
            cell if cell.strip() else f"Column {index + 1}"
            for index, cell in enumerate(rows[0])
        ]
    return [f"Column {index + 1}" for index in range(column_count)]


class ColumnMapping:
    """Column index → target field; a field is claimed by at most one column."""

    def __init__(self, fields: Iterable[Optional[str]]):
        self._fields: List[Optional[str]] = list(fields)

    @classmethod
    def auto(cls, headers: Iterable[str]) -> 'ColumnMapping':
        return cls(auto_map_headers(headers))

    def assign(self, index: int, target_field: Optional[str]) -> None:
        if target_field is not None and target_field not in TARGET_FIELDS:
            raise ValueError(f"Unknown target field: {target_field}")
        if not 0 <= index < len(self._fields):
            raise IndexError(f"No column {index}")
        if target_field:
            for other, current in enumerate(self._fields):
                if current == target_field and other != index:
                    self._fields[other] = None
        self._fields[index] = target_field

    def index_of(self, target_field: str) -> Optional[int]:
        try:
            return self._fields.index(target_field)
        except ValueError:
            return None

    def missing_required(self) -> List[str]:
        return [name for name in REQUIRED_TARGET_FIELDS if name not in self._fields]

    def as_list(self) -> List[Optional[str]]:
        return list(self._fields)

    def __getitem__(self, index: int) -> Optional[str]:
        return self._fields[index]

    def __iter__(self):
        return iter(list(self._fields))

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, target_field) -> bool:
        return target_field in self._fields

    def __eq__(self, other) -> bool:
        if isinstance(other, ColumnMapping):
            return self._fields == other._fields
        if isinstance(other, list):
            return self._fields == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"ColumnMapping({self._fields!r})"


@dataclass
class RowIssue:
    row: int
    messages: List[str]

    def __str__(self) -> str:
        return f"Row {self.row}: {'; '.join(self.messages)}"


@dataclass
class TargetValidation:
    total_rows: int = 0
    valid_rows: int = 0
    skipped_rows: int = 0
    issues: List[RowIssue] = field(default_factory=list)
    targets: List[Dict[str, str]] = field(default_factory=list)
    missing_required_columns: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return bool(self.targets) and not self.issues and not self.missing_required_columns

    def to_dict(self) -> Dict:
        return {
            'total_rows': self.total_rows,
            'valid_rows': self.valid_rows,
            'skipped_rows': self.skipped_rows,
            'issues': [{'row': issue.row, 'messages': issue.messages} for issue in self.issues],
            'issue_summary': summarize_issues(self.issues),
            'missing_required_columns': list(self.missing_required_columns),
            'targets': self.targets,
        }


def validate_entry(entry: Dict[str, str]) -> List[str]:
    """Return the problems with one mapped row (empty when the row is valid)."""
    problems = []
    for name in REQUIRED_TARGET_FIELDS:
        if not (entry.get(name) or '').strip():
            problems.append(f"Missing {TARGET_FIELD_LABELS[name]}")
    email = entry.get('email')
    if email and not EMAIL_PATTERN.search(email):
        problems.append("Invalid email format")
    return problems


def validate_rows(
    rows: Sequence[Sequence[str]],
    mapping: Iterable[Optional[str]],
    has_header: bool = True,
) -> TargetValidation:
    """
    Validate a raw table against the column mapping.

    Rows with only blank cells are skipped and never reported. Any other row
    missing a required field or carrying a malformed email is reported under
    its 1-based position in the raw table and left out of ``targets``.
    """
    fields = list(mapping)
    start = 1 if has_header else 0
    validation = TargetValidation(
        total_rows=max(len(rows) - start, 0),
        missing_required_columns=[name for name in REQUIRED_TARGET_FIELDS if name not in fields],
    )

    for position in range(start, len(rows)):
        row = rows[position] or []
        if all(not (cell or '').strip() for cell in row):
            validation.skipped_rows += 1
            continue

        entry: Dict[str, str] = {}
        for index, target_field in enumerate(fields):
            if not target_field or index >= len(row):
                continue
            value = (row[index] or '').strip()
            if value:
                entry[target_field] = value

        problems = validate_entry(entry)
        if problems:
            validation.issues.append(RowIssue(row=position + 1, messages=problems))
            continue
        validation.targets.append(entry)

    validation.valid_rows = len(validation.targets)
    return validation


def summarize_issues(issues: Sequence[RowIssue], limit: int = ISSUE_SUMMARY_LIMIT) -> List[str]:
    lines = [str(issue) for issue in issues[:limit]]
    if len(issues) > limit:
        lines.append(f"…and {len(issues) - limit} more")
    return lines


class TargetImport:
    """
    One import session: a raw table, its header flag and the column mapping.

    Validation is recomputed from the current state on every access.
    """

    def __init__(
        self,
        rows: List[List[str]],
        has_header: bool = True,
        source_label: str = '',
        header_locked: bool = False,
    ):
        if not rows:
            raise TargetImportError("No rows found in that file.")
        self.rows = rows
        # JSON tables carry a generated key row that is always the header
        self.header_locked = header_locked
        self.has_header = has_header
        self.source_label = source_label
        self.headers = build_headers(rows, has_header)
        self.mapping = ColumnMapping.auto(self.headers)
        logger.debug(
            "Imported %s rows from %s, mapping %r", len(rows), source_label or 'table', self.mapping,
        )

    @classmethod
    def from_file(cls, file_name: str, content) -> 'TargetImport':
        if isinstance(content, bytes):
            try:
                content = content.decode('utf-8-sig')
            except UnicodeDecodeError as exc:
                raise TargetImportError("Failed to parse file.") from exc
        lower_name = (file_name or '').lower()
        if lower_name.endswith('.json'):
            return cls(rows_from_json(content), source_label=file_name, header_locked=True)
        delimiter = '\t' if lower_name.endswith('.tsv') else detect_delimiter(content)
        return cls(parse_delimited(content, delimiter), has_header=True, source_label=file_name)

    @classmethod
    def from_paste(cls, text: str, has_header: bool = True) -> 'TargetImport':
        if not (text or '').strip():
            raise TargetImportError("Paste a table before parsing.")
        return cls(parse_delimited(text), has_header=has_header, source_label='Pasted table')

    @classmethod
    def from_google_sheet(cls, url: str) -> 'TargetImport':
        from .google_sheets import fetch_google_sheet_csv

        if not (url or '').strip():
            raise TargetImportError("Enter a Google Sheets URL.")
        csv_text = fetch_google_sheet_csv(url)
        return cls(parse_delimited(csv_text), has_header=True, source_label='Google Sheet')

    def toggle_header(self, has_header: bool) -> None:
        """Switch header mode; headers and the automatic mapping are rebuilt."""
        if self.header_locked:
            return
        self.has_header = has_header
        self.headers = build_headers(self.rows, has_header)
        self.mapping = ColumnMapping.auto(self.headers)

    def auto_map(self) -> None:
        self.mapping = ColumnMapping.auto(self.headers)

    def assign(self, index: int, target_field: Optional[str]) -> None:
        self.mapping.assign(index, target_field)

    def preview_rows(self, count: int = PREVIEW_ROW_COUNT) -> List[List[str]]:
        start = 1 if self.has_header else 0
        return [list(row) for row in self.rows[start:start + count]]

    @property
    def validation(self) -> TargetValidation:
        return validate_rows(self.rows, self.mapping, self.has_header)

    @property
    def can_save(self) -> bool:
        return self.validation.is_valid

    def to_editable(self) -> 'EditableTargetTable':
        return EditableTargetTable.from_targets(self.validation.targets)


class EditableTargetTable:
    """Row-by-row editing of targets, each row carrying a stable synthetic ``_id``."""

    def __init__(self):
        self._rows: List[Dict[str, str]] = []
        self._ids = itertools.count(1)

    @classmethod
    def from_targets(cls, targets: Iterable[Dict[str, str]]) -> 'EditableTargetTable':
        table = cls()
        for target in targets:
            table.add_row(target)
        return table

    def _next_id(self) -> str:
        return f"row-{next(self._ids)}"

    def add_row(self, values: Optional[Dict[str, str]] = None) -> str:
        values = values or {}
        row = {'_id': self._next_id()}
        for name in TARGET_FIELDS:
            row[name] = _cell_text(values.get(name))
        self._rows.append(row)
        return row['_id']

    def remove_row(self, row_id: str) -> None:
        self._rows = [row for row in self._rows if row['_id'] != row_id]

    def update_cell(self, row_id: str, target_field: str, value: str) -> None:
        if target_field not in TARGET_FIELDS:
            raise ValueError(f"Unknown target field: {target_field}")
        for row in self._rows:
            if row['_id'] == row_id:
                row[target_field] = value
                return
        raise KeyError(row_id)

    @property
    def rows(self) -> List[Dict[str, str]]:
        return [dict(row) for row in self._rows]

    def __len__(self) -> int:
        return len(self._rows)

    def validate(self) -> TargetValidation:
        table = [[row[name] for name in TARGET_FIELDS] for row in self._rows]
        return validate_rows(table, TARGET_FIELDS, has_header=False)

    @property
    def can_save(self) -> bool:
        return self.validate().is_valid
