"""Spreadsheet import/export (.xlsx through openpyxl, .csv through csv)."""

import csv
import io
from datetime import datetime, timezone

from flask import make_response
from openpyxl import Workbook, load_workbook

from errors import ValidationError

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _cell(value):
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return value


def workbook_response(records, columns, title, filename_prefix):
    """Build an .xlsx download with one header row and one row per record."""
    wb = Workbook()
    ws = wb.active
    ws.title = title
    ws.append(list(columns))
    for record in records:
        ws.append([_cell(record.get(col)) for col in columns])

    out = io.BytesIO()
    wb.save(out)
    resp = make_response(out.getvalue())
    resp.headers["Content-Type"] = XLSX_MIMETYPE
    resp.headers["Content-Disposition"] = \
        f"attachment; filename={filename_prefix}_{datetime.now(timezone.utc):%Y%m%d_%H%M%S}.xlsx"
    return resp


def _clean_row(header, values):
    row = {}
    for key, value in zip(header, values):
        if not key:
            continue
        row[str(key).strip()] = "" if value is None else value
    return row


def read_rows(file) -> list[dict]:
    """Rows of an uploaded .xlsx or .csv file, keyed by the header row."""
    filename = (file.filename or "").lower()

    if filename.endswith(".xlsx"):
        try:
            wb = load_workbook(file.stream, read_only=True, data_only=True)
        except Exception as exc:  # openpyxl raises several unrelated types
            raise ValidationError({"file": f"cannot read workbook: {exc}"}) from exc
        ws = wb.active
        rows = ws.iter_rows(values_only=True)
        header = next(rows, None) or ()
        result = [_clean_row(header, values) for values in rows if any(v not in (None, "") for v in values)]
        wb.close()
        return result

    if filename.endswith(".csv"):
        try:
            text = file.stream.read().decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ValidationError({"file": "CSV must be UTF-8 encoded"}) from exc
        reader = csv.DictReader(io.StringIO(text, newline=None))
        return [
            {k.strip(): (v or "") for k, v in row.items() if k}
            for row in reader
            if any((v or "").strip() for v in row.values() if isinstance(v, str))
        ]

    raise ValidationError({"file": "unsupported file type, upload .xlsx or .csv"})
