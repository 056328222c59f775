# ================================
# ishanya/services/export_service.py
# ================================
from __future__ import annotations
from typing import List, Dict, Any, Optional
from io import BytesIO
from datetime import date, datetime

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font

DATE_TYPES = {"date"}


# ---------- Helper ----------
def _parse_to_date(v: Optional[object]) -> Optional[date]:
    if v in (None, ""):
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    s = str(v).strip()
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        return None


def _cell(v: Any) -> Any:
    if v is None:
        return ""
    if isinstance(v, (dict, list)):
        return str(v)
    return v


def _autosize(ws):
    ws.freeze_panes = "A2"
    for col in ws.columns:
        w = max(10, *(len(str(c.value)) if c.value is not None else 0 for c in col)) + 2
        ws.column_dimensions[col[0].column_letter].width = min(w, 40)


# ---------- Table export ----------
def build_table_xlsx(table: str, columns: List[Dict[str, Any]], rows: List[Dict[str, Any]]) -> bytes:
    """
    One sheet named after the table. `columns` is the table view metadata
    ({"name", "type"}); date columns are written as real dates.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = (table or "Export")[:31]

    names = [c["name"] for c in columns]
    ws.append(names)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    date_cols = [i for i, c in enumerate(columns, start=1) if c.get("type") in DATE_TYPES]

    for r in rows:
        line = []
        for i, name in enumerate(names, start=1):
            v = r.get(name)
            line.append(_parse_to_date(v) if i in date_cols else _cell(v))
        ws.append(line)

    for col in date_cols:
        for cells in ws.iter_cols(min_col=col, max_col=col, min_row=2):
            for c in cells:
                if isinstance(c.value, (date, datetime)):
                    c.number_format = "yyyy-mm-dd"
                    c.alignment = Alignment(horizontal="center")

    _autosize(ws)
    out = BytesIO()
    wb.save(out)
    out.seek(0)
    return out.getvalue()
