# ishanya/services/csv_import.py
from __future__ import annotations

import io
import re
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pandas as pd
from pandas.errors import EmptyDataError, ParserError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ishanya.services.catalog import ALLOWED_TABLES, ColumnError, bind_row, column_names, model_for

log = logging.getLogger("import")

NUMERIC_RE = re.compile(r"^-?\d+(\.\d+)?$")


class CsvFormatError(ValueError):
    pass


@dataclass
class ParsedCsv:
    headers: List[str]
    records: List[Dict[str, str]] = field(default_factory=list)


@dataclass
class BulkInsertResult:
    success: bool
    message: str
    count: int = 0


# ==================== parse ====================
def parse_csv(text: str) -> ParsedCsv:
    """
    Header row + data rows. Headers and cells are trimmed, blank lines are
    skipped and short rows are padded with "".
    """
    if not (text or "").strip():
        raise CsvFormatError("The file is empty.")
    try:
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            index_col=False,
            keep_default_na=False,
            skip_blank_lines=True,
            skipinitialspace=True,
        ).fillna("")
    except (EmptyDataError, ParserError) as e:
        raise CsvFormatError(f"Could not read CSV: {e}")

    headers = [str(h).strip() for h in df.columns]
    df.columns = headers

    records: List[Dict[str, str]] = []
    for row in df.itertuples(index=False, name=None):
        values = [str(v).strip() for v in row]
        if not any(values):
            continue
        records.append(dict(zip(headers, values)))
    return ParsedCsv(headers=headers, records=records)


def default_mappings(headers: List[str]) -> Dict[str, str]:
    return {h: h.lower() for h in headers}


def mapping_options(table: str, headers: List[str]) -> List[str]:
    """Target fields offered for each header; "" stands for skip."""
    opts = [""] + column_names(table)
    for h in headers:
        if h.lower() not in opts:
            opts.append(h.lower())
    return opts


# ==================== coerce + map ====================
def coerce_value(v: Any) -> Any:
    if v is None:
        return None
    if not isinstance(v, str):
        return v
    s = v.strip()
    if s == "":
        return None
    if NUMERIC_RE.fullmatch(s):
        return float(s) if "." in s else int(s)
    return s


def build_records(
    records: List[Dict[str, str]],
    mappings: Dict[str, str],
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """One output dict per row; only headers present in the file and mapped are carried over."""
    stamp = (now or datetime.now(timezone.utc)).isoformat()
    out: List[Dict[str, Any]] = []
    for rec in records:
        mapped: Dict[str, Any] = {}
        for header, value in rec.items():
            target = (mappings.get(header) or "").strip()
            if not target:
                continue
            mapped[target] = coerce_value(value)
        if mapped.get("created_at") is None:
            mapped["created_at"] = stamp
        out.append(mapped)
    return out


# ==================== insert ====================
def bulk_insert(db: Session, table: str, rows: List[Dict[str, Any]]) -> BulkInsertResult:
    """Single batch: either every row lands or none does."""
    if table not in ALLOWED_TABLES:
        return BulkInsertResult(
            success=False,
            message=f"Invalid table name: {table}. Allowed tables are: {', '.join(ALLOWED_TABLES)}",
        )

    model = model_for(table)
    try:
        objs = [model(**bind_row(table, r, model=model)) for r in rows]
        db.add_all(objs)
        db.commit()
    except ColumnError as e:
        db.rollback()
        log.error("Error bulk inserting into %s: %s", table, e)
        return BulkInsertResult(success=False, message=f"Error inserting data: {e}")
    except SQLAlchemyError as e:
        db.rollback()
        log.error("Error bulk inserting into %s: %s", table, e)
        reason = getattr(e, "orig", None) or e
        return BulkInsertResult(success=False, message=f"Error inserting data: {reason}")

    log.info("Inserted %d rows into %s", len(objs), table)
    return BulkInsertResult(
        success=True,
        message=f"Successfully inserted {len(objs)} records into {table}",
        count=len(objs),
    )


def import_csv(db: Session, table: str, text: str, mappings: Optional[Dict[str, str]] = None) -> BulkInsertResult:
    parsed = parse_csv(text)
    if mappings is None:
        mappings = default_mappings(parsed.headers)
    rows = build_records(parsed.records, mappings)
    if not rows:
        return BulkInsertResult(success=False, message="No records to import")
    return bulk_insert(db, table, rows)
