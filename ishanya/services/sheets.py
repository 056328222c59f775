# ishanya/services/sheets.py
"""
External intake spreadsheet.

Only a stand-in for now: MockSheetsClient keeps the rows in memory and
behaves like a sheet (1-based rows, header in row 1, deleting a row shifts
the ones below it up).
"""
from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, List

log = logging.getLogger("sheets")

HEADER = [
    "First Name", "Last Name", "DOB", "Gender", "Program", "Center",
    "Contact Person", "Contact Number", "Email", "Address",
]

SEED_ROWS = [
    ["John", "Doe", "2012-05-15", "Male", "Special Education", "Bangalore Center",
     "Jane Doe", "9876543210", "jane.doe@example.com", "123 Main St, Bangalore"],
    ["Alice", "Smith", "2014-02-20", "Female", "Inclusive Learning", "Pune Center",
     "Bob Smith", "8765432109", "bob.smith@example.com", "456 Park Ave, Pune"],
    ["Ravi", "Kumar", "2013-09-10", "Male", "Vocational Training", "Delhi Center",
     "Priya Kumar", "7654321098", "priya.kumar@example.com", "789 Garden Rd, Delhi"],
]


class SheetError(Exception):
    pass


class SheetsClient(ABC):
    """read / append / delete-row surface of the intake sheet."""

    @abstractmethod
    def fetch(self, sheet_id: str, range_: str) -> List[List[Any]]:
        ...

    @abstractmethod
    def append(self, sheet_id: str, range_: str, values: List[List[Any]]) -> None:
        ...

    @abstractmethod
    def delete_row(self, row_index: int) -> None:
        ...


class MockSheetsClient(SheetsClient):
    def __init__(self, rows: List[List[Any]] | None = None, header: List[str] | None = None):
        self.header = list(header or HEADER)
        self.rows = copy.deepcopy(SEED_ROWS if rows is None else rows)

    def fetch(self, sheet_id: str, range_: str) -> List[List[Any]]:
        log.info("Fetching data from sheet %s, range %s", sheet_id, range_)
        return [list(self.header)] + [list(r) for r in self.rows]

    def append(self, sheet_id: str, range_: str, values: List[List[Any]]) -> None:
        log.info("Appending %d row(s) to sheet %s, range %s", len(values), sheet_id, range_)
        for v in values:
            self.rows.append(list(v))

    def delete_row(self, row_index: int) -> None:
        # row 1 is the header
        pos = row_index - 2
        if pos < 0 or pos >= len(self.rows):
            raise SheetError(f"Row {row_index} does not exist")
        log.info("Deleting row %s from sheet", row_index)
        del self.rows[pos]


_client: SheetsClient = MockSheetsClient()


def get_sheets() -> SheetsClient:
    return _client
