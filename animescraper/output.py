"""Writers for listing entries and detail records."""

from __future__ import annotations

import csv
import json
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence, TextIO


class Record(Protocol):
    """ListingEntry and DetailRecord both satisfy this."""

    def to_dict(self) -> Dict[str, Any]:
        ...


class ResultWriter(ABC):
    """Base interface for output adapters; ``write`` returns the row count."""

    def write(self, records: Sequence[Record]) -> int:
        rows = [record.to_dict() for record in records]
        self._write_rows(rows)
        return len(rows)

    @abstractmethod
    def _write_rows(self, rows: List[Dict[str, Any]]) -> None:
        """Persist already flattened rows."""


class PrintWriter(ResultWriter):
    """Human readable blocks, one per record, separated by a blank line."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream

    def _write_rows(self, rows: List[Dict[str, Any]]) -> None:
        stream = self.stream or sys.stdout
        width = max((len(key) for row in rows for key in row), default=0)
        for index, row in enumerate(rows):
            if index:
                stream.write("\n")
            for key, value in row.items():
                stream.write(f"{key.ljust(width)}  {_cell(value)}\n")


class JsonLinesWriter(ResultWriter):
    def __init__(self, path: str = "output.txt") -> None:
        self.path = Path(path)

    def _write_rows(self, rows: List[Dict[str, Any]]) -> None:
        with self.path.open("w", encoding="utf-8") as handle:
            for row in rows:
                handle.write(json.dumps(row, ensure_ascii=False))
                handle.write("\n")


class JsonWriter(ResultWriter):
    def __init__(self, path: str = "output.json") -> None:
        self.path = Path(path)

    def _write_rows(self, rows: List[Dict[str, Any]]) -> None:
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump(rows, handle, ensure_ascii=False, indent=2)


class CsvWriter(ResultWriter):
    """One header row taken from the record fields; ``None`` becomes an empty cell."""

    def __init__(self, path: str = "output.csv") -> None:
        self.path = Path(path)

    def _write_rows(self, rows: List[Dict[str, Any]]) -> None:
        if not rows:
            return
        with self.path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.DictWriter(handle, fieldnames=list(rows[0]))
            writer.writeheader()
            for row in rows:
                writer.writerow({key: _cell(value) for key, value in row.items()})


def build_writer(mode: str, path: Optional[str] = None) -> ResultWriter:
    if mode == "txt":
        return JsonLinesWriter(path or "output.txt")
    if mode == "json":
        return JsonWriter(path or "output.json")
    if mode == "csv":
        return CsvWriter(path or "output.csv")
    return PrintWriter()


def _cell(value: Any) -> str:
    return "" if value is None else str(value)
