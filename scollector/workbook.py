"""
Device Workbook - host list source and result sink.

Path: scollector/workbook.py

Reads host addresses from one column of every worksheet and writes
extracted values back into another column of the same row. Each sheet is
polled as its own batch; the row number is the context token that routes
a result back to its cell.
"""

import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from openpyxl import load_workbook
from openpyxl.utils import column_index_from_string
from openpyxl.utils.exceptions import InvalidFileException


logger = logging.getLogger(__name__)


class WorkbookError(Exception):
    """Workbook could not be opened, read or saved."""


@dataclass
class WorkbookOptions:
    """Column layout of the device workbook."""
    host_column: str = "B"
    result_column: str = "C"
    header_rows: int = 1
    write_errors: bool = False

    def __post_init__(self):
        self.host_column = self.host_column.upper()
        self.result_column = self.result_column.upper()
        for name in ("host_column", "result_column"):
            letter = getattr(self, name)
            try:
                column_index_from_string(letter)
            except ValueError as e:
                raise ValueError(f"Invalid {name.replace('_', ' ')} {letter!r}: {e}") from e
        if self.header_rows < 0:
            raise ValueError("header_rows cannot be negative")

    @property
    def host_index(self) -> int:
        return column_index_from_string(self.host_column)

    @property
    def result_index(self) -> int:
        return column_index_from_string(self.result_column)


class DeviceWorkbook:
    """
    Workbook of device hosts, one sheet per grouping.

    Usage:
        wb = DeviceWorkbook.open(Path("access_points.xlsx"))
        for sheet in wb.sheet_names:
            hosts = wb.read_hosts(sheet)          # [(address, row), ...]
            ...
            wb.write_value(sheet, row, "SN12345")
        wb.save()
    """

    def __init__(self, workbook, path: Optional[Path] = None, options: Optional[WorkbookOptions] = None):
        self._workbook = workbook
        self.path = path
        self.options = options or WorkbookOptions()

    @classmethod
    def open(cls, path: Union[str, Path], options: Optional[WorkbookOptions] = None) -> "DeviceWorkbook":
        """
        Load a workbook from disk.

        Raises:
            WorkbookError: File missing or not a readable xlsx workbook.
        """
        path = Path(path).expanduser()
        try:
            workbook = load_workbook(path)
        except (OSError, InvalidFileException, zipfile.BadZipFile, KeyError, ValueError) as e:
            raise WorkbookError(f"Failed to open workbook {path}: {e}") from e

        logger.debug(f"Opened workbook {path} ({len(workbook.sheetnames)} sheets)")
        return cls(workbook, path=path, options=options)

    @property
    def sheet_names(self) -> List[str]:
        return list(self._workbook.sheetnames)

    def read_hosts(self, sheet_name: str) -> List[Tuple[str, int]]:
        """
        Read host addresses from a sheet.

        Header rows and blank cells are skipped. Duplicate addresses are
        kept; each row gets its own result.

        Returns:
            List of (address, row_number) in row order.

        Raises:
            WorkbookError: Sheet does not exist or cannot be read.
        """
        try:
            sheet = self._workbook[sheet_name]
        except KeyError as e:
            raise WorkbookError(f"Sheet {sheet_name!r} not found") from e

        col = self.options.host_index
        first_row = self.options.header_rows + 1
        hosts = []

        try:
            rows = sheet.iter_rows(min_row=first_row, min_col=col, max_col=col)
            for row_number, (cell,) in enumerate(rows, start=first_row):
                value = cell.value
                if value is None:
                    continue
                address = str(value).strip()
                if address:
                    hosts.append((address, row_number))
        except (AttributeError, TypeError, ValueError) as e:
            raise WorkbookError(f"Failed to read sheet {sheet_name!r}: {e}") from e

        return hosts

    def write_value(self, sheet_name: str, row: int, value: str) -> str:
        """
        Write a value into the result column of a row.

        Returns:
            The cell coordinate written (e.g. "C5").
        """
        try:
            sheet = self._workbook[sheet_name]
        except KeyError as e:
            raise WorkbookError(f"Sheet {sheet_name!r} not found") from e

        cell = sheet.cell(row=row, column=self.options.result_index)
        cell.value = value
        return cell.coordinate

    def read_value(self, sheet_name: str, row: int):
        """Read the result column of a row."""
        return self._workbook[sheet_name].cell(row=row, column=self.options.result_index).value

    def save(self, path: Optional[Union[str, Path]] = None) -> Path:
        """
        Save the workbook.

        Args:
            path: Destination (default: the file it was opened from).

        Raises:
            WorkbookError: No destination, or the file cannot be written.
        """
        target = Path(path).expanduser() if path else self.path
        if target is None:
            raise WorkbookError("No path to save workbook to")

        try:
            self._workbook.save(target)
        except OSError as e:
            raise WorkbookError(f"Failed to save workbook {target}: {e}") from e

        logger.debug(f"Saved workbook {target}")
        return target

    def close(self):
        self._workbook.close()
