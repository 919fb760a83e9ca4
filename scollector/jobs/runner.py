"""
Workbook Runner - poll every sheet of a device workbook.

Path: scollector/jobs/runner.py

Flow:
1. Open the workbook (fatal on failure)
2. For each sheet, read hosts; skip sheets that fail or are empty
3. Poll the sheet's hosts as one batch
4. Write extracted values back to each host's row
5. Save the workbook once, after all sheets (fatal on failure)

Per-host failures are reported and left out of the workbook unless
write_errors is enabled.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Callable, Union

from scollector.core.credentials import SSHCredentials
from scollector.core.pattern import ExtractionPattern
from scollector.ssh.executor import (
    SSHExecutorPool,
    ExecutorOptions,
    PollBatch,
    PollResult,
)
from scollector.workbook import DeviceWorkbook, WorkbookError, WorkbookOptions


# Module logger
logger = logging.getLogger(__name__)

ERROR_PREFIX = "ERROR: "


@dataclass
class SheetResult:
    """Outcome of one sheet."""
    sheet: str
    batch: Optional[PollBatch] = None
    skipped_reason: Optional[str] = None
    written: int = 0

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None

    @property
    def success_count(self) -> int:
        return self.batch.summary.success if self.batch else 0

    @property
    def failed_count(self) -> int:
        return self.batch.summary.failed if self.batch else 0

    @property
    def total_hosts(self) -> int:
        return self.batch.targets if self.batch else 0


@dataclass
class RunResult:
    """Result of a full workbook run."""
    workbook: str
    saved_to: Optional[Path] = None
    sheets: List[SheetResult] = field(default_factory=list)
    duration_seconds: float = 0

    @property
    def total_hosts(self) -> int:
        return sum(s.total_hosts for s in self.sheets)

    @property
    def success_count(self) -> int:
        return sum(s.success_count for s in self.sheets)

    @property
    def failed_count(self) -> int:
        return sum(s.failed_count for s in self.sheets)

    @property
    def skipped_sheets(self) -> List[SheetResult]:
        return [s for s in self.sheets if s.skipped]


SheetProgress = Callable[[str, int, int, PollResult], None]


class WorkbookRunner:
    """
    Poll every host listed in a device workbook.

    Usage:
        runner = WorkbookRunner(
            credentials=creds,
            pattern=ExtractionPattern.compile(),
            options=ExecutorOptions(max_workers=16),
        )
        result = runner.run(Path("access_points.xlsx"))
        print(f"{result.success_count}/{result.total_hosts} hosts")
    """

    def __init__(
        self,
        credentials: SSHCredentials,
        pattern: ExtractionPattern,
        options: Optional[ExecutorOptions] = None,
        workbook_options: Optional[WorkbookOptions] = None,
        client_factory=None,
    ):
        """
        Initialize workbook runner.

        Args:
            credentials: SSH credentials shared by all hosts.
            pattern: Compiled extraction pattern.
            options: Executor options (command, timeouts, concurrency).
            workbook_options: Column layout and error write-back policy.
            client_factory: Optional SSH client factory (testing).
        """
        self.credentials = credentials
        self.pattern = pattern
        self.options = options or ExecutorOptions()
        self.workbook_options = workbook_options or WorkbookOptions()
        self.pool = SSHExecutorPool(
            credentials=credentials,
            pattern=pattern,
            options=self.options,
            client_factory=client_factory,
        )

    def run(
        self,
        workbook_path: Union[str, Path],
        sheets: Optional[List[str]] = None,
        output_path: Optional[Union[str, Path]] = None,
        progress_callback: Optional[SheetProgress] = None,
    ) -> RunResult:
        """
        Poll all (or the selected) sheets and save the workbook.

        Args:
            workbook_path: Workbook to read hosts from.
            sheets: Sheet names to process (default: all, in workbook order).
            output_path: Where to save (default: overwrite workbook_path).
            progress_callback: Optional callback(sheet, completed, total, result).

        Returns:
            RunResult with per-sheet batches.

        Raises:
            WorkbookError: Workbook cannot be opened or saved.
        """
        start_time = time.time()
        workbook = DeviceWorkbook.open(workbook_path, options=self.workbook_options)
        result = RunResult(workbook=str(workbook_path))

        try:
            sheet_names = workbook.sheet_names
            if sheets:
                missing = [s for s in sheets if s not in sheet_names]
                for name in missing:
                    logger.warning(f"Sheet {name!r} not found in {workbook_path}. Skipping.")
                    result.sheets.append(SheetResult(sheet=name, skipped_reason="sheet not found"))
                sheet_names = [s for s in sheet_names if s in sheets]

            for sheet_name in sheet_names:
                result.sheets.append(self.run_sheet(workbook, sheet_name, progress_callback))

            result.saved_to = workbook.save(output_path)
        finally:
            workbook.close()

        result.duration_seconds = time.time() - start_time
        logger.info(
            f"Workbook done: {result.success_count}/{result.total_hosts} hosts, "
            f"{len(result.skipped_sheets)} sheets skipped, saved to {result.saved_to}"
        )
        return result

    def run_sheet(
        self,
        workbook: DeviceWorkbook,
        sheet_name: str,
        progress_callback: Optional[SheetProgress] = None,
    ) -> SheetResult:
        """Poll one sheet and write its results. Never raises for per-sheet problems."""
        logger.info(f"--- Processing sheet: {sheet_name} ---")

        try:
            hosts = workbook.read_hosts(sheet_name)
        except WorkbookError as e:
            logger.warning(f"Failed to get rows from sheet {sheet_name}: {e}. Skipping.")
            return SheetResult(sheet=sheet_name, skipped_reason=str(e))

        if not hosts:
            logger.warning(f"No hosts found in sheet {sheet_name}. Skipping.")
            return SheetResult(sheet=sheet_name, skipped_reason="no hosts")

        logger.info(f"Starting SSH connections to {len(hosts)} hosts from sheet {sheet_name}")

        callback = None
        if progress_callback:
            def callback(completed, total, poll_result):
                progress_callback(sheet_name, completed, total, poll_result)

        batch = self.pool.poll(hosts, progress_callback=callback)
        sheet_result = SheetResult(sheet=sheet_name, batch=batch)

        for poll_result in batch:
            row = poll_result.context
            if poll_result.success:
                cell = workbook.write_value(sheet_name, row, poll_result.data)
                sheet_result.written += 1
                logger.debug(f"[{sheet_name}] {poll_result.host} -> {cell} = {poll_result.data}")
            else:
                logger.debug(f"[{sheet_name}] Error polling {poll_result.host}: {poll_result.error}")
                if self.workbook_options.write_errors:
                    workbook.write_value(sheet_name, row, f"{ERROR_PREFIX}{poll_result.error.message}")
                    sheet_result.written += 1

        logger.info(f"--- Finished processing sheet: {sheet_name} ({batch.summary}) ---")
        return sheet_result
