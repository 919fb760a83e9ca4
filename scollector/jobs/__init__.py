"""Workbook runs - poll each sheet as one batch."""

from scollector.jobs.runner import WorkbookRunner, RunResult, SheetResult

__all__ = ["WorkbookRunner", "RunResult", "SheetResult"]
