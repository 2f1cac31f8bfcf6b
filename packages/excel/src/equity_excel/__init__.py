"""Excel export for equity engine cap tables."""

from .cap_table_workbook import CapTableWorkbookRenderer

__all__ = ["CapTableWorkbookRenderer"]
