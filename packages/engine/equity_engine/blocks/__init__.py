"""Reporting blocks for cap table analysis.

This package turns engine results into DataFrames suitable for Excel rendering
or other consumption.

Architecture:
    Records (schemas) → Engine (calculations/services) → Blocks → DataFrames

Available blocks:
- CapTableBlock: CapTableResult to ownership, by-class and summary DataFrames
- VestingBlock: Vested/unvested status of equity awards as of a date
- ConversionBlock: What-if conversion of SAFEs and notes at a priced round

Usage:
    from equity_engine.blocks import BlockContext, BlockExecutor, CapTableBlock

    context = BlockContext()
    context.set("cap_table_result", result)
    BlockExecutor([CapTableBlock()]).execute(context)

    ownership_df = context.get("cap_table_ownership")
"""

from .base import Block, BlockExecutor, BlockContext, CircularDependencyError, topological_sort
from .cap_table import CapTableBlock
from .vesting import VestingBlock
from .conversion import ConversionBlock

__all__ = [
    "Block",
    "BlockExecutor",
    "BlockContext",
    "CircularDependencyError",
    "topological_sort",
    "CapTableBlock",
    "VestingBlock",
    "ConversionBlock",
]
