"""Base classes for reporting blocks.

Blocks turn engine results into pandas DataFrames for reports and the Excel
export:
- Block abstract base class
- BlockContext for passing values between blocks
- BlockExecutor for dependency resolution and execution
- Topological sort for DAG execution order
"""

from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Dict, Iterable, List
from dataclasses import dataclass, field

from ..logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# Block Context
# =============================================================================

@dataclass
class BlockContext:
    """Keyed store that blocks read inputs from and write outputs to.

    Example:
        context = BlockContext()
        context.set("cap_table_result", result)

        CapTableBlock().execute(context)
        ownership_df = context.get("cap_table_ownership")
    """

    _data: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str) -> Any:
        """Value stored under ``key``.

        Raises:
            KeyError: If key not found in context
        """
        if key not in self._data:
            raise KeyError(f"Key '{key}' not found in context. Available keys: {list(self._data.keys())}")
        return self._data[key]

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def has(self, key: str) -> bool:
        return key in self._data

    def keys(self) -> List[str]:
        return list(self._data.keys())


# =============================================================================
# Block Base Class
# =============================================================================

class Block(ABC):
    """A reporting step with declared inputs and outputs.

    Subclass example:
        class VestingBlock(Block):
            def inputs(self) -> List[str]:
                return ["equity_awards", "as_of_date"]

            def outputs(self) -> List[str]:
                return ["vesting_status"]

            def execute(self, context: BlockContext) -> None:
                awards = context.get("equity_awards")
                context.set("vesting_status", build_frame(awards))
    """

    @abstractmethod
    def inputs(self) -> List[str]:
        """Context keys this block reads."""

    @abstractmethod
    def outputs(self) -> List[str]:
        """Context keys this block writes."""

    @abstractmethod
    def execute(self, context: BlockContext) -> None:
        """Read inputs from context, compute, write outputs to context.

        Raises:
            KeyError: If required inputs not available in context
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(inputs={self.inputs()}, outputs={self.outputs()})"


# =============================================================================
# Dependency Resolution
# =============================================================================

class CircularDependencyError(Exception):
    """Raised when blocks have circular dependencies."""


def _producers(blocks: List[Block]) -> Dict[str, int]:
    """Index of the block writing each context key."""
    producers: Dict[str, int] = {}
    for index, block in enumerate(blocks):
        for key in block.outputs():
            if key in producers:
                raise ValueError(f"Multiple blocks produce '{key}': {blocks[producers[key]]} and {block}")
            producers[key] = index
    return producers


def topological_sort(blocks: List[Block]) -> List[Block]:
    """Order blocks so every producer runs before its consumers.

    Blocks that do not depend on each other keep their given order. Inputs
    no block produces must be supplied by the initial context.

    Raises:
        CircularDependencyError: If blocks have circular dependencies
        ValueError: If two blocks produce the same key

    Example:
        topological_sort([report_block, cap_table_block])
        -> [cap_table_block, report_block]
    """
    blocks = list(blocks)
    producers = _producers(blocks)

    waiting_on = [
        {producers[key] for key in block.inputs() if key in producers}
        for block in blocks
    ]
    consumers: Dict[int, List[int]] = {index: [] for index in range(len(blocks))}
    for index, needs in enumerate(waiting_on):
        for producer in sorted(needs):
            consumers[producer].append(index)

    ready = deque(index for index, needs in enumerate(waiting_on) if not needs)
    order: List[int] = []
    while ready:
        index = ready.popleft()
        order.append(index)
        for consumer in consumers[index]:
            waiting_on[consumer].discard(index)
            if not waiting_on[consumer]:
                ready.append(consumer)

    if len(order) != len(blocks):
        stuck = [blocks[index] for index, needs in enumerate(waiting_on) if needs]
        raise CircularDependencyError(f"Circular dependency detected among blocks: {stuck}")

    return [blocks[index] for index in order]


# =============================================================================
# Block Executor
# =============================================================================

class BlockExecutor:
    """Runs blocks in dependency order and checks what each reads and writes.

    Example:
        context = BlockContext()
        context.set("cap_table_result", result)
        context.set("equity_awards", awards)
        context.set("as_of_date", date(2024, 12, 31))

        BlockExecutor([VestingBlock(), CapTableBlock()]).execute(context)

        vesting_df = context.get("vesting_status")
    """

    def __init__(self, blocks: Iterable[Block]):
        self.order = topological_sort(list(blocks))

    def execute(self, context: BlockContext) -> BlockContext:
        """Execute all blocks and return the context holding their outputs.

        Raises:
            KeyError: If a required input is missing from context
            ValueError: If a block did not write a declared output
        """
        for block in self.order:
            missing = [key for key in block.inputs() if not context.has(key)]
            if missing:
                raise KeyError(
                    f"Block {block} requires input '{missing[0]}' but it's not in context. "
                    f"Available keys: {context.keys()}"
                )

            block.execute(context)

            unwritten = [key for key in block.outputs() if not context.has(key)]
            if unwritten:
                raise ValueError(f"Block {block} declared output '{unwritten[0]}' but didn't write it to context")

            logger.debug("block_executed", block=type(block).__name__, outputs=block.outputs())

        return context
