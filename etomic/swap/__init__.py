"""
Swap orchestration: the engine state machine and caller-side builders.
"""

from .engine import SwapEngine, ExecutionResult
from .builder import SwapBuilder, SwapVaults, find_vaults

__all__ = [
    "SwapEngine",
    "ExecutionResult",
    "SwapBuilder",
    "SwapVaults",
    "find_vaults",
]
