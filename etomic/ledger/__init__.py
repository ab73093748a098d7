"""
Ledger collaborators for the swap engine.

- base:   LedgerView protocol, account metadata, value movements
- memory: In-memory reference ledger (simulation and tests)
"""

from .base import (
    LedgerView,
    AccountMeta,
    ValueMovement,
    SYSTEM_PROGRAM_ID,
    LedgerError,
    AccountNotFound,
    AccountAlreadyInUse,
    InsufficientFunds,
)
from .memory import MemoryLedger, MemoryLedgerView

__all__ = [
    "LedgerView",
    "AccountMeta",
    "ValueMovement",
    "SYSTEM_PROGRAM_ID",
    "LedgerError",
    "AccountNotFound",
    "AccountAlreadyInUse",
    "InsufficientFunds",
    "MemoryLedger",
    "MemoryLedgerView",
]
