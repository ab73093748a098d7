"""
etomic - HTLC swap engine for cross-chain atomic swaps.

A sender escrows value for a receiver. The receiver claims by revealing a
secret whose hash was committed up front; after the lock time the sender
may reclaim instead. Exactly one of the two ever succeeds.

Usage:
    from etomic import SwapEngine, SwapBuilder, MemoryLedger, EngineConfig
    from etomic import generate_secret, encode_instruction

    config = EngineConfig()
    engine = SwapEngine(config)
    builder = SwapBuilder(config)

    secret, secret_hash = generate_secret()
    ix, vaults = builder.payment(secret_hash, lock_time, 10_000, receiver)
    view = ledger.view(sender, vaults.funds_vault, vaults.data_vault)
    result = engine.process(encode_instruction(ix), view)
"""

from .core import (
    PaymentState,
    NATIVE_ASSET,
    PAYMENT_RECORD_SIZE,
    VAULT_SEED,
    VAULT_DATA_SEED,
    generate_secret,
    verify_preimage,
    sha256,
)
from .config import EngineConfig
from .errors import SwapError, error_for_code

from .htlc import (
    Payment,
    TokenPayment,
    ReceiverSpend,
    SenderRefund,
    SwapInstruction,
    decode_instruction,
    encode_instruction,
    PaymentRecord,
    payment_commitment,
    VaultDeriver,
)
from .ledger import LedgerView, MemoryLedger, ValueMovement, LedgerError
from .swap import SwapEngine, ExecutionResult, SwapBuilder, SwapVaults, find_vaults

__version__ = "0.1.0"
__all__ = [
    # Core
    "PaymentState",
    "NATIVE_ASSET",
    "PAYMENT_RECORD_SIZE",
    "VAULT_SEED",
    "VAULT_DATA_SEED",
    "generate_secret",
    "verify_preimage",
    "sha256",
    "EngineConfig",
    "SwapError",
    "error_for_code",
    # HTLC primitives
    "Payment",
    "TokenPayment",
    "ReceiverSpend",
    "SenderRefund",
    "SwapInstruction",
    "decode_instruction",
    "encode_instruction",
    "PaymentRecord",
    "payment_commitment",
    "VaultDeriver",
    # Ledger
    "LedgerView",
    "MemoryLedger",
    "ValueMovement",
    "LedgerError",
    # Swap
    "SwapEngine",
    "ExecutionResult",
    "SwapBuilder",
    "SwapVaults",
    "find_vaults",
]
