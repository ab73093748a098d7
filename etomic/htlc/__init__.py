"""
HTLC protocol primitives: instruction codec, payment record, commitment and
vault derivation.

These are pure functions of their inputs. The swap engine (etomic.swap)
composes them into guarded state transitions.
"""

from .instruction import (
    Payment,
    TokenPayment,
    ReceiverSpend,
    SenderRefund,
    SwapInstruction,
    INSTRUCTIONS,
    decode_instruction,
    encode_instruction,
)
from .payment import PaymentRecord, load_record, store_record
from .commitment import payment_commitment, secret_hash_of
from .vault import VaultDeriver, vault_seeds

__all__ = [
    # Instructions
    "Payment",
    "TokenPayment",
    "ReceiverSpend",
    "SenderRefund",
    "SwapInstruction",
    "INSTRUCTIONS",
    "decode_instruction",
    "encode_instruction",
    # Record
    "PaymentRecord",
    "load_record",
    "store_record",
    # Commitment
    "payment_commitment",
    "secret_hash_of",
    # Vaults
    "VaultDeriver",
    "vault_seeds",
]
