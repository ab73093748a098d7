"""
Core types and constants for the etomic swap engine.
"""

import hashlib
import secrets
from enum import IntEnum

from solders.pubkey import Pubkey


class PaymentState(IntEnum):
    """Payment record lifecycle. Forward-only: SENT -> one terminal state."""
    UNINITIALIZED = 0
    SENT = 1
    RECEIVER_SPENT = 2     # Receiver disclosed the secret, funds released
    SENDER_REFUNDED = 3    # Lock time passed, funds returned to sender

    @property
    def is_terminal(self) -> bool:
        return self in (PaymentState.RECEIVER_SPENT, PaymentState.SENDER_REFUNDED)


# =============================================================================
# Constants
# =============================================================================

HASH_SIZE = 32
U64_MAX = 2 ** 64 - 1

# commitment[32] + lock_time:u64 + state:u8
PAYMENT_RECORD_SIZE = 41

# Vault role tags (derivation seeds)
VAULT_SEED = b"swap"
VAULT_DATA_SEED = b"swap_data"

# Asset class sentinel for native-value swaps
NATIVE_ASSET = Pubkey.default()


# =============================================================================
# Secret Utilities
# =============================================================================

def sha256(data: bytes) -> bytes:
    """SHA256 hash."""
    return hashlib.sha256(data).digest()


def generate_secret() -> tuple[bytes, bytes]:
    """
    Generate a random 32-byte secret and its SHA256 hash.

    Returns:
        (secret, secret_hash)
    """
    secret = secrets.token_bytes(HASH_SIZE)
    return secret, sha256(secret)


def verify_preimage(preimage_hex: str, hashlock_hex: str) -> bool:
    """
    Verify that SHA256(preimage) == hashlock.

    Args:
        preimage_hex: 32-byte preimage as hex string
        hashlock_hex: Expected SHA256 hash as hex string

    Returns:
        True if valid
    """
    try:
        preimage = bytes.fromhex(preimage_hex)
        expected = bytes.fromhex(hashlock_hex)
    except (ValueError, TypeError):
        return False
    return sha256(preimage) == expected


def is_native(asset_class: Pubkey) -> bool:
    """True for the zero identity, which stands for native value."""
    return asset_class == NATIVE_ASSET
