"""
Payment commitment.

    commitment = SHA256(receiver | sender | secret_hash | asset_class | amount_le_u64)

The commitment is the only binding between an escrow and the parameters
that may release it. It is minted by Payment and recomputed by
ReceiverSpend / SenderRefund from the caller's claim.
"""

import hashlib
import struct

from solders.pubkey import Pubkey

from ..core import HASH_SIZE, sha256


def payment_commitment(receiver: Pubkey, sender: Pubkey, secret_hash: bytes,
                       asset_class: Pubkey, amount: int) -> bytes:
    """
    Compute the 32-byte payment commitment.

    Args:
        receiver: Identity allowed to claim with the secret
        sender: Identity allowed to refund after the lock time
        secret_hash: SHA256 of the swap secret
        asset_class: Token identity, or the zero identity for native value
        amount: Escrowed amount in the asset's smallest unit

    Returns:
        32-byte digest
    """
    if len(secret_hash) != HASH_SIZE:
        raise ValueError(f"secret_hash must be {HASH_SIZE} bytes, got {len(secret_hash)}")

    hasher = hashlib.sha256()
    hasher.update(bytes(receiver))
    hasher.update(bytes(sender))
    hasher.update(secret_hash)
    hasher.update(bytes(asset_class))
    hasher.update(struct.pack("<Q", amount))
    return hasher.digest()


def secret_hash_of(secret: bytes) -> bytes:
    """SHA256 of a disclosed secret."""
    return sha256(secret)
