"""
Vault address derivation.

Each swap has two key-less custody accounts, derived from public parameters:
- funds vault  (role b"swap"):      holds the escrowed value
- data vault   (role b"swap_data"): holds the PaymentRecord

    address = SHA256(role | lock_time_le | secret_hash | [bump] | program_id | "ProgramDerivedAddress")

An address is usable only when it is NOT a point on the ed25519 curve, so no
private key can exist for it. The caller searches for a bump that satisfies
this (see swap.builder.find_vaults); the engine only re-verifies it.
"""

import hashlib
import struct
import logging
from typing import List

from solders.pubkey import Pubkey

from ..core import HASH_SIZE, VAULT_SEED, VAULT_DATA_SEED
from ..errors import InvalidVaultDerivation

log = logging.getLogger(__name__)

PDA_MARKER = b"ProgramDerivedAddress"
MAX_SEED_LEN = 32


def vault_seeds(role_tag: bytes, lock_time: int, secret_hash: bytes) -> List[bytes]:
    """Derivation seeds for a vault, without the bump."""
    if len(secret_hash) != HASH_SIZE:
        raise InvalidVaultDerivation(f"secret_hash must be {HASH_SIZE} bytes")
    return [role_tag, struct.pack("<Q", lock_time), secret_hash]


class VaultDeriver:
    """Derives and verifies vault addresses for one program identity."""

    def __init__(self, program_id: Pubkey):
        self.program_id = program_id

    def derive(self, role_tag: bytes, lock_time: int, secret_hash: bytes,
               bump: int) -> Pubkey:
        """
        Derive a vault address.

        Raises:
            InvalidVaultDerivation: bump out of range, or the result lies on
                the curve (not usable as a key-less account)
        """
        if not 0 <= bump <= 0xff:
            raise InvalidVaultDerivation(f"bump out of range: {bump}")

        hasher = hashlib.sha256()
        for seed in vault_seeds(role_tag, lock_time, secret_hash) + [bytes([bump])]:
            if len(seed) > MAX_SEED_LEN:
                raise InvalidVaultDerivation(f"seed longer than {MAX_SEED_LEN} bytes")
            hasher.update(seed)
        hasher.update(bytes(self.program_id))
        hasher.update(PDA_MARKER)

        address = Pubkey.from_bytes(hasher.digest())
        if address.is_on_curve():
            raise InvalidVaultDerivation(
                f"{role_tag.decode()} bump {bump} yields an on-curve address"
            )
        return address

    def verify(self, candidate: Pubkey, role_tag: bytes, lock_time: int,
               secret_hash: bytes, bump: int) -> bool:
        """True if candidate is the vault derived from these parameters."""
        try:
            expected = self.derive(role_tag, lock_time, secret_hash, bump)
        except InvalidVaultDerivation as e:
            log.debug(f"Vault derivation rejected: {e}")
            return False
        return candidate == expected

    def verify_pair(self, funds_vault: Pubkey, data_vault: Pubkey, lock_time: int,
                    secret_hash: bytes, vault_bump: int, vault_data_bump: int) -> None:
        """Verify both swap vaults, raising InvalidVaultDerivation on mismatch."""
        if not self.verify(funds_vault, VAULT_SEED, lock_time, secret_hash, vault_bump):
            raise InvalidVaultDerivation(
                f"funds vault {funds_vault} does not match bump {vault_bump}"
            )
        if not self.verify(data_vault, VAULT_DATA_SEED, lock_time, secret_hash, vault_data_bump):
            raise InvalidVaultDerivation(
                f"data vault {data_vault} does not match bump {vault_data_bump}"
            )
