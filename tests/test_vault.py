#!/usr/bin/env python3
"""
Vault derivation tests.

Bumps are searched off-engine with Pubkey.find_program_address and must
verify under VaultDeriver, which recomputes the address itself.
"""

import sys
import os
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from solders.pubkey import Pubkey

from etomic.core import VAULT_SEED, VAULT_DATA_SEED, sha256
from etomic.errors import InvalidVaultDerivation
from etomic.htlc.vault import VaultDeriver, vault_seeds
from etomic.swap.builder import find_vaults


class TestVaultDerivation(unittest.TestCase):

    def setUp(self):
        self.program_id = Pubkey.new_unique()
        self.deriver = VaultDeriver(self.program_id)
        self.secret_hash = sha256(bytes(32))
        self.lock_time = 1

    def test_seeds(self):
        seeds = vault_seeds(VAULT_SEED, 1, self.secret_hash)
        self.assertEqual(seeds, [b"swap", (1).to_bytes(8, "little"), self.secret_hash])

    def test_matches_find_program_address(self):
        for lock_time in (0, 1, 1_700_000_000, 2 ** 64 - 1):
            vaults = find_vaults(self.program_id, lock_time, self.secret_hash)
            self.assertEqual(
                self.deriver.derive(VAULT_SEED, lock_time, self.secret_hash, vaults.vault_bump),
                vaults.funds_vault,
            )
            self.assertEqual(
                self.deriver.derive(VAULT_DATA_SEED, lock_time, self.secret_hash,
                                    vaults.vault_data_bump),
                vaults.data_vault,
            )

    def test_derived_vaults_are_off_curve(self):
        vaults = find_vaults(self.program_id, self.lock_time, self.secret_hash)
        self.assertFalse(vaults.funds_vault.is_on_curve())
        self.assertFalse(vaults.data_vault.is_on_curve())

    def test_bumps_above_canonical_are_on_curve(self):
        for lock_time in range(8):
            vaults = find_vaults(self.program_id, lock_time, self.secret_hash)
            for bump in range(vaults.vault_bump + 1, 256):
                with self.assertRaises(InvalidVaultDerivation):
                    self.deriver.derive(VAULT_SEED, lock_time, self.secret_hash, bump)

    def test_verify(self):
        vaults = find_vaults(self.program_id, self.lock_time, self.secret_hash)
        self.assertTrue(self.deriver.verify(
            vaults.funds_vault, VAULT_SEED, self.lock_time, self.secret_hash, vaults.vault_bump
        ))
        # Wrong bump
        self.assertFalse(self.deriver.verify(
            vaults.funds_vault, VAULT_SEED, self.lock_time, self.secret_hash,
            (vaults.vault_bump - 1) % 256,
        ))
        # Wrong role
        self.assertFalse(self.deriver.verify(
            vaults.funds_vault, VAULT_DATA_SEED, self.lock_time, self.secret_hash,
            vaults.vault_bump,
        ))
        # Wrong lock time
        self.assertFalse(self.deriver.verify(
            vaults.funds_vault, VAULT_SEED, self.lock_time + 1, self.secret_hash,
            vaults.vault_bump,
        ))

    def test_program_id_binds(self):
        vaults = find_vaults(self.program_id, self.lock_time, self.secret_hash)
        other = VaultDeriver(Pubkey.new_unique())
        self.assertFalse(other.verify(
            vaults.funds_vault, VAULT_SEED, self.lock_time, self.secret_hash, vaults.vault_bump
        ))

    def test_funds_and_data_vaults_differ(self):
        vaults = find_vaults(self.program_id, self.lock_time, self.secret_hash)
        self.assertNotEqual(vaults.funds_vault, vaults.data_vault)

    def test_verify_pair(self):
        vaults = find_vaults(self.program_id, self.lock_time, self.secret_hash)
        self.deriver.verify_pair(
            vaults.funds_vault, vaults.data_vault, self.lock_time, self.secret_hash,
            vaults.vault_bump, vaults.vault_data_bump,
        )
        with self.assertRaises(InvalidVaultDerivation):
            self.deriver.verify_pair(
                vaults.data_vault, vaults.funds_vault, self.lock_time, self.secret_hash,
                vaults.vault_bump, vaults.vault_data_bump,
            )

    def test_bump_out_of_range(self):
        with self.assertRaises(InvalidVaultDerivation):
            self.deriver.derive(VAULT_SEED, 1, self.secret_hash, 256)

    def test_short_secret_hash(self):
        with self.assertRaises(InvalidVaultDerivation):
            vault_seeds(VAULT_SEED, 1, b"\x00" * 20)


if __name__ == "__main__":
    unittest.main(verbosity=2)
