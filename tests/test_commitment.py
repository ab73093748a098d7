#!/usr/bin/env python3
"""
Payment commitment tests.
"""

import sys
import os
import hashlib
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from solders.pubkey import Pubkey

from etomic.core import NATIVE_ASSET, sha256
from etomic.htlc.commitment import payment_commitment, secret_hash_of


class TestPaymentCommitment(unittest.TestCase):

    def setUp(self):
        self.receiver = Pubkey.new_unique()
        self.sender = Pubkey.new_unique()
        self.token = Pubkey.new_unique()
        self.secret_hash = sha256(bytes(32))

    def commit(self, **overrides):
        params = dict(
            receiver=self.receiver,
            sender=self.sender,
            secret_hash=self.secret_hash,
            asset_class=NATIVE_ASSET,
            amount=10000,
        )
        params.update(overrides)
        return payment_commitment(**params)

    def test_matches_concatenated_digest(self):
        expected = hashlib.sha256(
            bytes(self.receiver) + bytes(self.sender) + self.secret_hash
            + bytes(32) + (10000).to_bytes(8, "little")
        ).digest()
        self.assertEqual(self.commit(), expected)

    def test_deterministic(self):
        self.assertEqual(self.commit(), self.commit())
        self.assertEqual(len(self.commit()), 32)

    def test_not_symmetric_in_parties(self):
        swapped = self.commit(receiver=self.sender, sender=self.receiver)
        self.assertNotEqual(self.commit(), swapped)

    def test_every_input_binds(self):
        base = self.commit()
        variants = [
            self.commit(receiver=Pubkey.new_unique()),
            self.commit(sender=Pubkey.new_unique()),
            self.commit(secret_hash=sha256(b"other")),
            self.commit(asset_class=self.token),
            self.commit(amount=10001),
        ]
        for variant in variants:
            self.assertNotEqual(base, variant)
        self.assertEqual(len(set(variants)), len(variants))

    def test_rejects_short_secret_hash(self):
        with self.assertRaises(ValueError):
            self.commit(secret_hash=b"\x00" * 16)

    def test_secret_hash_of(self):
        secret = b"\x42" * 32
        self.assertEqual(secret_hash_of(secret), hashlib.sha256(secret).digest())


if __name__ == "__main__":
    unittest.main(verbosity=2)
