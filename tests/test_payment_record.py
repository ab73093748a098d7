#!/usr/bin/env python3
"""
Payment record codec tests.
"""

import sys
import os
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from etomic.core import PAYMENT_RECORD_SIZE, PaymentState, sha256
from etomic.errors import AccountDataTooSmall, InvalidAccountData
from etomic.htlc.payment import PaymentRecord, load_record, store_record

COMMITMENT = sha256(b"commitment")


class TestPaymentRecordCodec(unittest.TestCase):

    def test_layout(self):
        record = PaymentRecord(COMMITMENT, 1, PaymentState.SENT)
        data = record.pack()

        self.assertEqual(len(data), PAYMENT_RECORD_SIZE)
        self.assertEqual(data[:32], COMMITMENT)
        self.assertEqual(data[32:40], (1).to_bytes(8, "little"))
        self.assertEqual(data[40], 1)

    def test_round_trip_all_states(self):
        for state in PaymentState:
            record = PaymentRecord(COMMITMENT, 1_700_000_000, state)
            self.assertEqual(PaymentRecord.unpack(record.pack()), record)

    def test_state_bytes(self):
        self.assertEqual(
            [int(s) for s in PaymentState],
            [0, 1, 2, 3],
        )

    def test_wrong_length(self):
        data = PaymentRecord(COMMITMENT, 1, PaymentState.SENT).pack()
        for bad in (data[:-1], data + b"\x00", b""):
            with self.assertRaises(InvalidAccountData):
                PaymentRecord.unpack(bad)

    def test_unknown_state_is_fatal(self):
        data = bytearray(PaymentRecord(COMMITMENT, 1, PaymentState.SENT).pack())
        for state_byte in (4, 0xff):
            data[40] = state_byte
            with self.assertRaises(InvalidAccountData):
                PaymentRecord.unpack(bytes(data))

    def test_with_state(self):
        record = PaymentRecord(COMMITMENT, 5, PaymentState.SENT)
        spent = record.with_state(PaymentState.RECEIVER_SPENT)

        self.assertEqual(spent.state, PaymentState.RECEIVER_SPENT)
        self.assertEqual(spent.commitment, COMMITMENT)
        self.assertEqual(record.state, PaymentState.SENT)

    def test_terminal_states(self):
        terminal = {s for s in PaymentState if s.is_terminal}
        self.assertEqual(terminal, {PaymentState.RECEIVER_SPENT, PaymentState.SENDER_REFUNDED})


class TestRecordStorage(unittest.TestCase):

    def test_store_into_exact_buffer(self):
        record = PaymentRecord(COMMITMENT, 1, PaymentState.SENT)
        buffer = bytearray(PAYMENT_RECORD_SIZE)
        store_record(buffer, record)
        self.assertEqual(bytes(buffer), record.pack())

    def test_store_keeps_tail(self):
        record = PaymentRecord(COMMITMENT, 1, PaymentState.SENT)
        buffer = bytearray(b"\xee" * 50)
        store_record(buffer, record)

        self.assertEqual(bytes(buffer[41:]), b"\xee" * 9)
        self.assertEqual(load_record(bytes(buffer)), record)

    def test_buffer_too_small(self):
        record = PaymentRecord(COMMITMENT, 1, PaymentState.SENT)
        buffer = bytearray(40)
        with self.assertRaises(AccountDataTooSmall):
            store_record(buffer, record)
        self.assertEqual(bytes(buffer), bytes(40))

    def test_load_short_storage(self):
        with self.assertRaises(InvalidAccountData):
            load_record(bytes(10))

    def test_bad_commitment_size(self):
        with self.assertRaises(InvalidAccountData):
            PaymentRecord(b"\x00" * 31, 1, PaymentState.SENT)


if __name__ == "__main__":
    unittest.main(verbosity=2)
