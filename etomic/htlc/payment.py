"""
Persisted payment record.

Layout (41 bytes, fixed):
    commitment[32] | lock_time:u64 LE | state:u8
"""

import struct
from dataclasses import dataclass, replace

from ..core import HASH_SIZE, PAYMENT_RECORD_SIZE, U64_MAX, PaymentState
from ..errors import AccountDataTooSmall, InvalidAccountData

_RECORD = struct.Struct("<32sQB")
assert _RECORD.size == PAYMENT_RECORD_SIZE


@dataclass(frozen=True)
class PaymentRecord:
    """Swap state stored in the data vault."""
    commitment: bytes
    lock_time: int
    state: PaymentState

    def __post_init__(self):
        if len(self.commitment) != HASH_SIZE:
            raise InvalidAccountData(f"commitment must be {HASH_SIZE} bytes")
        if not 0 <= self.lock_time <= U64_MAX:
            raise InvalidAccountData(f"lock_time out of u64 range: {self.lock_time}")

    @classmethod
    def unpack(cls, data: bytes) -> "PaymentRecord":
        if len(data) != PAYMENT_RECORD_SIZE:
            raise InvalidAccountData(
                f"payment record must be {PAYMENT_RECORD_SIZE} bytes, got {len(data)}"
            )
        commitment, lock_time, state_byte = _RECORD.unpack(bytes(data))
        try:
            state = PaymentState(state_byte)
        except ValueError:
            raise InvalidAccountData(f"unknown payment state {state_byte}") from None
        return cls(commitment=commitment, lock_time=lock_time, state=state)

    def pack(self) -> bytes:
        return _RECORD.pack(self.commitment, self.lock_time, int(self.state))

    def with_state(self, state: PaymentState) -> "PaymentRecord":
        return replace(self, state=state)


def load_record(data: bytes) -> PaymentRecord:
    """Read a record from the head of a storage buffer (trailing bytes ignored)."""
    if len(data) < PAYMENT_RECORD_SIZE:
        raise InvalidAccountData(
            f"storage holds {len(data)} bytes, record needs {PAYMENT_RECORD_SIZE}"
        )
    return PaymentRecord.unpack(data[:PAYMENT_RECORD_SIZE])


def store_record(buffer: bytearray, record: PaymentRecord) -> None:
    """Write a record into the head of a storage buffer."""
    payload = record.pack()
    if len(buffer) < len(payload):
        raise AccountDataTooSmall(
            f"Account data buffer too small: {len(buffer)} < {len(payload)}"
        )
    buffer[:len(payload)] = payload
