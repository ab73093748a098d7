"""
Swap instruction codec.

Each instruction is a tag byte followed by fixed-offset fields. Integers are
little-endian, identities and hashes are raw 32-byte arrays. Total lengths
(tag included) are exact; nothing is length-prefixed.

Layouts:
    Payment (0)        secret_hash[32] lock_time:u64 amount:u64 receiver[32]
                       funding_amount:u64 vault_bump:u8 vault_data_bump:u8      = 91
    TokenPayment (1)   secret_hash[32] lock_time:u64 amount:u64 receiver[32]
                       asset_class[32] funding_amount:u64 vault_bump:u8
                       vault_data_bump:u8                                      = 123
    ReceiverSpend (2)  secret[32] lock_time:u64 amount:u64 sender[32]
                       asset_class[32] vault_bump:u8 vault_data_bump:u8        = 115
    SenderRefund (3)   secret_hash[32] lock_time:u64 amount:u64 receiver[32]
                       asset_class[32] vault_bump:u8 vault_data_bump:u8        = 115
"""

import struct
import logging
from dataclasses import dataclass, fields
from typing import ClassVar, Dict, Type, Union

from solders.pubkey import Pubkey

from ..core import HASH_SIZE, NATIVE_ASSET, U64_MAX, sha256
from ..errors import (
    SwapError, InvalidInputLength, InvalidInstruction, InvalidSecretHash,
    InvalidSecret, InvalidLockTime, InvalidAmount, InvalidReceiverPubkey,
    InvalidSenderPubkey, InvalidTokenProgram,
)

log = logging.getLogger(__name__)

# Field name -> error raised when the field value cannot be represented
_FIELD_ERRORS: Dict[str, Type[SwapError]] = {
    "secret_hash": InvalidSecretHash,
    "secret": InvalidSecret,
    "lock_time": InvalidLockTime,
    "amount": InvalidAmount,
    "funding_amount": InvalidAmount,
    "receiver": InvalidReceiverPubkey,
    "sender": InvalidSenderPubkey,
    "asset_class": InvalidTokenProgram,
    "vault_bump": InvalidInstruction,
    "vault_data_bump": InvalidInstruction,
}


class _Instruction:
    """Shared pack/unpack for the fixed-layout instructions."""
    TAG: ClassVar[int]
    LAYOUT: ClassVar[struct.Struct]

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            error = _FIELD_ERRORS[f.name]
            if f.type is Pubkey:
                if not isinstance(value, Pubkey):
                    raise error(f"{f.name} must be a Pubkey, got {type(value).__name__}")
            elif f.type is bytes:
                if not isinstance(value, bytes) or len(value) != HASH_SIZE:
                    raise error(f"{f.name} must be {HASH_SIZE} bytes")
            elif f.name.endswith("bump"):
                if not isinstance(value, int) or not 0 <= value <= 0xff:
                    raise error(f"{f.name} out of u8 range: {value!r}")
            elif not isinstance(value, int) or not 0 <= value <= U64_MAX:
                raise error(f"{f.name} out of u64 range: {value!r}")

    @property
    def size(self) -> int:
        return self.LAYOUT.size

    def pack(self) -> bytes:
        values = []
        for f in fields(self):
            value = getattr(self, f.name)
            values.append(bytes(value) if isinstance(value, Pubkey) else value)
        return self.LAYOUT.pack(self.TAG, *values)

    @classmethod
    def unpack(cls, data: bytes):
        if len(data) != cls.LAYOUT.size:
            raise InvalidInputLength(
                f"{cls.__name__} expects {cls.LAYOUT.size} bytes, got {len(data)}"
            )
        tag, *values = cls.LAYOUT.unpack(data)
        if tag != cls.TAG:
            raise InvalidInstruction(f"{cls.__name__} tag is {cls.TAG}, got {tag}")
        kwargs = {}
        for f, value in zip(fields(cls), values):
            kwargs[f.name] = Pubkey.from_bytes(value) if f.type is Pubkey else value
        return cls(**kwargs)


@dataclass(frozen=True)
class Payment(_Instruction):
    """Native-value escrow."""
    TAG: ClassVar[int] = 0
    LAYOUT: ClassVar[struct.Struct] = struct.Struct("<B32sQQ32sQBB")

    secret_hash: bytes
    lock_time: int
    amount: int
    receiver: Pubkey
    funding_amount: int
    vault_bump: int
    vault_data_bump: int

    @property
    def asset_class(self) -> Pubkey:
        return NATIVE_ASSET


@dataclass(frozen=True)
class TokenPayment(_Instruction):
    """Fungible-token escrow (zero asset_class means native value)."""
    TAG: ClassVar[int] = 1
    LAYOUT: ClassVar[struct.Struct] = struct.Struct("<B32sQQ32s32sQBB")

    secret_hash: bytes
    lock_time: int
    amount: int
    receiver: Pubkey
    asset_class: Pubkey
    funding_amount: int
    vault_bump: int
    vault_data_bump: int


@dataclass(frozen=True)
class ReceiverSpend(_Instruction):
    TAG: ClassVar[int] = 2
    LAYOUT: ClassVar[struct.Struct] = struct.Struct("<B32sQQ32s32sBB")

    secret: bytes
    lock_time: int
    amount: int
    sender: Pubkey
    asset_class: Pubkey
    vault_bump: int
    vault_data_bump: int

    @property
    def secret_hash(self) -> bytes:
        return sha256(self.secret)


@dataclass(frozen=True)
class SenderRefund(_Instruction):
    TAG: ClassVar[int] = 3
    LAYOUT: ClassVar[struct.Struct] = struct.Struct("<B32sQQ32s32sBB")

    secret_hash: bytes
    lock_time: int
    amount: int
    receiver: Pubkey
    asset_class: Pubkey
    vault_bump: int
    vault_data_bump: int


SwapInstruction = Union[Payment, TokenPayment, ReceiverSpend, SenderRefund]

INSTRUCTIONS: Dict[int, Type[_Instruction]] = {
    cls.TAG: cls for cls in (Payment, TokenPayment, ReceiverSpend, SenderRefund)
}


def decode_instruction(data: bytes) -> SwapInstruction:
    """
    Decode a tagged instruction.

    Args:
        data: Tag byte followed by the variant's fields

    Returns:
        The decoded instruction

    Raises:
        InvalidInputLength: empty input or wrong total length for the tag
        InvalidInstruction: unknown tag
    """
    if not data:
        raise InvalidInputLength("empty instruction data")
    tag = data[0]
    cls = INSTRUCTIONS.get(tag)
    if cls is None:
        raise InvalidInstruction(f"unknown instruction tag {tag}")
    log.debug(f"Decoding {cls.__name__}: input length {len(data)}")
    return cls.unpack(bytes(data))


def encode_instruction(instruction: SwapInstruction) -> bytes:
    """Encode an instruction to its tagged wire form."""
    return instruction.pack()
