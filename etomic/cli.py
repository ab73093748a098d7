#!/usr/bin/env python3
"""
etomic command line tool.

Off-engine helpers for swap participants: generate secrets, find vault
bumps, and encode / decode instruction bytes.

Usage:
    etomic secret
    etomic derive --lock-time 1700000000 --secret-hash <64hex>
    etomic encode '{"op": "payment", "secret_hash": "...", "lock_time": 1,
                    "amount": 10000, "receiver": "<base58>"}'
    etomic decode <hex>
"""

import argparse
import json
import logging
import sys
from dataclasses import fields
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from solders.pubkey import Pubkey

from .config import EngineConfig
from .core import HASH_SIZE, NATIVE_ASSET, generate_secret
from .errors import SwapError
from .htlc.instruction import SwapInstruction, decode_instruction, encode_instruction
from .swap.builder import SwapBuilder, find_vaults

log = logging.getLogger(__name__)


class InstructionRequest(BaseModel):
    """JSON description of an instruction to encode."""
    op: Literal["payment", "receiver_spend", "sender_refund"]
    lock_time: int = Field(..., ge=0)
    amount: int = Field(..., ge=0)
    secret: Optional[str] = None           # receiver_spend
    secret_hash: Optional[str] = None      # payment, sender_refund
    receiver: Optional[str] = None         # payment, sender_refund
    sender: Optional[str] = None           # receiver_spend
    asset_class: Optional[str] = None      # omitted = native
    funding_amount: int = Field(0, ge=0)

    @field_validator("secret", "secret_hash")
    @classmethod
    def _check_hex32(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        raw = bytes.fromhex(v)
        if len(raw) != HASH_SIZE:
            raise ValueError(f"expected {HASH_SIZE} bytes of hex, got {len(raw)}")
        return v

    @field_validator("receiver", "sender", "asset_class")
    @classmethod
    def _check_pubkey(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        try:
            Pubkey.from_string(v)
        except (ValueError, TypeError) as e:
            raise ValueError(f"invalid base58 pubkey: {v}") from e
        return v

    @model_validator(mode="after")
    def _check_required(self) -> "InstructionRequest":
        required = {
            "payment": ("secret_hash", "receiver"),
            "receiver_spend": ("secret", "sender"),
            "sender_refund": ("secret_hash", "receiver"),
        }[self.op]
        missing = [name for name in required if getattr(self, name) is None]
        if missing:
            raise ValueError(f"{self.op} requires: {', '.join(missing)}")
        return self

    def asset(self) -> Pubkey:
        return Pubkey.from_string(self.asset_class) if self.asset_class else NATIVE_ASSET

    def build(self, builder: SwapBuilder):
        if self.op == "payment":
            return builder.payment(
                bytes.fromhex(self.secret_hash), self.lock_time, self.amount,
                Pubkey.from_string(self.receiver), self.funding_amount, self.asset(),
            )
        if self.op == "receiver_spend":
            return builder.receiver_spend(
                bytes.fromhex(self.secret), self.lock_time, self.amount,
                Pubkey.from_string(self.sender), self.asset(),
            )
        return builder.sender_refund(
            bytes.fromhex(self.secret_hash), self.lock_time, self.amount,
            Pubkey.from_string(self.receiver), self.asset(),
        )


def instruction_to_dict(ix: SwapInstruction) -> dict:
    """JSON-friendly view of an instruction."""
    result = {"op": type(ix).__name__, "tag": ix.TAG}
    for f in fields(ix):
        value = getattr(ix, f.name)
        if isinstance(value, Pubkey):
            value = str(value)
        elif isinstance(value, bytes):
            value = value.hex()
        result[f.name] = value
    return result


# =============================================================================
# Commands
# =============================================================================

def cmd_secret(args, config: EngineConfig) -> dict:
    secret, secret_hash = generate_secret()
    return {"secret": secret.hex(), "secret_hash": secret_hash.hex()}


def cmd_derive(args, config: EngineConfig) -> dict:
    secret_hash = bytes.fromhex(args.secret_hash)
    if len(secret_hash) != HASH_SIZE:
        raise ValueError(f"secret hash must be {HASH_SIZE} bytes")
    vaults = find_vaults(config.program_id, args.lock_time, secret_hash)
    return {"program_id": str(config.program_id), **vaults.to_dict()}


def cmd_encode(args, config: EngineConfig) -> dict:
    request = InstructionRequest.model_validate_json(args.request)
    ix, vaults = request.build(SwapBuilder(config))
    return {
        "instruction": encode_instruction(ix).hex(),
        **vaults.to_dict(),
    }


def cmd_decode(args, config: EngineConfig) -> dict:
    return instruction_to_dict(decode_instruction(bytes.fromhex(args.data)))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="etomic",
        description="etomic HTLC swap tooling"
    )
    parser.add_argument(
        "--program-id", type=str,
        help="Engine program id (base58). Defaults to ETOMIC_PROGRAM_ID."
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Debug logging"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("secret", help="Generate a secret and its hash")
    p.set_defaults(func=cmd_secret)

    p = sub.add_parser("derive", help="Find vault addresses and bumps")
    p.add_argument("--lock-time", type=int, required=True)
    p.add_argument("--secret-hash", type=str, required=True, help="64 hex chars")
    p.set_defaults(func=cmd_derive)

    p = sub.add_parser("encode", help="Encode an instruction from JSON")
    p.add_argument("request", type=str, help="JSON instruction request")
    p.set_defaults(func=cmd_encode)

    p = sub.add_parser("decode", help="Decode instruction hex")
    p.add_argument("data", type=str, help="Instruction bytes as hex")
    p.set_defaults(func=cmd_decode)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = EngineConfig.from_env()
    if args.program_id:
        config.program_id = Pubkey.from_string(args.program_id)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    )

    try:
        result = args.func(args, config)
    except ValidationError as e:
        log.error(f"Invalid request: {e}")
        return 2
    except SwapError as e:
        log.error(f"Swap error: {e}")
        return 1
    except ValueError as e:
        log.error(f"Invalid input: {e}")
        return 2

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
